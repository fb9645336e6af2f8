"""Scalar converter catalog.

A converter is a pair of functions between a plist value and a typed
Python value. ``decode`` raises a ``ConversionError`` when the value has the
wrong shape; ``encode`` is total for values of the target type.

Converters are looked up by type annotation. Concrete types and ``NewType``
aliases come from the registry; ``List[T]``, ``Dict[str, T]``,
``Optional[T]``, ``Any``, string-valued ``Enum`` classes and record classes
(anything with ``from_plist``/``to_plist``) are composed on demand, so new
records never need a hand-written converter.
"""

import math
import re
from dataclasses import astuple, dataclass
from enum import Enum
from typing import (
    Any,
    Callable,
    Dict,
    List,
    NamedTuple,
    NewType,
    Optional,
    Tuple,
    Union,
    get_args,
    get_origin,
)

from .errors import (
    BadNumberError,
    ConversionError,
    ElementError,
    EntryError,
    InvalidCodepointError,
    KerningError,
    NotNumericError,
    OutOfBoundsError,
    UnknownTagError,
    UnsupportedArrayError,
    WrongVariantError,
)
from .values import INT64_MAX, INT64_MIN, is_integer, is_number, parse_int, plist_kind


class Converter(NamedTuple):
    """Bidirectional conversion between a plist value and a typed value."""
    name: str
    decode: Callable[[Any], Any]
    encode: Callable[[Any], Any]


_REGISTRY: Dict[Any, Converter] = {}


def register_converter(
    tp: Any,
    decode: Callable[[Any], Any],
    encode: Callable[[Any], Any],
    name: Optional[str] = None,
) -> Converter:
    """Register the converter used for fields annotated with ``tp``.

    Args:
        tp: A class, ``NewType`` or ``typing`` alias used in record annotations
        decode: Plist value -> typed value; raises ``ConversionError``
        encode: Typed value -> plist value
        name: Display name (defaults to the type's name)

    Returns:
        The registered converter
    """
    converter = Converter(name or _type_name(tp), decode, encode)
    _REGISTRY[tp] = converter
    return converter


def get_converter(tp: Any) -> Converter:
    """Resolve the converter for a type annotation.

    Raises:
        TypeError: If no converter is registered or derivable for ``tp``
    """
    converter = _REGISTRY.get(tp)
    if converter is not None:
        return converter

    origin = get_origin(tp)
    args = get_args(tp)

    if origin is Union:
        members = [arg for arg in args if arg is not type(None)]
        if len(members) < len(args):
            # Optional[T]: absence is handled by the schema engine.
            inner = members[0] if len(members) == 1 else Union[tuple(members)]
            return get_converter(inner)
        raise TypeError(f"no converter registered for {tp!r}")

    if origin is list:
        return _list_converter(get_converter(args[0]) if args else _ANY)

    if origin is dict:
        if args and args[0] is not str:
            raise TypeError(f"plist dictionary keys are strings, got {tp!r}")
        if not args or args[1] is Any:
            return _DICT
        return _dict_converter(get_converter(args[1]))

    if tp is Any:
        return _ANY

    if isinstance(tp, type):
        if issubclass(tp, Enum):
            return _enum_converter(tp)
        if hasattr(tp, "from_plist") and hasattr(tp, "to_plist"):
            return Converter(tp.__name__, tp.from_plist, _encode_record)

    raise TypeError(f"no converter registered for {tp!r}")


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


def _encode_record(record: Any) -> Any:
    return record.to_plist()


# ---------------------------------------------------------------------------
# Composite converters
# ---------------------------------------------------------------------------

def _passthrough(value: Any) -> Any:
    return value


_ANY = Converter("Any", _passthrough, _passthrough)


def _decode_dict(value: Any) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise WrongVariantError("dictionary", value)
    return dict(value)


_DICT = Converter("Dict[str, Any]", _decode_dict, dict)


def _list_converter(element: Converter) -> Converter:
    def decode(value: Any) -> List[Any]:
        if not isinstance(value, list):
            raise WrongVariantError("array", value)
        result = []
        for index, item in enumerate(value):
            try:
                result.append(element.decode(item))
            except ConversionError as exc:
                raise ElementError(index, exc) from exc
        return result

    def encode(value: Any) -> List[Any]:
        return [element.encode(item) for item in value]

    return Converter(f"List[{element.name}]", decode, encode)


def _dict_converter(entry: Converter) -> Converter:
    def decode(value: Any) -> Dict[str, Any]:
        if not isinstance(value, dict):
            raise WrongVariantError("dictionary", value)
        result = {}
        for key, item in value.items():
            try:
                result[key] = entry.decode(item)
            except ConversionError as exc:
                raise EntryError(key, exc) from exc
        return result

    def encode(value: Any) -> Dict[str, Any]:
        return {key: entry.encode(item) for key, item in value.items()}

    return Converter(f"Dict[str, {entry.name}]", decode, encode)


def _enum_kind(cls: type) -> str:
    # NodeType -> "node type"
    return re.sub(r"(?<!^)(?=[A-Z])", " ", cls.__name__).lower()


def _enum_converter(cls: type) -> Converter:
    kind = _enum_kind(cls)
    by_value = {member.value: member for member in cls}

    def decode(value: Any) -> Any:
        if not isinstance(value, str):
            raise WrongVariantError(f"{kind} string", value)
        try:
            return by_value[value]
        except KeyError:
            raise UnknownTagError(kind, value, list(by_value)) from None

    def encode(member: Any) -> str:
        return member.value

    return Converter(cls.__name__, decode, encode)


# ---------------------------------------------------------------------------
# Primitive scalars
# ---------------------------------------------------------------------------

U16 = NewType("U16", int)
U16_MAX = 0xFFFF


def decode_bool(value: Any) -> bool:
    """Integer 0/1, or a string holding integer 0/1 (quoted by old writers)."""
    if is_integer(value):
        number = value
    elif isinstance(value, str):
        number = parse_int(value)
        if number is None:
            raise BadNumberError("0 or 1", value)
    else:
        raise WrongVariantError("integer 0 or 1", value)
    if number == 0:
        return False
    if number == 1:
        return True
    raise BadNumberError("0 or 1", number)


def encode_bool(value: bool) -> int:
    return 1 if value else 0


def decode_u16(value: Any) -> int:
    if is_integer(value):
        number = value
    elif isinstance(value, str):
        number = parse_int(value)
        if number is None:
            raise WrongVariantError("integer", value)
    else:
        raise WrongVariantError("integer", value)
    if number < 0 or number > U16_MAX:
        raise OutOfBoundsError(number, 0, U16_MAX)
    return number


def decode_int(value: Any) -> int:
    if not is_integer(value):
        raise WrongVariantError("integer", value)
    return value


def decode_float(value: Any) -> float:
    if not is_number(value):
        raise WrongVariantError("number", value)
    return float(value)


def encode_float(value: float) -> Union[int, float]:
    """Write integral floats in the 64-bit range as integers; the reader widens them back."""
    value = float(value)
    if math.isfinite(value) and value.is_integer() and INT64_MIN <= value <= INT64_MAX:
        return int(value)
    return value


def decode_str(value: Any) -> str:
    if not isinstance(value, str):
        raise WrongVariantError("string", value)
    return value


GlyphName = NewType("GlyphName", str)


def decode_glyph_name(value: Any) -> str:
    if isinstance(value, str):
        return value
    # Glyphs.app drops the quotes around the names "infinity" and "nan",
    # which then read back as floats.
    if isinstance(value, float):
        if math.isinf(value):
            return "infinity"
        if math.isnan(value):
            return "nan"
    raise WrongVariantError("string", value)


# ---------------------------------------------------------------------------
# Points and scales
# ---------------------------------------------------------------------------

class Point(NamedTuple):
    x: float = 0.0
    y: float = 0.0


class Scale(NamedTuple):
    horizontal: float = 1.0
    vertical: float = 1.0


def _decode_pair(value: Any, kind: str, names: Tuple[str, str]) -> Tuple[float, float]:
    if not isinstance(value, list) or len(value) != 2:
        raise WrongVariantError(f"{kind} array of length 2", value)
    for name, item in zip(names, value):
        if not is_number(item):
            raise NotNumericError(kind, name, item)
    return float(value[0]), float(value[1])


def decode_point(value: Any) -> Point:
    return Point(*_decode_pair(value, "point", ("x coordinate", "y coordinate")))


def decode_scale(value: Any) -> Scale:
    return Scale(*_decode_pair(value, "scale", ("horizontal value", "vertical value")))


def encode_pair(value: Tuple[float, float]) -> List[Union[int, float]]:
    return [encode_float(value[0]), encode_float(value[1])]


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ColorIndex:
    """Entry in Glyphs.app's built-in label palette."""
    index: int


@dataclass(frozen=True)
class GreyAlpha:
    grey: int
    alpha: int


@dataclass(frozen=True)
class Rgba:
    red: int
    green: int
    blue: int
    alpha: int


@dataclass(frozen=True)
class Cmyka:
    cyan: int
    magenta: int
    yellow: int
    black: int
    alpha: int


Color = Union[ColorIndex, GreyAlpha, Rgba, Cmyka]

_COLOR_ARITY = {2: GreyAlpha, 4: Rgba, 5: Cmyka}


def decode_color(value: Any) -> Color:
    """Palette index, or 2/4/5 channel bytes (grey+alpha, RGBA, CMYK+alpha)."""
    if is_integer(value):
        return ColorIndex(value)
    if not isinstance(value, list):
        raise WrongVariantError("integer or array of integers", value)
    channels = []
    for item in value:
        if not is_integer(item):
            raise WrongVariantError("integer", item)
        if item < 0 or item > 255:
            raise OutOfBoundsError(item, 0, 255)
        channels.append(item)
    color_cls = _COLOR_ARITY.get(len(channels))
    if color_cls is None:
        raise UnsupportedArrayError("color", len(channels), sorted(_COLOR_ARITY))
    return color_cls(*channels)


def encode_color(color: Color) -> Union[int, List[int]]:
    if isinstance(color, ColorIndex):
        return color.index
    return list(astuple(color))


# ---------------------------------------------------------------------------
# Codepoints
# ---------------------------------------------------------------------------

Codepoints = NewType("Codepoints", Tuple[int, ...])

MAX_CODEPOINT = 0x10FFFF


def _check_codepoint(number: int) -> int:
    if number < 0 or number > MAX_CODEPOINT or 0xD800 <= number <= 0xDFFF:
        raise InvalidCodepointError(number)
    return number


def decode_codepoints(value: Any) -> Tuple[int, ...]:
    if is_integer(value):
        return (_check_codepoint(value),)
    if not isinstance(value, list):
        raise WrongVariantError("integer or array of integers", value)
    result = []
    for item in value:
        if not is_integer(item):
            raise WrongVariantError("integer", item)
        result.append(_check_codepoint(item))
    return tuple(result)


def encode_codepoints(codepoints: Tuple[int, ...]) -> Union[int, List[int]]:
    if len(codepoints) == 1:
        return codepoints[0]
    return list(codepoints)


# ---------------------------------------------------------------------------
# Kerning
# ---------------------------------------------------------------------------

# master id -> left glyph or group -> right glyph or group -> value
Kerning = NewType("Kerning", Dict[str, Dict[str, Dict[str, float]]])


def decode_kerning(value: Any) -> Dict[str, Dict[str, Dict[str, float]]]:
    if not isinstance(value, dict):
        raise KerningError(f"expected a dictionary of masters, found {plist_kind(value)}")
    result = {}
    for master, table in value.items():
        if not isinstance(table, dict):
            raise KerningError(
                f"expected a dictionary of left glyphs, found {plist_kind(table)}",
                master=master,
            )
        master_result = {}
        for left, row in table.items():
            if not isinstance(row, dict):
                raise KerningError(
                    f"expected a dictionary of right glyphs, found {plist_kind(row)}",
                    master=master,
                    left=left,
                )
            row_result = {}
            for right, amount in row.items():
                if not is_number(amount):
                    raise KerningError(
                        f"value must be a number, found {plist_kind(amount)}",
                        master=master,
                        left=left,
                        right=right,
                    )
                row_result[right] = float(amount)
            master_result[left] = row_result
        result[master] = master_result
    return result


def encode_kerning(kerning: Dict[str, Dict[str, Dict[str, float]]]) -> Dict[str, Any]:
    return {
        master: {
            left: {right: encode_float(amount) for right, amount in row.items()}
            for left, row in table.items()
        }
        for master, table in kerning.items()
    }


register_converter(bool, decode_bool, encode_bool)
register_converter(int, decode_int, _passthrough)
register_converter(U16, decode_u16, _passthrough)
register_converter(float, decode_float, encode_float)
register_converter(str, decode_str, _passthrough)
register_converter(GlyphName, decode_glyph_name, _passthrough)
register_converter(Point, decode_point, encode_pair)
register_converter(Scale, decode_scale, encode_pair)
register_converter(Color, decode_color, encode_color, name="Color")
register_converter(Codepoints, decode_codepoints, encode_codepoints)
register_converter(Kerning, decode_kerning, encode_kerning)
