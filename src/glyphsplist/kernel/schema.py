"""Schema mapping engine: plist dictionaries <-> typed records.

Records are pydantic models deriving from ``PlistModel``. Everything the
engine needs per field is read from the model's field metadata:

- wire key: the field alias (lower camel case of the field name by default,
  or an explicit ``Field(alias=...)``)
- requiredness: derived from the annotation and default (see
  ``Requiredness``)
- flags: ``Annotated[..., REST]`` captures unrecognised keys,
  ``Annotated[..., ALWAYS_SERIALISE]`` writes the field even when it holds its
  default value
- converter: resolved from the annotation via ``scalars.get_converter``

Example:
    class Anchor(PlistModel):
        name: Annotated[str, ALWAYS_SERIALISE]
        pos: Point = Field(default_factory=Point)
        other_stuff: Annotated[Dict[str, Any], REST] = Field(default_factory=dict)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from pydantic.fields import FieldInfo

from .errors import (
    ConversionError,
    FieldError,
    MissingFieldError,
    UnrecognisedFieldsError,
    WrongVariantError,
)
from .scalars import Converter, get_converter
from .values import PlistDict

logger = logging.getLogger(__name__)


class _Flag:
    """Marker placed in ``Annotated`` metadata."""

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return self.name


REST = _Flag("REST")
ALWAYS_SERIALISE = _Flag("ALWAYS_SERIALISE")


class Requiredness(str, Enum):
    """What happens when a field's wire key is absent."""
    REQUIRED = "required"                      # MissingFieldError
    DEFAULT_EXPRESSION = "default_expression"  # the declared default value
    DEFAULT_FROM_TYPE = "default_from_type"    # default_factory()
    OPTIONAL = "optional"                      # None


@dataclass(frozen=True)
class FieldDescriptor:
    """Per-field mapping metadata derived from a record class."""
    name: str
    key: str
    requiredness: Requiredness
    rest: bool
    always_serialise: bool
    converter: Optional[Converter]
    default: Any = None
    default_factory: Optional[Callable[[], Any]] = None

    def make_default(self) -> Any:
        if self.default_factory is not None:
            return self.default_factory()
        return self.default


class PlistModel(BaseModel):
    """Base class for records stored as plist dictionaries."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    @classmethod
    def from_plist(cls, value: Any):
        """Decode a plist dictionary into an instance of this record."""
        return decode(cls, value)

    def to_plist(self) -> PlistDict:
        """Encode this record as a plist dictionary."""
        return encode(self)


RecordT = TypeVar("RecordT", bound=PlistModel)


def _has_flag(info: FieldInfo, flag: _Flag) -> bool:
    return any(item is flag for item in info.metadata)


def _is_optional(annotation: Any) -> bool:
    return get_origin(annotation) is Union and type(None) in get_args(annotation)


def _requiredness(info: FieldInfo) -> Requiredness:
    if info.default_factory is not None:
        return Requiredness.DEFAULT_FROM_TYPE
    optional = _is_optional(info.annotation)
    if info.is_required():
        return Requiredness.OPTIONAL if optional else Requiredness.REQUIRED
    if info.default is None and optional:
        return Requiredness.OPTIONAL
    return Requiredness.DEFAULT_EXPRESSION


@lru_cache(maxsize=None)
def describe(cls: Type[PlistModel]) -> Tuple[FieldDescriptor, ...]:
    """Build (once per class) the field descriptors of a record.

    Raises:
        TypeError: If the record declares more than one rest field, or a
            field type has no converter
    """
    descriptors = []
    for name, info in cls.model_fields.items():
        rest = _has_flag(info, REST)
        requiredness = _requiredness(info)
        descriptors.append(FieldDescriptor(
            name=name,
            key=info.alias or name,
            requiredness=requiredness,
            rest=rest,
            always_serialise=_has_flag(info, ALWAYS_SERIALISE),
            converter=None if rest else get_converter(info.annotation),
            default=info.default if requiredness is Requiredness.DEFAULT_EXPRESSION else None,
            default_factory=info.default_factory,
        ))

    rest_fields = [d.name for d in descriptors if d.rest]
    if len(rest_fields) > 1:
        raise TypeError(
            f"{cls.__name__} declares more than one rest field: {', '.join(rest_fields)}"
        )
    return tuple(descriptors)


def decode(cls: Type[RecordT], value: Any) -> RecordT:
    """Convert a plist dictionary into a record.

    Declared fields are taken out of a private copy of the dictionary; the
    keys that remain go to the rest field, or fail the conversion when the
    record has none.

    Args:
        cls: Record class
        value: Plist value (must be a dictionary)

    Returns:
        A record instance

    Raises:
        WrongVariantError: If ``value`` is not a dictionary
        MissingFieldError: If a required key is absent
        FieldError: If a field's converter fails (wraps the cause)
        UnrecognisedFieldsError: If unknown keys remain and there is no
            rest field
    """
    if not isinstance(value, dict):
        raise WrongVariantError("dictionary", value)

    remaining = dict(value)
    values: Dict[str, Any] = {}
    rest_field = None

    for field in describe(cls):
        if field.rest:
            rest_field = field
            continue
        if field.key not in remaining:
            if field.requiredness is Requiredness.REQUIRED:
                raise MissingFieldError(cls.__name__, field.name, field.key)
            values[field.name] = field.make_default()
            continue
        raw = remaining.pop(field.key)
        try:
            values[field.name] = field.converter.decode(raw)
        except ConversionError as exc:
            raise FieldError(cls.__name__, field.name, field.key, exc) from exc

    if rest_field is not None:
        if remaining:
            logger.debug("%s: keeping unrecognised keys %s", cls.__name__, sorted(remaining))
        values[rest_field.name] = remaining
    elif remaining:
        raise UnrecognisedFieldsError(cls.__name__, remaining)

    # Every value above has already been through a converter.
    return cls.model_construct(**values)


def encode(record: PlistModel) -> PlistDict:
    """Convert a record back into a plist dictionary.

    Starts from the rest field's contents, then adds declared fields:
    ``ALWAYS_SERIALISE`` fields whenever they are not None, other fields only
    when they differ from their default.
    """
    fields = describe(type(record))
    result: PlistDict = {}
    for field in fields:
        if field.rest:
            result.update(getattr(record, field.name) or {})

    for field in fields:
        if field.rest:
            continue
        value = getattr(record, field.name)
        if value is None:
            continue
        if (
            not field.always_serialise
            and field.requiredness is not Requiredness.REQUIRED
            and value == field.make_default()
        ):
            continue
        result[field.key] = field.converter.encode(value)
    return result
