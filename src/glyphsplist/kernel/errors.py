"""Error taxonomy for plist parsing and schema conversion.

Two disjoint families:

- ``ParseError``: the text is malformed. Raised by the parser, aborts the
  whole parse.
- ``ConversionError``: the text is well formed but the tree has the wrong
  shape for the target record. Raised by converters and the schema engine,
  aborts the enclosing record.

Nested conversion failures are wrapped (``FieldError``, ``ElementError``,
``EntryError``) so the message reads as a path from the document root to
the offending value. The innermost error stays reachable via ``root_cause``.
"""

from typing import Any, Iterable, List, Optional, Sequence

from ..codes import ErrorCode
from .values import plist_kind


class PlistError(ValueError):
    """Base class for every glyphsplist error."""
    code: ErrorCode


# ---------------------------------------------------------------------------
# Parse errors
# ---------------------------------------------------------------------------

class ParseError(PlistError):
    """Malformed plist text.

    Attributes:
        pos: Offset into the source text where the problem was detected
        line: 1-based line number of ``pos``
        column: 1-based column number of ``pos``
    """

    def __init__(self, message: str, text: str = "", pos: int = 0):
        self.pos = pos
        self.line = text.count("\n", 0, pos) + 1
        self.column = pos - (text.rfind("\n", 0, pos) + 1) + 1
        self.reason = message
        super().__init__(f"{message} (line {self.line}, column {self.column})")


class UnexpectedCharError(ParseError):
    code = ErrorCode.UNEXPECTED_CHAR

    def __init__(self, char: str, text: str = "", pos: int = 0):
        self.char = char
        super().__init__(f"unexpected character {char!r}", text, pos)


class UnexpectedEofError(ParseError):
    code = ErrorCode.UNEXPECTED_EOF

    def __init__(self, text: str = "", pos: int = 0):
        super().__init__("unexpected end of input", text, pos)


class UnclosedStringError(ParseError):
    code = ErrorCode.UNCLOSED_STRING

    def __init__(self, text: str = "", pos: int = 0):
        super().__init__("unclosed string", text, pos)


class UnknownEscapeError(ParseError):
    code = ErrorCode.UNKNOWN_ESCAPE

    def __init__(self, sequence: str, text: str = "", pos: int = 0):
        self.sequence = sequence
        super().__init__(f"unknown escape {sequence!r}", text, pos)


class NotAStringError(ParseError):
    code = ErrorCode.NOT_A_STRING

    def __init__(self, text: str = "", pos: int = 0):
        super().__init__("expected string", text, pos)


class ExpectedEqualsError(ParseError):
    code = ErrorCode.EXPECTED_EQUALS

    def __init__(self, text: str = "", pos: int = 0):
        super().__init__("expected `=`", text, pos)


class ExpectedCommaError(ParseError):
    code = ErrorCode.EXPECTED_COMMA

    def __init__(self, text: str = "", pos: int = 0):
        super().__init__("expected `,`", text, pos)


class ExpectedSemicolonError(ParseError):
    code = ErrorCode.EXPECTED_SEMICOLON

    def __init__(self, text: str = "", pos: int = 0):
        super().__init__("expected `;`", text, pos)


class TrailingContentError(ParseError):
    code = ErrorCode.TRAILING_CONTENT

    def __init__(self, text: str = "", pos: int = 0):
        super().__init__("unexpected content after the top-level value", text, pos)


class NestingTooDeepError(ParseError):
    code = ErrorCode.NESTING_TOO_DEEP

    def __init__(self, limit: int, text: str = "", pos: int = 0):
        self.limit = limit
        super().__init__(f"nesting deeper than {limit} levels", text, pos)


# ---------------------------------------------------------------------------
# Conversion errors
# ---------------------------------------------------------------------------

class ConversionError(PlistError):
    """A well-formed value has the wrong shape for its target type."""

    @property
    def root_cause(self) -> "ConversionError":
        """The innermost error below any field/element/entry wrappers."""
        return self


class MissingFieldError(ConversionError):
    code = ErrorCode.MISSING_FIELD

    def __init__(self, record: str, field: str, key: str):
        self.record = record
        self.field = field
        self.key = key
        super().__init__(f"{record}: missing field {key!r}")


class UnrecognisedFieldsError(ConversionError):
    code = ErrorCode.UNRECOGNISED_FIELDS

    def __init__(self, record: str, fields: Iterable[str]):
        self.record = record
        self.fields: List[str] = sorted(fields)
        super().__init__(f"{record}: unrecognised fields: {', '.join(self.fields)}")


class WrongVariantError(ConversionError):
    """The value is not the plist variant the target expects."""
    code = ErrorCode.WRONG_VARIANT

    def __init__(self, expected: str, value: Any):
        self.expected = expected
        self.found = plist_kind(value)
        super().__init__(f"expected {expected}, found {self.found}")


class OutOfBoundsError(ConversionError):
    code = ErrorCode.OUT_OF_BOUNDS

    def __init__(self, value: int, low: int, high: int):
        self.value = value
        self.low = low
        self.high = high
        super().__init__(f"{value} is out of bounds ({low}..{high})")


class BadNumberError(ConversionError):
    code = ErrorCode.BAD_NUMBER

    def __init__(self, expected: str, text: Any):
        self.expected = expected
        self.text = text
        super().__init__(f"expected {expected}, got {text!r}")


class UnsupportedArrayError(ConversionError):
    code = ErrorCode.UNSUPPORTED_ARRAY

    def __init__(self, kind: str, length: int, accepted: Sequence[int]):
        self.kind = kind
        self.length = length
        self.accepted = tuple(accepted)
        lengths = ", ".join(str(n) for n in self.accepted)
        super().__init__(f"{kind} array must contain {lengths} numbers, got {length}")


class InvalidCodepointError(ConversionError):
    code = ErrorCode.INVALID_CODEPOINT

    def __init__(self, value: int):
        self.value = value
        if value < 0:
            shown = str(value)
        else:
            shown = f"U+{value:04X}"
        super().__init__(f"unicode code point must be in the range U+0000-U+10FFFF, got {shown}")


class UnknownTagError(ConversionError):
    """A string outside a closed vocabulary."""
    code = ErrorCode.UNKNOWN_TAG

    def __init__(self, kind: str, tag: str, choices: Sequence[str]):
        self.kind = kind
        self.tag = tag
        self.choices = tuple(choices)
        options = ", ".join(repr(c) for c in self.choices)
        super().__init__(f"unknown {kind} {tag!r} (expected one of {options})")


class MissingElementError(ConversionError):
    code = ErrorCode.MISSING_ELEMENT

    def __init__(self, kind: str, element: str):
        self.kind = kind
        self.element = element
        super().__init__(f"{kind} without {element}")


class NotNumericError(ConversionError):
    code = ErrorCode.NOT_NUMERIC

    def __init__(self, kind: str, element: str, value: Any):
        self.kind = kind
        self.element = element
        self.found = plist_kind(value)
        super().__init__(f"{kind} {element} must be a number, found {self.found}")


class ExtraElementsError(ConversionError):
    code = ErrorCode.EXTRA_ELEMENTS

    def __init__(self, kind: str, length: int, maximum: int):
        self.kind = kind
        self.length = length
        self.maximum = maximum
        super().__init__(f"{kind} takes at most {maximum} elements, got {length}")


class KerningError(ConversionError):
    """Kerning table shape mismatch.

    ``master``, ``left`` and ``right`` are filled in as far as the walk got
    before the mismatch, so a bad leaf names the full glyph pair.
    """
    code = ErrorCode.BAD_KERNING

    def __init__(
        self,
        reason: str,
        master: Optional[str] = None,
        left: Optional[str] = None,
        right: Optional[str] = None,
    ):
        self.master = master
        self.left = left
        self.right = right
        self.reason = reason
        where = ""
        if left is not None and right is not None:
            where = f" for /{left}/{right}"
        elif left is not None:
            where = f" for /{left}"
        if master is not None:
            where += f" in master {master!r}"
        super().__init__(f"kerning{where}: {reason}")


class _WrappedError(ConversionError):
    """A nested error with positional or name context."""

    def __init__(self, context: str, cause: ConversionError):
        self.cause = cause
        super().__init__(f"{context}: {cause}")

    @property
    def root_cause(self) -> ConversionError:
        return self.cause.root_cause


class FieldError(_WrappedError):
    """Conversion of one record field failed."""
    code = ErrorCode.BAD_FIELD

    def __init__(self, record: str, field: str, key: str, cause: ConversionError):
        self.record = record
        self.field = field
        self.key = key
        super().__init__(f"{record}.{field}", cause)


class ElementError(_WrappedError):
    """Conversion of one array element failed."""
    code = ErrorCode.BAD_ELEMENT

    def __init__(self, index: int, cause: ConversionError):
        self.index = index
        super().__init__(f"[{index}]", cause)


class EntryError(_WrappedError):
    """Conversion of one dictionary entry failed."""
    code = ErrorCode.BAD_ENTRY

    def __init__(self, key: str, cause: ConversionError):
        self.key = key
        super().__init__(f"[{key!r}]", cause)

