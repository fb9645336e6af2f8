"""Public API for glyphsplist.

Thin, stable entry points over the kernel (plist text engine and schema
engine) and the Glyphs 3 font model.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Type, TypeVar, Union

from .codes import ErrorCode
from .config import DEFAULT_PARSE_OPTIONS, ParseOptions
from .contracts import ValidationIssue, ValidationReport
from .font import Font, ShapeError
from .kernel import plist, schema
from .kernel.errors import (
    ConversionError,
    ElementError,
    EntryError,
    FieldError,
    ParseError,
    PlistError,
)
from .kernel.scalars import register_converter
from .kernel.values import PlistDict, PlistValue

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=schema.PlistModel)

__all__ = [
    "DEFAULT_PARSE_OPTIONS",
    "ParseOptions",
    "decode",
    "dumps",
    "encode",
    "load_font",
    "loads_font",
    "parse",
    "register_converter",
    "save_font",
    "validate_font",
]


def _normalize_path(path: Union[str, os.PathLike, Path]) -> Path:
    """Normalize path input to Path object."""
    return Path(path) if not isinstance(path, Path) else path


def parse(text: str, options: Optional[ParseOptions] = None) -> PlistValue:
    """Parse plist text into a tree of dict/list/str/int/float.

    Raises:
        ParseError: If the text is malformed
    """
    return plist.parse(text, options)


def dumps(value: PlistValue) -> str:
    """Serialize a plist tree to canonical text."""
    return plist.dumps(value)


def decode(cls: Type[RecordT], value: PlistValue) -> RecordT:
    """Convert a plist dictionary into a ``PlistModel`` record.

    Raises:
        ConversionError: If the dictionary does not match the record
    """
    return schema.decode(cls, value)


def encode(record: schema.PlistModel) -> PlistDict:
    """Convert a record into a plist dictionary."""
    return schema.encode(record)


def loads_font(text: str, options: Optional[ParseOptions] = None) -> Font:
    """Decode Glyphs 3 document text into a ``Font``."""
    return Font.loads(text, options)


def load_font(path: Union[str, os.PathLike, Path], options: Optional[ParseOptions] = None) -> Font:
    """Read a ``.glyphs`` file into a ``Font``.

    Args:
        path: Path to a Glyphs 3 file
        options: Parser options (defaults to ``DEFAULT_PARSE_OPTIONS``)

    Returns:
        The decoded font

    Raises:
        OSError: If the file cannot be read
        ParseError: If the file is not a valid plist
        UnsupportedFormatError: If the file is a Glyphs 2 document
        ConversionError: If the document does not match the font model
    """
    return Font.load(_normalize_path(path), options)


def save_font(font: Font, path: Union[str, os.PathLike, Path]) -> None:
    """Write a ``Font`` as canonical Glyphs 3 text."""
    font.save(_normalize_path(path))


def _error_location(exc: PlistError) -> Optional[str]:
    """Where an error happened: text position or path through the records."""
    if isinstance(exc, ParseError):
        return f"line {exc.line}, column {exc.column}"
    parts = []
    while isinstance(exc, (FieldError, ElementError, EntryError, ShapeError)):
        if isinstance(exc, FieldError):
            parts.append(f".{exc.key}")
        elif isinstance(exc, ElementError):
            parts.append(f"[{exc.index}]")
        elif isinstance(exc, EntryError):
            parts.append(f"[{exc.key!r}]")
        exc = exc.cause
    return "".join(parts).lstrip(".") or None


def _issue_from_error(exc: PlistError) -> ValidationIssue:
    code = exc.root_cause.code if isinstance(exc, ConversionError) else exc.code
    message = exc.reason if isinstance(exc, ParseError) else str(exc)
    return ValidationIssue(code=code.value, message=message, location=_error_location(exc))


def validate_font(
    path: Union[str, os.PathLike, Path],
    options: Optional[ParseOptions] = None,
) -> ValidationReport:
    """Load a file as a Glyphs 3 font and report the outcome.

    Parse and conversion failures become issues in the report instead of
    exceptions. Text that is not valid UTF-8 is reported too.
    Other I/O errors still raise.

    Returns:
        ValidationReport with ``ok`` set when the font loaded
    """
    path = _normalize_path(path)
    try:
        font = Font.load(path, options)
    except PlistError as exc:
        logger.debug("Validation of %s failed: %s", path, exc)
        return ValidationReport(ok=False, path=str(path), issues=[_issue_from_error(exc)])
    except UnicodeDecodeError as exc:
        logger.debug("Validation of %s failed: %s", path, exc)
        issue = ValidationIssue(
            code=ErrorCode.INVALID_ENCODING.value,
            message=f"not valid UTF-8: {exc.reason}",
            location=f"byte {exc.start}",
        )
        return ValidationReport(ok=False, path=str(path), issues=[issue])

    return ValidationReport(
        ok=True,
        path=str(path),
        format_version=font.format_version,
        glyph_count=len(font.glyphs),
        master_count=len(font.font_master),
        issues=[],
    )

