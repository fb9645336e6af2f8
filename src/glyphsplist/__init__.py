"""glyphsplist: OpenStep plist codec and typed Glyphs 3 font model."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("glyphsplist")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from glyphsplist.api import (
    decode,
    dumps,
    encode,
    load_font,
    loads_font,
    parse,
    register_converter,
    save_font,
    validate_font,
)
from glyphsplist.codes import ErrorCode
from glyphsplist.config import DEFAULT_PARSE_OPTIONS, ParseOptions
from glyphsplist.contracts import ValidationIssue, ValidationReport
from glyphsplist.font import Font, UnsupportedFormatError
from glyphsplist.kernel.errors import ConversionError, ParseError, PlistError
from glyphsplist.kernel.schema import ALWAYS_SERIALISE, REST, PlistModel

__all__ = [
    "__version__",
    "parse",
    "dumps",
    "decode",
    "encode",
    "load_font",
    "loads_font",
    "save_font",
    "validate_font",
    "register_converter",
    "ParseOptions",
    "DEFAULT_PARSE_OPTIONS",
    "PlistModel",
    "REST",
    "ALWAYS_SERIALISE",
    "Font",
    "ErrorCode",
    "PlistError",
    "ParseError",
    "ConversionError",
    "UnsupportedFormatError",
    "ValidationIssue",
    "ValidationReport",
]
