"""Error code constants for glyphsplist errors.

Every parse and conversion error carries one of these codes so that
callers (and the CLI report) can branch on them without string matching.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Parse and conversion error codes."""

    # Parse errors (malformed text)
    UNEXPECTED_CHAR = "UNEXPECTED_CHAR"
    UNEXPECTED_EOF = "UNEXPECTED_EOF"
    UNCLOSED_STRING = "UNCLOSED_STRING"
    UNKNOWN_ESCAPE = "UNKNOWN_ESCAPE"
    NOT_A_STRING = "NOT_A_STRING"
    EXPECTED_EQUALS = "EXPECTED_EQUALS"
    EXPECTED_COMMA = "EXPECTED_COMMA"
    EXPECTED_SEMICOLON = "EXPECTED_SEMICOLON"
    TRAILING_CONTENT = "TRAILING_CONTENT"
    NESTING_TOO_DEEP = "NESTING_TOO_DEEP"

    # Conversion errors (well-formed text, wrong shape for the schema)
    MISSING_FIELD = "MISSING_FIELD"
    UNRECOGNISED_FIELDS = "UNRECOGNISED_FIELDS"
    WRONG_VARIANT = "WRONG_VARIANT"
    OUT_OF_BOUNDS = "OUT_OF_BOUNDS"
    BAD_NUMBER = "BAD_NUMBER"
    UNSUPPORTED_ARRAY = "UNSUPPORTED_ARRAY"
    INVALID_CODEPOINT = "INVALID_CODEPOINT"
    UNKNOWN_TAG = "UNKNOWN_TAG"
    MISSING_ELEMENT = "MISSING_ELEMENT"
    NOT_NUMERIC = "NOT_NUMERIC"
    EXTRA_ELEMENTS = "EXTRA_ELEMENTS"
    BAD_KERNING = "BAD_KERNING"
    BAD_FIELD = "BAD_FIELD"
    BAD_ELEMENT = "BAD_ELEMENT"
    BAD_ENTRY = "BAD_ENTRY"
    BAD_SHAPE = "BAD_SHAPE"

    # Document-level
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    INVALID_ENCODING = "INVALID_ENCODING"
