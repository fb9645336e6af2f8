"""Lexer, recursive-descent parser and canonical serializer for the
OpenStep-style property list dialect used by Glyphs files.

Grammar:

    value      := dictionary | array | string | atom
    dictionary := "{" (key "=" value ";")* "}"
    array      := "(" [value ("," value)* [","]] ")"
    key        := string | atom

Quoted strings always stay strings. Bare atoms become numbers only when
they pass the numeric-ambiguity rule (see ``parse_atom``): atoms that look
hexadecimal (``1AB``) or carry leading zeros (``0123``) stay strings,
since Glyphs uses them for glyph ids and similar identifiers.

The serializer writes a canonical form: dictionary keys sorted, one entry
or array element per line, strings quoted whenever a bare atom would not
read back as the same string.
"""

import math
import re
from enum import Enum
from typing import Any, List, NamedTuple, Optional, Tuple

from ..config import DEFAULT_PARSE_OPTIONS, ParseOptions
from .errors import (
    ExpectedCommaError,
    ExpectedEqualsError,
    ExpectedSemicolonError,
    NestingTooDeepError,
    NotAStringError,
    TrailingContentError,
    UnclosedStringError,
    UnexpectedCharError,
    UnexpectedEofError,
    UnknownEscapeError,
)
from .values import PlistValue, parse_int

# Characters allowed in a bare atom (CFOldStylePList's alnum set).
_ATOM_RE = re.compile(r"[0-9A-Za-z_$/:.\-]+")
_WS_RE = re.compile(r"[ \t\r\n]*")

# Bare atoms may be written unquoted on output; "-" is excluded so UUIDs
# and negative-looking text always get quoted.
_SAFE_RE = re.compile(r"[0-9A-Za-z_$/:.]+\Z")

_HEX_UPPER_RE = re.compile(r"[0-9A-F]+\Z")
_DIGITS_RE = re.compile(r"[0-9]+\Z")
_FLOAT_RE = re.compile(
    r"[+-]?(?:inf|infinity|nan|(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:e[+-]?[0-9]+)?)\Z",
    re.IGNORECASE,
)

_OCTAL_DIGITS = "01234567"


class TokenKind(Enum):
    EOF = "eof"
    OPEN_BRACE = "{"
    OPEN_PAREN = "("
    STRING = "string"
    ATOM = "atom"


class Token(NamedTuple):
    kind: TokenKind
    value: str
    pos: int


# ---------------------------------------------------------------------------
# Atom classification
# ---------------------------------------------------------------------------

def _numeric_ok(s: str) -> bool:
    if not s:
        return False
    if _HEX_UPPER_RE.match(s) and not _DIGITS_RE.match(s):
        # Looks hexadecimal, e.g. a glyph id: keep as text.
        return False
    if len(s) > 1 and s[0] == "0":
        # Leading zeros are only kept as text when the atom is all digits;
        # "0.5" is still a number.
        return not _DIGITS_RE.match(s)
    return True


def is_float_literal(s: str) -> bool:
    """True if ``s`` spells a floating-point number (including inf/nan)."""
    return _FLOAT_RE.match(s) is not None


def parse_atom(s: str) -> PlistValue:
    """Classify an unquoted atom as an integer, a float or a string.

    Examples:
        "42"   -> 42
        "-7"   -> -7
        "0.5"  -> 0.5
        "0123" -> "0123"  (leading zeros stay text)
        "1AB"  -> "1AB"   (hex-looking stays text)
        "a.b"  -> "a.b"
    """
    if _numeric_ok(s):
        number = parse_int(s)
        if number is not None:
            return number
        if is_float_literal(s):
            return float(s)
    return s


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class _Parser:
    """Single-use recursive-descent parser over one source string."""

    def __init__(self, text: str, options: ParseOptions):
        self.text = text
        self.length = len(text)
        self.max_depth = options.max_depth

    def skip_ws(self, ix: int) -> int:
        return _WS_RE.match(self.text, ix).end()

    def expect(self, ix: int, delim: str) -> Optional[int]:
        """Return the offset after ``delim`` if it is the next character."""
        ix = self.skip_ws(ix)
        if ix < self.length and self.text[ix] == delim:
            return ix + 1
        return None

    def lex(self, ix: int) -> Tuple[Token, int]:
        start = self.skip_ws(ix)
        if start == self.length:
            return Token(TokenKind.EOF, "", start), start
        char = self.text[start]
        if char == "{":
            return Token(TokenKind.OPEN_BRACE, char, start), start + 1
        if char == "(":
            return Token(TokenKind.OPEN_PAREN, char, start), start + 1
        if char == '"':
            value, end = self.lex_string(start + 1)
            return Token(TokenKind.STRING, value, start), end
        match = _ATOM_RE.match(self.text, start)
        if match is None:
            raise UnexpectedCharError(char, self.text, start)
        return Token(TokenKind.ATOM, match.group(), start), match.end()

    def lex_string(self, start: int) -> Tuple[str, int]:
        """Read a quoted string body starting just after the opening quote."""
        text = self.text
        parts: List[str] = []
        ix = start
        while True:
            quote = text.find('"', ix)
            if quote == -1:
                raise UnclosedStringError(text, start - 1)
            backslash = text.find("\\", ix, quote)
            if backslash == -1:
                parts.append(text[ix:quote])
                return "".join(parts), quote + 1

            parts.append(text[ix:backslash])
            esc = backslash + 1
            if esc >= self.length:
                raise UnclosedStringError(text, start - 1)
            char = text[esc]
            if char == '"' or char == "\\":
                parts.append(char)
                ix = esc + 1
            elif char == "n":
                parts.append("\n")
                ix = esc + 1
            elif char == "r":
                parts.append("\r")
                ix = esc + 1
            elif (
                char in "0123"
                and esc + 2 < self.length
                and text[esc + 1] in _OCTAL_DIGITS
                and text[esc + 2] in _OCTAL_DIGITS
            ):
                parts.append(chr(int(text[esc:esc + 3], 8)))
                ix = esc + 3
            else:
                raise UnknownEscapeError(text[backslash:esc + 1], text, backslash)

    def parse_value(self, ix: int, depth: int) -> Tuple[PlistValue, int]:
        token, ix = self.lex(ix)
        if token.kind is TokenKind.ATOM:
            return parse_atom(token.value), ix
        if token.kind is TokenKind.STRING:
            return token.value, ix
        if token.kind is TokenKind.EOF:
            raise UnexpectedEofError(self.text, token.pos)
        if depth >= self.max_depth:
            raise NestingTooDeepError(self.max_depth, self.text, token.pos)
        if token.kind is TokenKind.OPEN_BRACE:
            return self.parse_dict(ix, depth + 1)
        return self.parse_array(ix, depth + 1)

    def parse_dict(self, ix: int, depth: int) -> Tuple[PlistValue, int]:
        result = {}
        while True:
            end = self.expect(ix, "}")
            if end is not None:
                return result, end
            key, ix = self.lex(ix)
            if key.kind is not TokenKind.STRING and key.kind is not TokenKind.ATOM:
                raise NotAStringError(self.text, key.pos)
            after_equals = self.expect(ix, "=")
            if after_equals is None:
                raise ExpectedEqualsError(self.text, self.skip_ws(ix))
            value, ix = self.parse_value(after_equals, depth)
            result[key.value] = value
            after_semicolon = self.expect(ix, ";")
            if after_semicolon is None:
                raise ExpectedSemicolonError(self.text, self.skip_ws(ix))
            ix = after_semicolon

    def parse_array(self, ix: int, depth: int) -> Tuple[PlistValue, int]:
        result = []
        end = self.expect(ix, ")")
        if end is not None:
            return result, end
        while True:
            value, ix = self.parse_value(ix, depth)
            result.append(value)
            end = self.expect(ix, ")")
            if end is not None:
                return result, end
            after_comma = self.expect(ix, ",")
            if after_comma is None:
                raise ExpectedCommaError(self.text, self.skip_ws(ix))
            # Tolerate a trailing comma before the closing parenthesis.
            end = self.expect(after_comma, ")")
            if end is not None:
                return result, end
            ix = after_comma


def parse(text: str, options: Optional[ParseOptions] = None) -> PlistValue:
    """Parse plist text into a value tree.

    Args:
        text: Complete document text
        options: Parser limits; defaults to ``DEFAULT_PARSE_OPTIONS``

    Returns:
        The top-level value (usually a dictionary)

    Raises:
        ParseError: If the text is malformed, nests deeper than
            ``options.max_depth``, or has content after the top-level value
            (unless ``options.allow_trailing_content`` is set)
    """
    options = options or DEFAULT_PARSE_OPTIONS
    parser = _Parser(text, options)
    value, ix = parser.parse_value(0, 0)
    if not options.allow_trailing_content:
        ix = parser.skip_ws(ix)
        if ix != parser.length:
            raise TrailingContentError(text, ix)
    return value


# ---------------------------------------------------------------------------
# Serializer
# ---------------------------------------------------------------------------

def _write_string(s: str, out: List[str]) -> None:
    # Bare only when re-lexing gives back the same string, never a number.
    if _SAFE_RE.match(s) and not is_float_literal(s):
        out.append(s)
    else:
        out.append('"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"')


def format_float(value: float) -> str:
    """Shortest round-trip spelling of a float that lexes as a single atom."""
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return repr(value).replace("e+", "e")


def _write(value: Any, out: List[str]) -> None:
    if isinstance(value, bool):
        raise TypeError("bool is not a plist value; encode booleans as 0/1")
    if isinstance(value, dict):
        out.append("{\n")
        for key in sorted(value):
            if not isinstance(key, str):
                raise TypeError(f"dictionary keys must be strings, got {type(key).__name__}")
            _write_string(key, out)
            out.append(" = ")
            _write(value[key], out)
            out.append(";\n")
        out.append("}")
    elif isinstance(value, list):
        out.append("(")
        delim = "\n"
        for element in value:
            out.append(delim)
            _write(element, out)
            delim = ",\n"
        out.append("\n)")
    elif isinstance(value, str):
        _write_string(value, out)
    elif isinstance(value, int):
        out.append(str(value))
    elif isinstance(value, float):
        out.append(format_float(value))
    else:
        raise TypeError(f"{type(value).__name__} is not a plist value")


def dumps(value: PlistValue) -> str:
    """Serialize a value tree to canonical plist text.

    Raises:
        TypeError: If the tree contains anything other than dict/list/str/
            int/float
    """
    out: List[str] = []
    _write(value, out)
    return "".join(out)
