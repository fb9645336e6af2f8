"""Tests for the plist text engine: atom classification, parsing, errors
and the canonical serializer."""

import math

import pytest

from glyphsplist.codes import ErrorCode
from glyphsplist.config import MAX_DEPTH_LIMIT, ParseOptions
from glyphsplist.kernel.errors import (
    ExpectedCommaError,
    ExpectedEqualsError,
    ExpectedSemicolonError,
    NestingTooDeepError,
    NotAStringError,
    ParseError,
    TrailingContentError,
    UnclosedStringError,
    UnexpectedCharError,
    UnexpectedEofError,
    UnknownEscapeError,
)
from glyphsplist.kernel.plist import dumps, format_float, is_float_literal, parse, parse_atom


class TestParseAtom:
    """Numeric-ambiguity rule for bare atoms."""

    @pytest.mark.parametrize("atom,expected", [
        ("42", 42),
        ("-7", -7),
        ("0", 0),
        ("0.5", 0.5),
        ("-12.25", -12.25),
        ("1e3", 1000.0),
        (".5", 0.5),
    ])
    def test_numbers(self, atom, expected):
        value = parse_atom(atom)
        assert value == expected
        assert type(value) is type(expected)

    @pytest.mark.parametrize("atom", ["0123", "00", "1AB", "FF", "ABC", "a.b", "m01", "-", "public.kern1.A"])
    def test_stays_string(self, atom):
        assert parse_atom(atom) == atom

    @pytest.mark.parametrize("atom,expected", [
        ("1e5", True),
        ("-0.5", True),
        ("inf", True),
        ("NaN", True),
        ("12", True),
        ("1.2.3", False),
        ("e5", False),
        ("abc", False),
    ])
    def test_float_literal(self, atom, expected):
        assert is_float_literal(atom) is expected

    def test_integer_outside_int64_becomes_float(self):
        value = parse_atom("9223372036854775808")
        assert isinstance(value, float)

    def test_inf_and_nan_atoms_read_as_floats(self):
        assert math.isinf(parse_atom("infinity"))
        assert math.isnan(parse_atom("nan"))


class TestParse:
    def test_dictionary(self):
        assert parse("{a = 1; b = \"two\"; c = (1, 2.5, x);}") == {
            "a": 1,
            "b": "two",
            "c": [1, 2.5, "x"],
        }

    def test_quoted_strings_stay_strings(self):
        assert parse('{a = "123"; b = "0.5";}') == {"a": "123", "b": "0.5"}

    def test_quoted_keys(self):
        assert parse('{"@MMK_L_A" = {"@MMK_R_V" = -50;};}') == {"@MMK_L_A": {"@MMK_R_V": -50}}

    def test_empty_containers(self):
        assert parse("{}") == {}
        assert parse("()") == []
        assert parse("{a = ();}") == {"a": []}

    def test_whitespace_everywhere(self):
        assert parse("\n {\r\n\ta\t=\n1 ;\n}\n") == {"a": 1}

    def test_top_level_scalar(self):
        assert parse("hello") == "hello"
        assert parse("12") == 12

    def test_trailing_comma_in_array(self):
        assert parse("(1, 2,)") == [1, 2]

    def test_leading_comma_rejected(self):
        with pytest.raises(UnexpectedCharError):
            parse("(,1)")

    def test_escapes(self):
        assert parse(r'"a\"b\\c\nd\re"') == 'a"b\\c\nd\re'

    def test_octal_escape(self):
        assert parse(r'"Top of V is\012open"') == "Top of V is\nopen"
        assert parse(r'"\101"') == "A"

    def test_unicode_passes_through(self):
        assert parse('"café →"') == "café →"

    def test_dictionary_last_key_wins(self):
        assert parse("{a = 1; a = 2;}") == {"a": 2}


class TestParseErrors:
    """Every malformed input maps to one parse error class with a position."""

    @pytest.mark.parametrize("text,error,code", [
        ("{a = ", UnexpectedEofError, ErrorCode.UNEXPECTED_EOF),
        ("(1,", UnexpectedEofError, ErrorCode.UNEXPECTED_EOF),
        ("{a = 1;", NotAStringError, ErrorCode.NOT_A_STRING),
        ("", UnexpectedEofError, ErrorCode.UNEXPECTED_EOF),
        ("{a = ;}", UnexpectedCharError, ErrorCode.UNEXPECTED_CHAR),
        ('{a = "abc;}', UnclosedStringError, ErrorCode.UNCLOSED_STRING),
        (r'"bad \q escape"', UnknownEscapeError, ErrorCode.UNKNOWN_ESCAPE),
        ("{(1) = 2;}", NotAStringError, ErrorCode.NOT_A_STRING),
        ("{a 1;}", ExpectedEqualsError, ErrorCode.EXPECTED_EQUALS),
        ("(1 2)", ExpectedCommaError, ErrorCode.EXPECTED_COMMA),
        ("{a = 1}", ExpectedSemicolonError, ErrorCode.EXPECTED_SEMICOLON),
        ("{a = 1;} x", TrailingContentError, ErrorCode.TRAILING_CONTENT),
    ])
    def test_error_class(self, text, error, code):
        with pytest.raises(error) as exc_info:
            parse(text)
        assert exc_info.value.code == code
        assert isinstance(exc_info.value, ParseError)
        assert isinstance(exc_info.value, ValueError)

    def test_position_is_reported(self):
        with pytest.raises(ExpectedSemicolonError) as exc_info:
            parse("{\na = 1 b;\n}")
        err = exc_info.value
        assert err.pos == 8
        assert (err.line, err.column) == (2, 7)
        assert "line 2, column 7" in str(err)

    def test_unclosed_string_points_at_opening_quote(self):
        with pytest.raises(UnclosedStringError) as exc_info:
            parse('{a = "abc;}')
        assert exc_info.value.pos == 5

    def test_backslash_at_end_of_input(self):
        with pytest.raises(UnclosedStringError):
            parse('"abc\\')

    def test_short_octal_escape_is_unknown(self):
        with pytest.raises(UnknownEscapeError):
            parse(r'"\01"')

    def test_trailing_content_allowed_by_option(self):
        options = ParseOptions(allow_trailing_content=True)
        assert parse("{a = 1;} junk", options) == {"a": 1}

    def test_trailing_whitespace_is_not_content(self):
        assert parse("{a = 1;}\n\n") == {"a": 1}


class TestDepthLimit:
    def test_default_limit_allows_ordinary_nesting(self):
        text = "(" * 50 + ")" * 50
        value = parse(text)
        for _ in range(49):
            value = value[0]
        assert value == []

    def test_exceeding_limit_raises(self):
        options = ParseOptions(max_depth=3)
        assert parse("(((1)))", options) == [[[1]]]
        with pytest.raises(NestingTooDeepError) as exc_info:
            parse("((((1))))", options)
        assert exc_info.value.limit == 3
        assert exc_info.value.code == ErrorCode.NESTING_TOO_DEEP

    def test_hostile_nesting_does_not_blow_the_stack(self):
        with pytest.raises(NestingTooDeepError):
            parse("(" * 100000)

    def test_invalid_limit_rejected(self):
        with pytest.raises(ValueError):
            ParseOptions(max_depth=0)

    def test_limit_is_capped(self):
        with pytest.raises(ValueError):
            ParseOptions(max_depth=100000)

    def test_nesting_at_the_cap(self):
        options = ParseOptions(max_depth=MAX_DEPTH_LIMIT)
        depth = MAX_DEPTH_LIMIT
        value = parse("(" * depth + ")" * depth, options)
        for _ in range(depth - 1):
            value = value[0]
        assert value == []
        with pytest.raises(NestingTooDeepError):
            parse("(" * (depth + 1) + ")" * (depth + 1), options)


class TestDumps:
    def test_canonical_layout(self):
        assert dumps({"b": 1, "a": [1, "x"], "c": {}}) == (
            "{\n"
            "a = (\n1,\nx\n);\n"
            "b = 1;\n"
            "c = {\n};\n"
            "}"
        )

    def test_empty_array(self):
        assert dumps([]) == "(\n)"

    def test_keys_sorted(self):
        text = dumps({"versionMajor": 1, ".formatVersion": 3, "date": "x"})
        assert text.index(".formatVersion") < text.index("date") < text.index("versionMajor")

    @pytest.mark.parametrize("value,expected", [
        ("abc", "abc"),
        ("public.kern1.A", "public.kern1.A"),
        ("m01", "m01"),
        ("123", '"123"'),
        ("0.5", '"0.5"'),
        ("nan", '"nan"'),
        ("infinity", '"infinity"'),
        ("", '""'),
        ("a b", '"a b"'),
        ("-", '"-"'),
        ("5E1B7D9A-6F08", '"5E1B7D9A-6F08"'),
        ('say "hi"', '"say \\"hi\\""'),
        ("back\\slash", '"back\\\\slash"'),
    ])
    def test_string_quoting(self, value, expected):
        assert dumps(value) == expected

    def test_hex_looking_string_written_bare_reads_back(self):
        # "1AB" is safe bare: the reader keeps hex-looking atoms as text.
        assert dumps("1AB") == "1AB"
        assert parse(dumps("1AB")) == "1AB"

    def test_newline_written_raw(self):
        assert dumps("a\nb") == '"a\nb"'
        assert parse(dumps("a\nb")) == "a\nb"

    @pytest.mark.parametrize("value,expected", [
        (1.0, "1.0"),
        (0.5, "0.5"),
        (-60.5, "-60.5"),
        (1e16, "1e16"),
        (1.5e-07, "1.5e-07"),
        (float("inf"), "inf"),
        (float("-inf"), "-inf"),
        (float("nan"), "nan"),
    ])
    def test_format_float(self, value, expected):
        assert format_float(value) == expected
        assert dumps(value) == expected

    def test_integers(self):
        assert dumps(-50) == "-50"
        assert dumps(2 ** 62) == str(2 ** 62)

    @pytest.mark.parametrize("value", [True, None, {"a": None}, [object()], {1: "a"}, (1, 2)])
    def test_non_plist_values_rejected(self, value):
        with pytest.raises(TypeError):
            dumps(value)


class TestRoundTrip:
    def test_tree_round_trip(self):
        tree = {
            "name": "Example",
            "count": 3,
            "ratio": 0.25,
            "ids": ["0123", "1AB", "5E1B7D9A-6F08-4B44", "plain"],
            "nested": {"quote": 'a "b"', "empty": [], "e": {}},
            "note": "line one\nline two",
        }
        assert parse(dumps(tree)) == tree

    def test_canonical_text_is_a_fixed_point(self):
        text = dumps(parse("{b = (1,2,); a = {y = \"0.5\"; x = 1e3;};}"))
        assert dumps(parse(text)) == text

    def test_float_specials_round_trip(self):
        tree = parse(dumps([float("inf"), float("-inf"), 1e16]))
        assert tree[0] == float("inf")
        assert tree[1] == float("-inf")
        assert tree[2] == 1e16
        assert math.isnan(parse(dumps(float("nan"))))
