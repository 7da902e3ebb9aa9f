"""Tests for number and string utilities."""

import math
import struct

import pytest
from eon.utils.numbers import format_number, parse_number
from eon.utils.strings import (
    escape_basic,
    is_valid_identifier,
    key_needs_quotes,
    quote_multiline,
    quote_string,
)


class TestNumbers:
    """Tests for parse_number and format_number."""

    @pytest.mark.parametrize("text,expected", [
        ("0", 0),
        ("-0", 0),
        ("+12", 12),
        ("1_000_000", 1000000),
        ("0xFF", 255),
        ("-0x10", -16),
        ("0b1010", 10),
        ("0xdead_beef", 0xDEADBEEF),
        ("1.5", 1.5),
        ("-.5", -0.5),
        ("6.02e23", 6.02e23),
        ("1_0.2_5", 10.25),
    ])
    def test_parse(self, text, expected):
        """Test accepted literals."""
        value = parse_number(text)
        assert value == expected
        assert type(value) is type(expected)

    def test_negative_zero_float(self):
        """Test that the sign of zero survives."""
        assert math.copysign(1.0, parse_number("-0.0")) == -1.0

    @pytest.mark.parametrize("text", ["inf", "nan", "NaN", "+Infinity", "1__2", "0x_1", "0b2", "1e", "--1", "."])
    def test_parse_rejects(self, text):
        """Test rejected literals."""
        with pytest.raises(ValueError):
            parse_number(text)

    def test_nan_suggestion(self):
        """Test the message for unsigned NaN."""
        with pytest.raises(ValueError, match=r"\+nan"):
            parse_number("nan")

    @pytest.mark.parametrize("value", [
        0.1, -0.0, 1e-7, 5e-324, 1.7976931348623157e308, 123456789.123, -2.5, 1e22,
    ])
    def test_float_round_trip_is_bit_exact(self, value):
        """Test that rendering then parsing gives the same bits."""
        parsed = parse_number(format_number(value))
        assert struct.pack("<d", parsed) == struct.pack("<d", value)

    def test_integers_round_trip(self):
        """Test large integers in both directions."""
        for value in (0, -1, 2 ** 127, -(2 ** 127), 2 ** 128 - 1):
            assert parse_number(format_number(value)) == value

    def test_specials(self):
        """Test infinities and NaN."""
        assert format_number(math.inf) == "+inf"
        assert format_number(-math.inf) == "-inf"
        assert format_number(math.nan) == "+nan"
        assert parse_number("+inf") == math.inf
        assert math.isnan(parse_number("-nan"))

    def test_bool_is_not_a_number(self):
        """Test that bools are rejected."""
        with pytest.raises(TypeError):
            format_number(True)


class TestStrings:
    """Tests for string quoting helpers."""

    def test_identifiers(self):
        """Test identifier detection."""
        assert is_valid_identifier("snake_case1")
        assert is_valid_identifier("_private")
        assert not is_valid_identifier("1abc")
        assert not is_valid_identifier("kebab-case")
        assert not is_valid_identifier("")
        assert not is_valid_identifier("héllo")

    def test_key_needs_quotes(self):
        """Test which keys must be quoted."""
        assert not key_needs_quotes("name")
        assert key_needs_quotes("true")
        assert key_needs_quotes("null")
        assert key_needs_quotes("with space")

    def test_escape_basic(self):
        """Test minimal escaping."""
        assert escape_basic('a"b\\c\n\t') == 'a\\"b\\\\c\\n\\t'
        assert escape_basic("é😀") == "é😀"
        assert escape_basic("\x00\x1b") == "\\u{0}\\u{1b}"

    def test_quote_string(self):
        """Test the choice between basic and literal quoting."""
        assert quote_string("hello") == '"hello"'
        assert quote_string('say "hi"') == "'say \"hi\"'"
        assert quote_string("C:\\path\\file") == "'C:\\path\\file'"
        assert quote_string("it's \"x\"") == '"it\'s \\"x\\""'

    def test_quote_multiline(self):
        """Test multiline literal quoting."""
        assert quote_multiline("a\nb") == "'''\na\nb'''"
        assert quote_multiline("ends with '") is None
        assert quote_multiline("has ''' inside") is None
        assert quote_multiline("bell\x07") is None
