"""Tests for the parser."""

import json
import math

import pytest
from eon.models import ListContents, Map, MapContents, Scalar, Variant, VariantCall
from eon.parser import MAX_NESTING_DEPTH, Parser
from eon.types import DocumentShape, ErrorKind, LexError, ParseError, StringFlavor


class TestParserValues:
    """Tests for Parser.parse_value."""

    def setup_method(self):
        """Set up test fixtures."""
        self.parser = Parser()

    def test_implicit_map(self):
        """Test key-value pairs at the top level."""
        value = self.parser.parse_value('name: "demo"\nport: 8080')

        assert value == Map([("name", "demo"), ("port", 8080)])
        assert list(value) == ["name", "port"]

    def test_empty_document_is_empty_map(self):
        """Test that empty input is an empty map."""
        assert self.parser.parse_value("") == Map()
        assert self.parser.parse_value("  // just a comment\n") == Map()

    def test_single_value(self):
        """Test a document holding one value."""
        assert self.parser.parse_value("42") == 42
        assert self.parser.parse_value('"hello"') == "hello"
        assert self.parser.parse_value("[1, 2]") == [1, 2]

    def test_implicit_list(self):
        """Test several values at the top level."""
        assert self.parser.parse_value("1\n2\n3") == [1, 2, 3]
        assert self.parser.parse_value("1, 2, 3") == [1, 2, 3]

    def test_commas_are_optional(self):
        """Test that separators do not change the value."""
        expected = self.parser.parse_value("[1, 2, 3]")

        assert self.parser.parse_value("[1 2 3]") == expected
        assert self.parser.parse_value("[1,2,3,]") == expected
        assert self.parser.parse_value("{a: 1 b: 2}") == self.parser.parse_value("{a: 1, b: 2,}")

    def test_unquoted_and_quoted_keys_are_equal(self):
        """Test that identifier keys desugar to strings."""
        assert self.parser.parse_value("{a: 1}") == self.parser.parse_value('{"a": 1}')

    def test_keyword_keys(self):
        """Test that unquoted true/false/null keys are not strings."""
        value = self.parser.parse_value("{true: 1, null: 2, \"true\": 3}")

        assert value[True] == 1
        assert value[None] == 2
        assert value["true"] == 3
        assert len(value) == 3

    def test_arbitrary_keys(self):
        """Test lists, maps and numbers as map keys."""
        value = self.parser.parse_value("{[1, 2]: \"list\", {x: 1}: \"map\", 3: \"number\"}")

        assert value[[1, 2]] == "list"
        assert value[Map([("x", 1)])] == "map"
        assert value[3] == "number"

    def test_variants(self):
        """Test sum-type calls."""
        assert self.parser.parse_value('"Gray"(128)') == Variant("Gray", [128])
        assert self.parser.parse_value('"Rgb"(255 0 0)') == Variant("Rgb", [255, 0, 0])
        assert self.parser.parse_value("'Tag'(1)") == Variant("Tag", [1])

    def test_zero_argument_variant_is_the_tag(self):
        """Test that "Tag"() and "Tag" are the same value."""
        assert self.parser.parse_value('"Tag"()') == "Tag"
        assert self.parser.parse_value('"Tag"') == self.parser.parse_value('"Tag"()')

    def test_special_numbers(self):
        """Test signed infinities and NaN values."""
        value = self.parser.parse_value("[+inf, -inf, +nan]")

        assert value[0] == math.inf
        assert value[1] == -math.inf
        assert math.isnan(value[2])

    def test_json_is_valid(self, json_document):
        """Test that JSON parses to the equivalent value."""
        value = self.parser.parse_value(json_document)
        expected = json.loads(json_document)

        assert value == expected
        assert value["users"][1]["manager"] is None
        assert value["escaped"] == 'line\nbreak "quoted" é'

    def test_bytes_input(self):
        """Test parsing UTF-8 bytes."""
        assert self.parser.parse_value('name: "é"'.encode("utf-8")) == Map([("name", "é")])

    def test_nesting_limit(self):
        """Test that deep nesting is rejected."""
        depth = MAX_NESTING_DEPTH
        assert self.parser.parse_value("[" * depth + "]" * depth) is not None

        with pytest.raises(ParseError) as exc_info:
            self.parser.parse_value("[" * (depth + 1) + "]" * (depth + 1))
        assert exc_info.value.kind == ErrorKind.NESTING_TOO_DEEP

    def test_custom_nesting_limit(self):
        """Test the max_depth option."""
        parser = Parser(max_depth=2)

        assert parser.parse_value("[1]") == [1]
        assert parser.parse_value("a: [1]") == Map([("a", [1])])
        with pytest.raises(ParseError) as exc_info:
            parser.parse_value("a: [[1]]")
        assert exc_info.value.kind == ErrorKind.NESTING_TOO_DEEP


class TestParserErrors:
    """Tests for parse errors."""

    def setup_method(self):
        """Set up test fixtures."""
        self.parser = Parser()

    def parse_error(self, source):
        with pytest.raises(ParseError) as exc_info:
            self.parser.parse(source)
        return exc_info.value

    def test_duplicate_key(self):
        """Test that repeated keys are an error pointing at both keys."""
        error = self.parse_error('{"a": 1, "a": 2}')

        assert error.kind == ErrorKind.DUPLICATE_KEY
        assert error.column == 10
        assert error.related_span.column == 2

    def test_duplicate_key_is_structural(self):
        """Test that a quoted and an unquoted key are the same key."""
        assert self.parse_error('a: 1\n"a": 2').kind == ErrorKind.DUPLICATE_KEY
        assert self.parse_error("{1: 1, 1.0: 2}").kind == ErrorKind.DUPLICATE_KEY

    def test_variant_followed_by_map_is_rejected(self):
        """Test that a string and a map are not read as a call."""
        error = self.parse_error('"Rgb"{r: 1}')
        assert error.kind == ErrorKind.UNEXPECTED_TOKEN
        assert error.column == 6

        assert self.parse_error('"Tags" [1]').kind == ErrorKind.UNEXPECTED_TOKEN

    def test_string_then_container_with_separator(self):
        """Test that a comma or a line break makes two values."""
        assert self.parser.parse_value('"Rgb", {r: 1}') == ["Rgb", Map([("r", 1)])]
        assert self.parser.parse_value('"Rgb"\n{r: 1}') == ["Rgb", Map([("r", 1)])]
        assert self.parser.parse_value('1 {r: 1}') == [1, Map([("r", 1)])]

    def test_call_arguments_on_next_line(self):
        """Test that the opening parenthesis may follow on a new line."""
        assert self.parser.parse_value('"a"\n(1)') == Variant("a", [1])

    def test_parenthesis_needs_a_string(self):
        """Test calls on anything but a string."""
        assert self.parse_error("a: {}()").kind == ErrorKind.UNEXPECTED_TOKEN
        assert self.parse_error("[](1)").kind == ErrorKind.UNEXPECTED_TOKEN
        assert self.parse_error("a: (1)").kind == ErrorKind.UNEXPECTED_TOKEN

    def test_bare_identifier_value(self):
        """Test unknown keywords with suggestions."""
        error = self.parse_error("a: inf")

        assert error.kind == ErrorKind.UNEXPECTED_TOKEN
        assert "+inf or -inf" in error.message
        assert "null" in self.parse_error("a: None").message
        assert "true" in self.parse_error("a: True").message

    def test_bare_identifier_document(self):
        """Test a lone identifier at the top level."""
        assert self.parse_error("hello").kind == ErrorKind.UNEXPECTED_TOKEN

    def test_leading_comma(self):
        """Test a comma without a preceding element."""
        assert self.parse_error("[,]").kind == ErrorKind.UNEXPECTED_TOKEN
        assert self.parse_error("[1,,2]").kind == ErrorKind.UNEXPECTED_TOKEN

    def test_unclosed_containers(self):
        """Test running out of input inside a container."""
        for source in ("[1, 2", "{a: 1", '"Tag"(1', "a:"):
            error = self.parse_error(source)
            assert error.kind == ErrorKind.UNEXPECTED_END_OF_INPUT, source

    def test_unbalanced_closer(self):
        """Test a closing bracket without an opener."""
        error = self.parse_error("a: 1\n]")

        assert error.kind == ErrorKind.UNEXPECTED_TOKEN
        assert error.line == 2

    def test_mismatched_closer(self):
        """Test closing a list with a brace."""
        error = self.parse_error("[1, 2}")

        assert error.kind == ErrorKind.UNEXPECTED_TOKEN
        assert error.expected == "close bracket ']'"

    def test_missing_colon(self):
        """Test a map entry without a colon."""
        assert self.parse_error("{a 1}").kind == ErrorKind.UNEXPECTED_TOKEN

    def test_mixed_top_level(self):
        """Test map entries after a top-level value."""
        assert self.parse_error("1\na: 2").kind == ErrorKind.UNEXPECTED_TOKEN

    def test_lexical_errors_propagate(self):
        """Test that lexer errors abort the parse."""
        error = self.parse_error('a: "unterminated')

        assert isinstance(error, LexError)
        assert error.kind.category == "lexical"

    def test_invalid_utf8(self):
        """Test undecodable input."""
        error = self.parse_error(b'a: "\xff"')

        assert error.kind == ErrorKind.INVALID_UTF8
        assert error.offset == 4
        assert error.line == 1

    def test_error_message_has_location(self):
        """Test the string form of a parse error."""
        error = self.parse_error("a: 1\nb: @")
        assert str(error).endswith("at line 2, column 4")


class TestParserDocuments:
    """Tests for the comment-preserving document tree."""

    def setup_method(self):
        """Set up test fixtures."""
        self.parser = Parser()

    def test_document_shapes(self):
        """Test the three top-level shapes."""
        assert self.parser.parse("a: 1").shape == DocumentShape.MAP
        assert self.parser.parse("").shape == DocumentShape.MAP
        assert self.parser.parse("1 2").shape == DocumentShape.LIST
        assert self.parser.parse("{a: 1}").shape == DocumentShape.VALUE
        assert self.parser.parse("[1]").shape == DocumentShape.VALUE

    def test_top_level_list_without_commas(self):
        """Test that commas stay optional between top-level values."""
        expected = self.parser.parse_value("1, 2, 3")

        assert self.parser.parse_value("1 2 3") == expected
        assert self.parser.parse_value('"a" "b"') == ["a", "b"]
        assert self.parser.parse_value("[1][2]") == [[1], [2]]
        assert self.parser.parse_value("{a: 1} {b: 2}") == [Map([("a", 1)]), Map([("b", 2)])]

    def test_comment_attachment(self):
        """Test prefix, suffix and closing comments."""
        document = self.parser.parse(
            "// about a\n"
            "a: 1 // one\n"
            "b: [\n"
            "\t2, // two\n"
            "\t// end of list\n"
            "]\n"
            "// end of file\n"
        )
        root = document.root.value
        assert isinstance(root, MapContents)

        first, second = root.entries
        assert first.key.prefix_comments == ["// about a"]
        assert first.value.suffix_comment == "// one"

        items = second.value.value
        assert isinstance(items, ListContents)
        assert items.items[0].suffix_comment == "// two"
        assert items.closing_comments == ["// end of list"]
        assert root.closing_comments == ["// end of file"]

    def test_comment_after_key(self):
        """Test that a comment between key and value stays with the value."""
        document = self.parser.parse("a: // note\n\t1")
        entry = document.root.value.entries[0]

        assert entry.value.prefix_comments == ["// note"]

    def test_all_comments_are_kept(self):
        """Test that no comment is lost."""
        source = "// 1\na: [ // 2\n1 // 3\n// 4\n] // 5\n// 6\n"
        document = self.parser.parse(source)

        assert sorted(document.comments()) == ["// 1", "// 2", "// 3", "// 4", "// 5", "// 6"]

    def test_multiline_hint(self):
        """Test that a line break after the opener is recorded."""
        document = self.parser.parse("a: [1, 2]\nb: [\n1\n]\nc: \"T\"(\n1\n)")
        entries = document.root.value.entries

        assert entries[0].value.value.multiline is False
        assert entries[1].value.value.multiline is True
        call = entries[2].value.value
        assert isinstance(call, VariantCall)
        assert call.multiline is True

    def test_string_flavors(self):
        """Test that string flavors are recorded on scalars."""
        document = self.parser.parse("key: '''\nline'''")
        entry = document.root.value.entries[0]

        assert entry.key.value == Scalar("key", StringFlavor.IDENTIFIER)
        assert entry.value.value.flavor == StringFlavor.MULTILINE_LITERAL

    def test_spans(self):
        """Test node spans."""
        document = self.parser.parse("a: [1,\n2]")
        value = document.root.value.entries[0].value

        assert value.span.line == 1
        assert value.span.column == 4
        assert value.span.last_line == 2
