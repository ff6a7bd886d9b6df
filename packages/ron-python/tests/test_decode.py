"""Tests for the RON parser."""

import asyncio
import io
import sys
from pathlib import Path

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ron import (
    Array,
    Bool,
    ErrorCode,
    Float,
    Integer,
    Kind,
    LexError,
    Map,
    Named,
    ParseError,
    ParseOptions,
    Positional,
    Shape,
    String,
    Struct,
    load,
    parse,
    parse_lines,
    parse_stream_async,
)


def parse_error(text, options=None):
    """Parse text that must fail and return the error."""
    with pytest.raises(ParseError) as info:
        parse(text, options)
    return info.value


class TestConstants:
    """Test parsing of constant values."""

    def test_booleans(self):
        assert parse("true") == Bool(True)
        assert parse("false") == Bool(False)

    def test_integer(self):
        assert parse("42") == Integer(42)
        assert parse("-17") == Integer(-17)

    def test_float(self):
        assert parse("3.14") == Float(3.14)
        assert parse("1e3") == Float(1000.0)

    def test_integer_and_float_are_distinct(self):
        assert parse("1") != parse("1.0")

    def test_string(self):
        assert parse('"hello"') == String("hello")

    def test_surrounding_whitespace(self):
        assert parse("  \n 42 \t\n") == Integer(42)


class TestStructs:
    """Test struct disambiguation."""

    def test_unnamed_positional(self):
        assert parse("(1,2)") == Struct(None, Positional((Integer(1), Integer(2))))

    def test_named_positional(self):
        assert parse("Some(5)") == Struct("Some", Positional((Integer(5),)))

    def test_unnamed_named_fields(self):
        result = parse("(a:1,b:2)")
        assert result == Struct(None, Named((("a", Integer(1)), ("b", Integer(2)))))
        assert result.is_named
        assert result["b"] == Integer(2)

    def test_named_struct_with_named_fields(self):
        result = parse('Point(x: 1.5, y: -2.0, label: "origin")')
        assert result.name == "Point"
        assert result.fields.names() == ["x", "y", "label"]
        assert result["label"] == String("origin")

    def test_heterogeneous_fields_allowed(self):
        result = parse('(1, "two", [3], {4: 5}, Six())')
        assert len(result) == 5
        assert isinstance(result[2], Array)
        assert isinstance(result[3], Map)

    def test_unit(self):
        assert parse("()") == Struct(None, Positional())

    def test_named_unit(self):
        result = parse("None()")
        assert result == Struct("None", Positional())
        assert not result.is_named

    def test_trailing_comma(self):
        assert parse("(1,2,)") == parse("(1,2)")
        assert parse("(a:1,)") == parse("(a:1)")

    def test_nested(self):
        result = parse("Outer(inner: Inner(1, (a: true)))")
        inner = result["inner"]
        assert inner.name == "Inner"
        assert inner[1] == Struct(None, Named((("a", Bool(True)),)))

    def test_positional_struct_of_named_struct(self):
        # A leading identifier followed by '(' is a struct, not a field name
        result = parse("(Some(1), 2)")
        assert not result.is_named
        assert result[0] == Struct("Some", Positional((Integer(1),)))

    def test_whitespace_between_name_and_paren(self):
        assert parse("Some (5)") == parse("Some(5)")

    def test_named_then_positional_is_ambiguous(self):
        error = parse_error("(a:1, 2)")
        assert error.code is ErrorCode.AMBIGUOUS_STRUCT_FIELDS
        assert error.offset == 6
        assert error.index == 1

    def test_positional_then_named_is_ambiguous(self):
        error = parse_error("(1, a: 2)")
        assert error.code is ErrorCode.AMBIGUOUS_STRUCT_FIELDS
        assert error.field == "a"

    def test_duplicate_field(self):
        error = parse_error("(a: 1, b: 2, a: 3)")
        assert error.code is ErrorCode.DUPLICATE_FIELD
        assert error.field == "a"
        assert error.offset == 13

    def test_bare_identifier(self):
        error = parse_error("foo")
        assert error.code is ErrorCode.UNEXPECTED_TOKEN

    def test_bare_identifier_in_positional_struct(self):
        error = parse_error("(1, foo)")
        assert error.code is ErrorCode.UNEXPECTED_TOKEN
        assert error.offset == 4

    def test_missing_comma(self):
        error = parse_error("(a: 1 b: 2)")
        assert error.code is ErrorCode.UNEXPECTED_TOKEN

    def test_missing_field_value(self):
        error = parse_error("(a: )")
        assert error.code is ErrorCode.UNEXPECTED_TOKEN

    def test_reserved_word_is_not_a_struct_name(self):
        error = parse_error("true(1)")
        assert error.code is ErrorCode.TRAILING_DATA


class TestArrays:
    """Test arrays and their homogeneity."""

    def test_integers(self):
        result = parse("[1, 2, 3]")
        assert result == Array((Integer(1), Integer(2), Integer(3)))
        assert len(result) == 3

    def test_empty(self):
        assert parse("[]") == Array(())

    def test_trailing_comma(self):
        assert parse("[1,2,3,]") == parse("[1,2,3]")

    def test_mixed_kinds(self):
        error = parse_error('[1, "a"]')
        assert error.code is ErrorCode.HETEROGENEOUS_ARRAY
        assert error.index == 1
        assert error.expected == Shape(Kind.INTEGER)
        assert error.found == Shape(Kind.STRING)
        assert error.offset == 4

    def test_integer_and_float_differ(self):
        error = parse_error("[1, 2.0]")
        assert error.code is ErrorCode.HETEROGENEOUS_ARRAY

    def test_same_struct_shape(self):
        result = parse("[(a: 1), (a: 2)]")
        assert len(result) == 2

    def test_struct_arity_differs(self):
        error = parse_error("[Some(1), Some(1, 2)]")
        assert error.code is ErrorCode.HETEROGENEOUS_ARRAY
        assert error.expected == Shape(Kind.STRUCT, "Some", False, 1)
        assert error.found == Shape(Kind.STRUCT, "Some", False, 2)

    def test_struct_name_differs(self):
        error = parse_error("[Some(1), Other(1)]")
        assert error.code is ErrorCode.HETEROGENEOUS_ARRAY

    def test_struct_field_style_differs(self):
        error = parse_error("[(1), (a: 1)]")
        assert error.code is ErrorCode.HETEROGENEOUS_ARRAY

    def test_nested_arrays_may_differ_in_content(self):
        result = parse('[[1], ["a"], []]')
        assert len(result) == 3

    def test_error_names_shapes(self):
        error = parse_error("[Some(1), (a: 1)]")
        assert "Struct (named, 1)" in error.message
        assert "Struct Some(positional, 1)" in error.message

    @pytest.mark.parametrize("text", ["[,]", "[1,,2]", "[1 2]", "[:]"])
    def test_malformed(self, text):
        assert parse_error(text).code is ErrorCode.UNEXPECTED_TOKEN


class TestMaps:
    """Test maps, key rules and value homogeneity."""

    def test_order_and_lookup(self):
        result = parse('{"metal":(reflectivity:1.0),"plastic":(reflectivity:0.5)}')
        assert isinstance(result, Map)
        assert result.keys() == [String("metal"), String("plastic")]
        assert result[String("plastic")] == Struct(None, Named((("reflectivity", Float(0.5)),)))
        for value in result.values():
            assert value.is_named
            assert value.fields.names() == ["reflectivity"]

    def test_order_is_insertion_order(self):
        result = parse('{"b": 1, "a": 2, "c": 3}')
        assert [key.value for key in result] == ["b", "a", "c"]

    def test_integer_keys(self):
        result = parse('{1: "one", 2: "two"}')
        assert result[Integer(1)] == String("one")
        assert Float(1.0) not in result

    def test_bool_and_float_keys(self):
        assert len(parse("{true: 1, false: 0}")) == 2
        assert len(parse("{1.5: 1, 2.5: 0,}")) == 2

    def test_empty(self):
        assert parse("{}") == Map(())

    def test_heterogeneous_keys(self):
        error = parse_error('{1: "a", "b": "c"}')
        assert error.code is ErrorCode.HETEROGENEOUS_MAP_KEY
        assert error.expected is Kind.INTEGER
        assert error.found is Kind.STRING
        assert error.key == String("b")

    def test_heterogeneous_values(self):
        error = parse_error('{"a": 1, "b": "x"}')
        assert error.code is ErrorCode.HETEROGENEOUS_MAP_VALUE
        assert error.key == String("b")
        assert error.offset == 14

    def test_duplicate_key(self):
        error = parse_error('{"a": 1, "a": 2}')
        assert error.code is ErrorCode.DUPLICATE_KEY
        assert error.key == String("a")
        assert error.offset == 9

    @pytest.mark.parametrize("text", ["{(1): 2}", "{a: 1}", "{[1]: 2}", "{Some(1): 2}"])
    def test_non_constant_keys(self, text):
        assert parse_error(text).code is ErrorCode.UNEXPECTED_TOKEN

    def test_missing_colon(self):
        assert parse_error('{"a" 1}').code is ErrorCode.UNEXPECTED_TOKEN


class TestDocument:
    """Test document-level rules."""

    def test_empty_input(self):
        assert parse_error("").code is ErrorCode.UNEXPECTED_EOF
        assert parse_error("  // only a comment").code is ErrorCode.UNEXPECTED_EOF

    @pytest.mark.parametrize("text", ["[1,", "(a: ", "{", '{"a":', "Some("])
    def test_truncated(self, text):
        assert parse_error(text).code is ErrorCode.UNEXPECTED_EOF

    def test_trailing_data(self):
        error = parse_error("1 2")
        assert error.code is ErrorCode.TRAILING_DATA
        assert error.offset == 2
        assert str(error) == "Trailing integer 2 after document at line 1 column 3"

    def test_comments_are_transparent(self):
        assert parse("[1, //note\n2]") == parse("[1,2]")

    def test_comments_everywhere(self):
        text = """
        // leading
        Config( // after paren
            name: "x", // after value
            // own line
            sizes: [1, 2], // trailing
        ) // after document
        """
        assert parse(text) == parse('Config(name:"x",sizes:[1,2])')

    def test_bytes_input(self):
        assert parse('["é"]'.encode("utf-8")) == Array((String("é"),))

    def test_error_offset_is_byte_offset(self):
        error = parse_error('["é", 1]')
        assert error.code is ErrorCode.HETEROGENEOUS_ARRAY
        assert error.offset == 7
        assert error.column == 7
        assert parse_error('["é", 1]'.encode("utf-8")).offset == 7

    def test_lex_error_is_parse_error(self):
        error = parse_error('"abc')
        assert isinstance(error, LexError)
        assert error.code is ErrorCode.UNTERMINATED_STRING

    def test_first_error_left_to_right(self):
        # The array error comes before the bad character in the source
        assert parse_error('[1, "a", @]').code is ErrorCode.HETEROGENEOUS_ARRAY
        assert parse_error('[1, @, "a"]').code is ErrorCode.UNEXPECTED_CHAR

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse("[1, 2")


class TestDepth:
    """Test the nesting guard."""

    def test_deep_arrays_fail_cleanly(self):
        text = "[" * 10_000 + "]" * 10_000
        error = parse_error(text)
        assert error.code is ErrorCode.DEPTH_EXCEEDED
        assert error.offset == 128

    def test_deep_structs_fail_cleanly(self):
        text = "A(" * 10_000 + ")" * 10_000
        assert parse_error(text).code is ErrorCode.DEPTH_EXCEEDED

    def test_default_limit_is_inclusive(self):
        text = "[" * 128 + "]" * 128
        assert isinstance(parse(text), Array)

    def test_custom_limit(self):
        options = ParseOptions(max_depth=3)
        assert parse("[{1: (2)}]", options) == parse("[{1: (2)}]")
        error = parse_error("[[[[1]]]]", options)
        assert error.code is ErrorCode.DEPTH_EXCEEDED
        assert error.offset == 3

    def test_limit_beyond_interpreter_stack(self):
        depth = sys.getrecursionlimit() * 2
        text = "[" * depth + "]" * depth
        error = parse_error(text, ParseOptions(max_depth=depth))
        assert error.code is ErrorCode.DEPTH_EXCEEDED
        assert error.offset < depth
        # The parser is usable again afterwards
        assert parse("[[1]]") == Array((Array((Integer(1),)),))

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            ParseOptions(max_depth=0)


class TestEntryPoints:
    """Test alternative parse entry points."""

    def test_parse_lines(self):
        lines = ["Point(", "    x: 1, // x", "    y: 2,", ")"]
        assert parse_lines(lines) == parse("Point(x: 1, y: 2)")

    def test_parse_stream_async(self):
        async def lines():
            for line in ["[", "1,", "2", "]"]:
                yield line

        assert asyncio.run(parse_stream_async(lines())) == parse("[1, 2]")

    def test_load_text(self):
        assert load(io.StringIO("Some(1)")) == Struct("Some", Positional((Integer(1),)))

    def test_load_binary(self):
        assert load(io.BytesIO(b'{"k": [true]}')) == parse('{"k": [true]}')

    def test_load_honours_options(self):
        with pytest.raises(ParseError):
            load(io.StringIO("[[1]]"), ParseOptions(max_depth=1))
