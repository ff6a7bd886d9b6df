"""
RON (Rusty Object Notation) - Python Implementation

A JSON-like text format with named and positional structs, enum-style tagged
values, and homogeneous arrays and maps.

Usage:
    import ron

    # Parse RON text into a Value tree
    value = ron.parse('Config(name: "demo", sizes: [1, 2, 3])')
    value["sizes"][0]          # Integer(value=1)

    # Serialize a Value tree back to text
    text = ron.serialize(value)

    # With options
    from ron import ParseOptions, SerializeOptions

    value = ron.parse(text, ParseOptions(max_depth=32))
    text = ron.serialize(value, SerializeOptions(pretty=True, indent_width=2))
"""

__version__ = "0.1.0"

import logging

from .decode import load, parse, parse_lines, parse_stream_async
from .encode import dump, serialize, serialize_chunks
from .errors import ErrorCode, LexError, ParseError, Position, RonError, SerializeError
from .lexer import tokenize
from .types import ParseOptions, SerializeOptions, Token, TokenKind
from .value import (
    Array,
    Bool,
    Constant,
    Float,
    Integer,
    Kind,
    Map,
    Named,
    Positional,
    Shape,
    String,
    Struct,
    Value,
    shape_of,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Version
    "__version__",
    # Main API
    "parse",
    "parse_lines",
    "parse_stream_async",
    "load",
    "serialize",
    "serialize_chunks",
    "dump",
    "tokenize",
    # Options
    "ParseOptions",
    "SerializeOptions",
    # Values
    "Value",
    "Constant",
    "Bool",
    "Integer",
    "Float",
    "String",
    "Array",
    "Map",
    "Struct",
    "Positional",
    "Named",
    "Kind",
    "Shape",
    "shape_of",
    # Tokens
    "Token",
    "TokenKind",
    # Errors
    "ErrorCode",
    "Position",
    "RonError",
    "ParseError",
    "LexError",
    "SerializeError",
]
