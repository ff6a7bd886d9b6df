"""Type definitions for the RON lexer, parser and serializer."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple

DEFAULT_MAX_DEPTH = 128


class TokenKind(Enum):
    """Kinds of tokens produced by the lexer."""

    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    COLON = ":"
    COMMA = ","
    IDENTIFIER = "identifier"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOL = "bool"
    EOF = "end of input"


class Token(NamedTuple):
    """A lexed token: kind, decoded value and UTF-8 byte offset into the source."""

    kind: TokenKind
    value: Any
    offset: int

    def describe(self) -> str:
        """Short human-readable description used in error messages."""
        if self.kind is TokenKind.EOF:
            return "end of input"
        if self.kind is TokenKind.IDENTIFIER:
            return f"identifier '{self.value}'"
        if self.kind is TokenKind.STRING:
            return f"string {self.value!r}"
        if self.kind is TokenKind.BOOL:
            return "true" if self.value else "false"
        if self.kind in (TokenKind.INTEGER, TokenKind.FLOAT):
            return f"{self.kind.value} {self.value!r}"
        return f"'{self.kind.value}'"


@dataclass
class ParseOptions:
    """Options for RON parsing."""

    max_depth: int = DEFAULT_MAX_DEPTH
    """Maximum nesting of structs, arrays and maps before parsing aborts."""

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {self.max_depth}")


@dataclass
class SerializeOptions:
    """Options for RON serialization."""

    pretty: bool = False
    """Emit one element per line with indentation instead of compact output."""

    indent_width: int = 4
    """Number of spaces per indentation level (pretty output only)."""

    trailing_comma: bool = False
    """Emit a comma after the last element of non-empty containers."""

    def __post_init__(self) -> None:
        if isinstance(self.indent_width, bool) or not isinstance(self.indent_width, int):
            raise ValueError(f"indent_width must be an integer, got {self.indent_width!r}")
        if self.indent_width < 1:
            raise ValueError(f"indent_width must be positive, got {self.indent_width}")
