"""Error types raised by the RON lexer, parser and serializer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Every failure the engine can report."""

    # Lexer
    UNTERMINATED_STRING = "unterminated string"
    INVALID_ESCAPE = "invalid escape"
    INVALID_NUMBER = "invalid number"
    UNEXPECTED_CHAR = "unexpected character"

    # Parser
    UNEXPECTED_TOKEN = "unexpected token"
    AMBIGUOUS_STRUCT_FIELDS = "mixed named and positional struct fields"
    DUPLICATE_FIELD = "duplicate field"
    DUPLICATE_KEY = "duplicate key"
    HETEROGENEOUS_ARRAY = "heterogeneous array"
    HETEROGENEOUS_MAP_KEY = "heterogeneous map key"
    HETEROGENEOUS_MAP_VALUE = "heterogeneous map value"
    TRAILING_DATA = "trailing data"
    UNEXPECTED_EOF = "unexpected end of input"
    DEPTH_EXCEEDED = "maximum nesting depth exceeded"

    # Serializer
    NON_REPRESENTABLE_VALUE = "non-representable value"


@dataclass(frozen=True)
class Position:
    """
    A location in the source.

    ``offset`` is the UTF-8 byte offset; line and column are 1-based and
    count characters.
    """

    offset: int
    line: int
    column: int

    @classmethod
    def locate(cls, text: str, index: int) -> Position:
        """Derive the position of a character index into text."""
        index = max(0, min(index, len(text)))
        line = text.count("\n", 0, index) + 1
        line_start = text.rfind("\n", 0, index) + 1
        return cls(offset=utf8_length(text, index), line=line, column=index - line_start + 1)

    @classmethod
    def at_byte(cls, text: str, offset: int) -> Position:
        """Derive the position of a UTF-8 byte offset into text."""
        if text.isascii():
            return cls.locate(text, offset)
        prefix = text.encode("utf-8", "surrogatepass")[:offset]
        return cls.locate(text, len(prefix.decode("utf-8", "surrogatepass")))

    def __str__(self) -> str:
        return f"line {self.line} column {self.column}"


def utf8_length(text: str, end: int, start: int = 0) -> int:
    """Number of UTF-8 bytes in ``text[start:end]``."""
    chunk = text[start:end]
    if chunk.isascii():
        return len(chunk)
    return len(chunk.encode("utf-8", "surrogatepass"))


class RonError(ValueError):
    """
    Base class for all RON errors.

    Attributes:
        code: The ErrorCode of the failure.
        message: Human-readable description without location.
        position: Source location (lexer/parser errors), or None.
        index: Offending element index (heterogeneous arrays).
        expected: Canonical shape or key kind the element should have had.
        found: Shape or key kind actually found.
        key: Offending map key (duplicate or heterogeneous keys).
        field: Offending struct field name.
        path: Tree path of the offending node (serializer errors).
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str | None = None,
        *,
        position: Position | None = None,
        index: int | None = None,
        expected: Any = None,
        found: Any = None,
        key: Any = None,
        field: str | None = None,
        path: str | None = None,
    ):
        self.code = code
        self.message = message or code.value
        self.position = position
        self.index = index
        self.expected = expected
        self.found = found
        self.key = key
        self.field = field
        self.path = path
        super().__init__(str(self))

    @property
    def offset(self) -> int | None:
        return self.position.offset if self.position else None

    @property
    def line(self) -> int | None:
        return self.position.line if self.position else None

    @property
    def column(self) -> int | None:
        return self.position.column if self.position else None

    def __str__(self) -> str:
        if self.position is not None:
            return f"{self.message} at {self.position}"
        if self.path is not None:
            return f"{self.message} at {self.path}"
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.name}, {str(self)!r})"


class ParseError(RonError):
    """Raised when text is not a well-formed, internally consistent document."""


class LexError(ParseError):
    """Raised when the input cannot be split into tokens."""


class SerializeError(RonError):
    """Raised when a value tree has no textual representation."""
