"""RON parser implementation."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import AsyncIterable, Iterable, Iterator
from typing import IO

from .errors import ErrorCode, ParseError, Position
from .lexer import decode_source, tokenize
from .types import ParseOptions, Token, TokenKind
from .value import (
    Array,
    Bool,
    Float,
    Integer,
    Map,
    Named,
    Positional,
    String,
    Struct,
    Value,
    kind_of,
    shape_of,
)

logger = logging.getLogger(__name__)

_CONSTANTS = {
    TokenKind.BOOL: Bool,
    TokenKind.INTEGER: Integer,
    TokenKind.FLOAT: Float,
    TokenKind.STRING: String,
}

# Tokens that can begin an element
_ELEMENT_START = frozenset(
    {
        TokenKind.IDENTIFIER,
        TokenKind.LPAREN,
        TokenKind.LBRACKET,
        TokenKind.LBRACE,
        *_CONSTANTS,
    }
)


def parse(text: str | bytes, options: ParseOptions | None = None) -> Value:
    """
    Parse RON text into a Value tree.

    Args:
        text: The RON document, as text or UTF-8 bytes.
        options: Parsing options.

    Returns:
        The root Value.

    Raises:
        LexError: For malformed tokens.
        ParseError: For structural errors (unexpected tokens, mixed struct
            fields, duplicates, heterogeneous arrays or maps, trailing data,
            excessive nesting).
    """
    opts = options or ParseOptions()
    try:
        source = decode_source(text)
        parser = _Parser(source, tokenize(source), opts)
        try:
            result = parser.parse_document()
        except RecursionError:
            # max_depth is above what the interpreter stack can hold
            raise parser.stack_exhausted() from None
    except ParseError as exc:
        logger.debug("RON parse failed: %s (%s)", exc, exc.code.name)
        raise
    logger.debug("Parsed RON document (%d chars) into %s", len(source), kind_of(result).value)
    return result


def parse_lines(lines: Iterable[str], options: ParseOptions | None = None) -> Value:
    """
    Parse RON from pre-split lines.

    Args:
        lines: Iterable of line strings (without line terminators).
        options: Parsing options.

    Returns:
        The root Value.
    """
    return parse("\n".join(lines), options)


async def parse_stream_async(
    lines: AsyncIterable[str], options: ParseOptions | None = None
) -> Value:
    """
    Parse RON from an async iterable of lines.

    Args:
        lines: Async iterable of line strings.
        options: Parsing options.

    Returns:
        The root Value.
    """
    collected = []
    async for line in lines:
        collected.append(line)
    return parse_lines(collected, options)


def load(fp: IO, options: ParseOptions | None = None) -> Value:
    """
    Read a whole file-like object and parse it.

    Args:
        fp: An open text or binary stream.
        options: Parsing options.

    Returns:
        The root Value.
    """
    return parse(fp.read(), options)


class _Parser:
    """Recursive-descent parser over a token stream with two tokens of lookahead."""

    def __init__(self, text: str, tokens: Iterator[Token], options: ParseOptions):
        self.text = text
        self.tokens = tokens
        self.options = options
        self.buffer: deque[Token] = deque()
        self.opening = 0

    # -- token access -------------------------------------------------------

    def peek(self, ahead: int = 0) -> Token:
        """Look at a token without consuming it. Repeats EOF past the end."""
        while len(self.buffer) <= ahead:
            if self.buffer and self.buffer[-1].kind is TokenKind.EOF:
                return self.buffer[-1]
            self.buffer.append(next(self.tokens))
        return self.buffer[ahead]

    def advance(self) -> Token:
        token = self.peek()
        self.buffer.popleft()
        return token

    def expect(self, kind: TokenKind, context: str) -> Token:
        token = self.peek()
        if token.kind is not kind:
            raise self.unexpected(token, f"expected '{kind.value}' {context}")
        return self.advance()

    def at_field_name(self) -> bool:
        """True when the next tokens are ``identifier :``."""
        return (
            self.peek().kind is TokenKind.IDENTIFIER
            and self.peek(1).kind is TokenKind.COLON
        )

    # -- errors --------------------------------------------------------------

    def error(self, code: ErrorCode, message: str, offset: int, **details) -> ParseError:
        return ParseError(code, message, position=Position.at_byte(self.text, offset), **details)

    def stack_exhausted(self) -> ParseError:
        return self.error(
            ErrorCode.DEPTH_EXCEEDED,
            "Nesting too deep for the interpreter stack",
            self.opening,
        )

    def unexpected(self, token: Token, expectation: str) -> ParseError:
        if token.kind is TokenKind.EOF:
            return self.error(
                ErrorCode.UNEXPECTED_EOF,
                f"Unexpected end of input, {expectation}",
                token.offset,
            )
        return self.error(
            ErrorCode.UNEXPECTED_TOKEN,
            f"Unexpected {token.describe()}, {expectation}",
            token.offset,
        )

    # -- grammar -------------------------------------------------------------

    def parse_document(self) -> Value:
        value = self.parse_element(0)
        token = self.peek()
        if token.kind is not TokenKind.EOF:
            raise self.error(
                ErrorCode.TRAILING_DATA,
                f"Trailing {token.describe()} after document",
                token.offset,
            )
        return value

    def parse_element(self, depth: int) -> Value:
        token = self.peek()
        kind = token.kind

        if kind in _CONSTANTS:
            self.advance()
            return _CONSTANTS[kind](token.value)

        if kind is TokenKind.IDENTIFIER:
            if self.peek(1).kind is not TokenKind.LPAREN:
                raise self.error(
                    ErrorCode.UNEXPECTED_TOKEN,
                    f"Unexpected {token.describe()}, a struct name must be followed by '('",
                    token.offset,
                )
            self.advance()
            return self.parse_struct(token.value, token.offset, depth + 1)

        if kind is TokenKind.LPAREN:
            return self.parse_struct(None, token.offset, depth + 1)

        if kind is TokenKind.LBRACKET:
            return self.parse_array(depth + 1)

        if kind is TokenKind.LBRACE:
            return self.parse_map(depth + 1)

        raise self.unexpected(token, "expected a value")

    def enter(self, depth: int, offset: int) -> None:
        self.opening = offset
        if depth > self.options.max_depth:
            raise self.error(
                ErrorCode.DEPTH_EXCEEDED,
                f"Nesting deeper than {self.options.max_depth} levels",
                offset,
            )

    def end_of_item(self, closing: TokenKind, context: str) -> bool:
        """
        Consume the separator after an item.

        Returns True when the closing bracket was consumed, allowing one
        trailing comma before it.
        """
        token = self.peek()
        if token.kind is closing:
            self.advance()
            return True
        if token.kind is not TokenKind.COMMA:
            raise self.unexpected(token, f"expected ',' or '{closing.value}' in {context}")
        self.advance()
        if self.peek().kind is closing:
            self.advance()
            return True
        return False

    def parse_struct(self, name: str | None, offset: int, depth: int) -> Struct:
        self.enter(depth, offset)
        self.expect(TokenKind.LPAREN, "to open struct")

        if self.peek().kind is TokenKind.RPAREN:
            self.advance()
            return Struct(name, Positional())

        if self.at_field_name():
            return Struct(name, self.parse_named_fields(depth))
        return Struct(name, self.parse_positional_fields(depth))

    def parse_named_fields(self, depth: int) -> Named:
        fields: list[tuple[str, Value]] = []
        seen: set[str] = set()

        while True:
            token = self.peek()
            if not self.at_field_name():
                if token.kind in _ELEMENT_START:
                    raise self.error(
                        ErrorCode.AMBIGUOUS_STRUCT_FIELDS,
                        "Positional value in a struct with named fields",
                        token.offset,
                        index=len(fields),
                    )
                raise self.unexpected(token, "expected a field name")

            self.advance()
            self.advance()
            if token.value in seen:
                raise self.error(
                    ErrorCode.DUPLICATE_FIELD,
                    f"Duplicate field '{token.value}'",
                    token.offset,
                    field=token.value,
                )
            seen.add(token.value)
            fields.append((token.value, self.parse_element(depth)))

            if self.end_of_item(TokenKind.RPAREN, "struct"):
                return Named(fields)

    def parse_positional_fields(self, depth: int) -> Positional:
        values: list[Value] = []

        while True:
            token = self.peek()
            if self.at_field_name():
                raise self.error(
                    ErrorCode.AMBIGUOUS_STRUCT_FIELDS,
                    f"Named field '{token.value}' in a positional struct",
                    token.offset,
                    index=len(values),
                    field=token.value,
                )
            values.append(self.parse_element(depth))

            if self.end_of_item(TokenKind.RPAREN, "struct"):
                return Positional(values)

    def parse_array(self, depth: int) -> Array:
        opening = self.advance()
        self.enter(depth, opening.offset)

        items: list[Value] = []
        if self.peek().kind is TokenKind.RBRACKET:
            self.advance()
            return Array(items)

        expected = None
        while True:
            start = self.peek()
            item = self.parse_element(depth)
            shape = shape_of(item)
            if expected is None:
                expected = shape
            elif shape != expected:
                raise self.error(
                    ErrorCode.HETEROGENEOUS_ARRAY,
                    f"Array element {len(items)} is {shape}, expected {expected}",
                    start.offset,
                    index=len(items),
                    expected=expected,
                    found=shape,
                )
            items.append(item)

            if self.end_of_item(TokenKind.RBRACKET, "array"):
                return Array(items)

    def parse_map(self, depth: int) -> Map:
        opening = self.advance()
        self.enter(depth, opening.offset)

        entries: list[tuple[Value, Value]] = []
        if self.peek().kind is TokenKind.RBRACE:
            self.advance()
            return Map(entries)

        seen: set[Value] = set()
        key_kind = None
        value_shape = None
        while True:
            token = self.peek()
            if token.kind not in _CONSTANTS:
                raise self.unexpected(token, "expected a constant map key")
            self.advance()
            key = _CONSTANTS[token.kind](token.value)

            if key_kind is None:
                key_kind = kind_of(key)
            elif kind_of(key) is not key_kind:
                raise self.error(
                    ErrorCode.HETEROGENEOUS_MAP_KEY,
                    f"Map key is {kind_of(key).value}, expected {key_kind.value}",
                    token.offset,
                    index=len(entries),
                    expected=key_kind,
                    found=kind_of(key),
                    key=key,
                )
            if key in seen:
                raise self.error(
                    ErrorCode.DUPLICATE_KEY,
                    f"Duplicate map key {token.describe()}",
                    token.offset,
                    index=len(entries),
                    key=key,
                )
            seen.add(key)

            self.expect(TokenKind.COLON, "after map key")
            start = self.peek()
            value = self.parse_element(depth)
            shape = shape_of(value)
            if value_shape is None:
                value_shape = shape
            elif shape != value_shape:
                raise self.error(
                    ErrorCode.HETEROGENEOUS_MAP_VALUE,
                    f"Map value for {token.describe()} is {shape}, expected {value_shape}",
                    start.offset,
                    index=len(entries),
                    expected=value_shape,
                    found=shape,
                    key=key,
                )
            entries.append((key, value))

            if self.end_of_item(TokenKind.RBRACE, "map"):
                return Map(entries)
