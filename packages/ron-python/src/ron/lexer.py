"""RON lexer: turns source text into a lazy stream of positioned tokens."""

from __future__ import annotations

import re
from collections.abc import Iterator

from .errors import ErrorCode, LexError, Position, utf8_length
from .primitives import parse_number
from .string_utils import scan_string
from .types import Token, TokenKind

# One alternation per token class; strings are scanned by hand once the
# opening quote is seen so escapes can be reported at their exact offset.
_TOKEN_RE = re.compile(
    r"(?P<WHITESPACE>[ \t\r\n]+)"
    r"|(?P<COMMENT>//[^\n]*)"
    r"|(?P<PUNCT>[()\[\]{}:,])"
    r"|(?P<NUMBER>-?[0-9](?:[0-9A-Za-z_.]|(?<=[eE])[+-])*)"
    r"|(?P<MINUS>-)"
    r"|(?P<IDENTIFIER>[A-Za-z_][A-Za-z0-9_]*)"
    r'|(?P<QUOTE>")'
)

_PUNCTUATION = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    ":": TokenKind.COLON,
    ",": TokenKind.COMMA,
}

_BOOLEANS = {"true": True, "false": False}


def decode_source(data: str | bytes) -> str:
    """
    Return the source as text, decoding bytes as strict UTF-8.

    Raises:
        LexError: UNEXPECTED_CHAR at the first byte that is not valid UTF-8.
    """
    if isinstance(data, str):
        return data
    try:
        return bytes(data).decode("utf-8")
    except UnicodeDecodeError as exc:
        # Report the offset in the text decoded so far
        prefix = bytes(data[: exc.start]).decode("utf-8")
        raise LexError(
            ErrorCode.UNEXPECTED_CHAR,
            f"Invalid UTF-8 byte 0x{data[exc.start]:02x}",
            position=Position.locate(prefix, len(prefix)),
        ) from None


def tokenize(data: str | bytes) -> Iterator[Token]:
    """
    Tokenize RON source.

    Whitespace and ``//`` comments are skipped. The generator is lazy: a
    lexical error is raised only when the token stream reaches it.

    Args:
        data: Source text, or UTF-8 encoded bytes.

    Yields:
        Tokens in source order, ending with a single EOF token. Token
        offsets are UTF-8 byte offsets into the source.

    Raises:
        LexError: On the first invalid character, number, escape or string.
    """
    text = decode_source(data)
    pos = 0
    n = len(text)
    # byte_pos is the UTF-8 offset of text[scanned]
    byte_pos = 0
    scanned = 0

    while pos < n:
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise LexError(
                ErrorCode.UNEXPECTED_CHAR,
                f"Unexpected character {text[pos]!r}",
                position=Position.locate(text, pos),
            )

        kind = match.lastgroup
        lexeme = match.group()
        byte_pos += utf8_length(text, pos, scanned)
        scanned = pos

        if kind == "WHITESPACE" or kind == "COMMENT":
            pos = match.end()
            continue

        if kind == "PUNCT":
            yield Token(_PUNCTUATION[lexeme], lexeme, byte_pos)
            pos = match.end()
        elif kind == "NUMBER":
            value = parse_number(lexeme)
            if value is None:
                raise LexError(
                    ErrorCode.INVALID_NUMBER,
                    f"Invalid number {lexeme!r}",
                    position=Position.locate(text, pos),
                )
            token_kind = TokenKind.FLOAT if isinstance(value, float) else TokenKind.INTEGER
            yield Token(token_kind, value, byte_pos)
            pos = match.end()
        elif kind == "MINUS":
            raise LexError(
                ErrorCode.INVALID_NUMBER,
                "Expected digits after '-'",
                position=Position.locate(text, pos),
            )
        elif kind == "IDENTIFIER":
            if lexeme in _BOOLEANS:
                yield Token(TokenKind.BOOL, _BOOLEANS[lexeme], byte_pos)
            else:
                yield Token(TokenKind.IDENTIFIER, lexeme, byte_pos)
            pos = match.end()
        else:
            value, end = scan_string(text, pos)
            yield Token(TokenKind.STRING, value, byte_pos)
            pos = end

    yield Token(TokenKind.EOF, None, byte_pos + utf8_length(text, n, scanned))
