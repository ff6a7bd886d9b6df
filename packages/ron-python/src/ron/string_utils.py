"""String utilities for RON encoding/decoding."""

import re

from .errors import ErrorCode, LexError, Position

# Short escape sequences understood inside string literals
ESCAPE_MAP = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

UNESCAPE_MAP = {
    "\\": "\\",
    '"': '"',
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

# Words that lex as booleans and can never name a struct or field
RESERVED_WORDS = frozenset({"true", "false"})

IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def escape_string(value: str) -> str:
    """
    Escape a string for use in a RON string literal.

    Backslash, double quote, newline, carriage return and tab use their
    short escapes; every other control character is written as ``\\uXXXX``.

    Args:
        value: The string to escape.

    Returns:
        The escaped string (without surrounding quotes).
    """
    result = []
    for char in value:
        if char in ESCAPE_MAP:
            result.append(ESCAPE_MAP[char])
        elif char < " " or char == "\x7f":
            result.append(f"\\u{ord(char):04x}")
        else:
            result.append(char)
    return "".join(result)


def has_surrogates(value: str) -> bool:
    """Check if a string holds UTF-16 surrogate code points (not encodable as UTF-8)."""
    return any("\ud800" <= char <= "\udfff" for char in value)


def is_identifier(value: str) -> bool:
    """
    Check if a string can be written as a bare struct or field name.

    Args:
        value: The candidate name.

    Returns:
        True if it matches ``[A-Za-z_][A-Za-z0-9_]*`` and is not reserved.
    """
    return bool(IDENTIFIER_PATTERN.fullmatch(value)) and value not in RESERVED_WORDS


def scan_string(text: str, start: int) -> tuple[str, int]:
    """
    Decode the string literal whose opening quote is at ``text[start]``.

    Args:
        text: The full source text.
        start: Offset of the opening double quote.

    Returns:
        The decoded content and the offset just past the closing quote.

    Raises:
        LexError: UNTERMINATED_STRING, INVALID_ESCAPE, or UNEXPECTED_CHAR for
            raw control characters.
    """
    result = []
    i = start + 1
    n = len(text)
    while i < n:
        char = text[i]
        if char == '"':
            return "".join(result), i + 1
        if char == "\\":
            if i + 1 >= n:
                break
            next_char = text[i + 1]
            if next_char in UNESCAPE_MAP:
                result.append(UNESCAPE_MAP[next_char])
                i += 2
            elif next_char == "u":
                decoded, i = _scan_unicode_escape(text, i)
                result.append(decoded)
            else:
                raise _lex_error(
                    ErrorCode.INVALID_ESCAPE, f"Invalid escape sequence: \\{next_char}", text, i
                )
            continue
        if char < " ":
            raise _lex_error(
                ErrorCode.UNEXPECTED_CHAR,
                f"Unescaped control character {char!r} in string",
                text,
                i,
            )
        result.append(char)
        i += 1

    raise _lex_error(ErrorCode.UNTERMINATED_STRING, "Unterminated string", text, start)


def _scan_unicode_escape(text: str, i: int) -> tuple[str, int]:
    """Decode ``\\uXXXX`` at ``text[i]``, combining a following low surrogate."""
    code = _read_hex4(text, i)
    end = i + 6

    if 0xDC00 <= code <= 0xDFFF:
        raise _lex_error(
            ErrorCode.INVALID_ESCAPE, "Lone trailing surrogate in unicode escape", text, i
        )

    if 0xD800 <= code <= 0xDBFF:
        if text[end : end + 2] != "\\u":
            raise _lex_error(
                ErrorCode.INVALID_ESCAPE, "Lone leading surrogate in unicode escape", text, i
            )
        low = _read_hex4(text, end)
        if not 0xDC00 <= low <= 0xDFFF:
            raise _lex_error(
                ErrorCode.INVALID_ESCAPE, "Lone leading surrogate in unicode escape", text, i
            )
        code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
        end += 6

    return chr(code), end


def _read_hex4(text: str, i: int) -> int:
    """Read the four hex digits of the ``\\u`` escape starting at ``text[i]``."""
    digits = text[i + 2 : i + 6]
    if len(digits) != 4 or not all(c in _HEX_DIGITS for c in digits):
        raise _lex_error(
            ErrorCode.INVALID_ESCAPE,
            "Invalid unicode escape (expected four hex digits)",
            text,
            i,
        )
    return int(digits, 16)


def _lex_error(code: ErrorCode, message: str, text: str, offset: int) -> LexError:
    return LexError(code, message, position=Position.locate(text, offset))
