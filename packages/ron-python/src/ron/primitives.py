"""Constant value encoding and number literal parsing for RON."""

import math
import re

from .errors import ErrorCode, SerializeError
from .string_utils import escape_string, has_surrogates
from .value import Bool, Constant, Float, Integer, String

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

NUMBER_PATTERN = re.compile(r"-?[0-9]+(?P<fraction>\.[0-9]+)?(?P<exponent>[eE][+-]?[0-9]+)?")


def encode_constant(value: Constant, path: str = "$") -> str:
    """
    Encode a constant value to its RON literal.

    Args:
        value: A Bool, Integer, Float or String.
        path: Tree path of the value, reported on failure.

    Returns:
        The literal text.

    Raises:
        SerializeError: For NaN/infinite floats, integers outside the signed
            64-bit range and strings with surrogate code points.
        TypeError: If value is not a constant.
    """
    if isinstance(value, Bool):
        return "true" if value.value else "false"

    if isinstance(value, Integer):
        return _encode_integer(value.value, path)

    if isinstance(value, Float):
        return _encode_float(value.value, path)

    if isinstance(value, String):
        return encode_string_literal(value.value, path)

    raise TypeError(f"Cannot encode value of type {type(value).__name__} as a constant")


def _encode_integer(value: int, path: str) -> str:
    if not INT64_MIN <= value <= INT64_MAX:
        raise SerializeError(
            ErrorCode.NON_REPRESENTABLE_VALUE,
            f"Integer {value} is outside the signed 64-bit range",
            path=path,
        )
    return str(value)


def _encode_float(value: float, path: str) -> str:
    if math.isnan(value) or math.isinf(value):
        raise SerializeError(
            ErrorCode.NON_REPRESENTABLE_VALUE,
            f"Float {value!r} has no RON literal",
            path=path,
        )
    # repr always has a '.' or an exponent for finite floats, so it re-lexes as a float
    return repr(value)


def encode_string_literal(value: str, path: str = "$") -> str:
    """Encode a string value as a quoted literal."""
    if has_surrogates(value):
        raise SerializeError(
            ErrorCode.NON_REPRESENTABLE_VALUE,
            "String contains surrogate code points",
            path=path,
        )
    return f'"{escape_string(value)}"'


def parse_number(literal: str) -> int | float | None:
    """
    Parse a number literal.

    Args:
        literal: The raw literal text.

    Returns:
        An int or float, or None if the literal is malformed or out of range.
    """
    match = NUMBER_PATTERN.fullmatch(literal)
    if not match:
        return None

    if match.group("fraction") is None and match.group("exponent") is None:
        # Longer digit runs cannot fit in 64 bits
        if len(literal.lstrip("-").lstrip("0")) > 19:
            return None
        value = int(literal)
        if not INT64_MIN <= value <= INT64_MAX:
            return None
        return value

    value = float(literal)
    if math.isinf(value):
        return None
    return value
