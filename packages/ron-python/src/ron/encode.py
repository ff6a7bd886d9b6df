"""RON serializer implementation."""

import logging
from collections.abc import Generator
from typing import IO

from .errors import ErrorCode, SerializeError
from .primitives import encode_constant
from .string_utils import is_identifier
from .types import SerializeOptions
from .value import CONSTANT_TYPES, Array, Map, Named, Struct, Value

logger = logging.getLogger(__name__)


def serialize(value: Value, options: SerializeOptions | None = None) -> str:
    """
    Serialize a Value tree to RON text.

    Args:
        value: The root value.
        options: Serialization options.

    Returns:
        The RON-formatted string.

    Raises:
        SerializeError: If the tree holds a value with no RON literal
            (NaN or infinite floats, out-of-range integers, invalid names,
            named structs without fields).
        TypeError: If the tree holds something that is not a Value.
    """
    opts = options or SerializeOptions()
    try:
        text = "".join(serialize_chunks(value, opts))
    except SerializeError as exc:
        logger.debug("RON serialization failed: %s", exc)
        raise
    logger.debug("Serialized RON document (%d chars, pretty=%s)", len(text), opts.pretty)
    return text


def serialize_chunks(
    value: Value, options: SerializeOptions | None = None
) -> Generator[str, None, None]:
    """
    Serialize a Value tree, yielding text fragments.

    This avoids building intermediate strings for large trees.

    Args:
        value: The root value.
        options: Serialization options.

    Yields:
        Consecutive fragments of the RON output.
    """
    opts = options or SerializeOptions()
    yield from _encode_value(value, opts, 0, "$")


def dump(value: Value, fp: IO[str], options: SerializeOptions | None = None) -> None:
    """
    Serialize a Value tree into a writable text stream.

    Args:
        value: The root value.
        fp: An open text stream.
        options: Serialization options.
    """
    for chunk in serialize_chunks(value, options):
        fp.write(chunk)


def _encode_value(
    value: Value, opts: SerializeOptions, depth: int, path: str
) -> Generator[str, None, None]:
    """Encode any value at the given depth."""
    if isinstance(value, CONSTANT_TYPES):
        yield encode_constant(value, path)
    elif isinstance(value, Array):
        items = [(None, item, f"{path}[{i}]") for i, item in enumerate(value.items)]
        yield from _encode_items("[", "]", items, opts, depth)
    elif isinstance(value, Map):
        items = []
        for key, item in value.entries:
            # String keys come out quoted, other constants in literal form
            encoded_key = encode_constant(key, path)
            items.append((encoded_key, item, f"{path}[{encoded_key}]"))
        yield from _encode_items("{", "}", items, opts, depth)
    elif isinstance(value, Struct):
        yield from _encode_struct(value, opts, depth, path)
    else:
        raise TypeError(f"Cannot serialize value of type {type(value).__name__}")


def _encode_struct(
    struct: Struct, opts: SerializeOptions, depth: int, path: str
) -> Generator[str, None, None]:
    """Encode a struct, named or positional."""
    name = struct.name
    if name is not None and not is_identifier(name):
        raise SerializeError(
            ErrorCode.NON_REPRESENTABLE_VALUE,
            f"Struct name {name!r} is not a valid identifier",
            path=path,
        )

    if isinstance(struct.fields, Named):
        if not struct.fields:
            # "()" always reads back as positional
            raise SerializeError(
                ErrorCode.NON_REPRESENTABLE_VALUE,
                "Struct with named fields must have at least one field",
                path=path,
            )
        items = []
        for field_name, item in struct.fields.fields:
            field_path = f"{path}.{field_name}"
            if not is_identifier(field_name):
                raise SerializeError(
                    ErrorCode.NON_REPRESENTABLE_VALUE,
                    f"Field name {field_name!r} is not a valid identifier",
                    path=field_path,
                )
            items.append((field_name, item, field_path))
    else:
        items = [(None, item, f"{path}[{i}]") for i, item in enumerate(struct.fields.values)]

    yield name or ""
    yield from _encode_items("(", ")", items, opts, depth)


def _encode_items(
    opening: str,
    closing: str,
    items: list[tuple[str | None, Value, str]],
    opts: SerializeOptions,
    depth: int,
) -> Generator[str, None, None]:
    """
    Encode the body of a bracketed container.

    Each item is (label, value, path); a label is an already-encoded map key or
    field name written before the value.
    """
    if not items:
        yield opening + closing
        return

    colon = ": " if opts.pretty else ":"
    inner = _line_break(opts, depth + 1)

    yield opening
    for i, (label, item, path) in enumerate(items):
        if i:
            yield ","
        yield inner
        if label is not None:
            yield label + colon
        yield from _encode_value(item, opts, depth + 1, path)

    if opts.trailing_comma:
        yield ","
    yield _line_break(opts, depth)
    yield closing


def _line_break(opts: SerializeOptions, depth: int) -> str:
    """Newline plus indentation in pretty mode, nothing in compact mode."""
    if not opts.pretty:
        return ""
    return "\n" + " " * (opts.indent_width * depth)
