"""
Value model for RON documents.

A parsed document is a tree of immutable nodes. Each node is one of the
variants of ``Value``; containers own their children and compare
structurally, so ``parse(a) == parse(b)`` whenever both texts describe the
same data.
"""

from __future__ import annotations

import numbers
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Union


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Bool:
    """A ``true`` or ``false`` literal."""

    value: bool

    def __post_init__(self) -> None:
        if not isinstance(self.value, bool):
            raise TypeError(f"Bool payload must be a bool, got {type(self.value).__name__}")


@dataclass(frozen=True)
class Integer:
    """
    A signed integer literal.

    The payload is stored as a plain ``int``. Values outside the signed 64-bit
    range are allowed here but rejected by the serializer.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, numbers.Integral):
            raise TypeError(f"Integer payload must be an int, got {type(self.value).__name__}")
        object.__setattr__(self, "value", int(self.value))


@dataclass(frozen=True)
class Float:
    """A 64-bit floating point literal. Integral payloads are widened to float."""

    value: float

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, numbers.Real):
            raise TypeError(f"Float payload must be a number, got {type(self.value).__name__}")
        object.__setattr__(self, "value", float(self.value))


@dataclass(frozen=True)
class String:
    """A string literal, holding the decoded text."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError(f"String payload must be a str, got {type(self.value).__name__}")


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Array:
    """Ordered, homogeneous sequence of values."""

    items: tuple[Value, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)

    def __getitem__(self, index: int) -> Value:
        return self.items[index]


@dataclass(frozen=True)
class Map:
    """
    Ordered mapping from constants to values.

    Entries keep their insertion order, which is also the order they are
    serialized in. Keys are unique; lookups go through an index built once at
    construction.
    """

    entries: tuple[tuple[Constant, Value], ...] = ()
    _index: dict[Constant, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        entries = tuple((key, value) for key, value in self.entries)
        index: dict[Constant, int] = {}
        for position, (key, _) in enumerate(entries):
            if not isinstance(key, CONSTANT_TYPES):
                raise TypeError(f"Map keys must be constants, got {type(key).__name__}")
            if key in index:
                raise ValueError(f"Duplicate map key: {key!r}")
            index[key] = position
        object.__setattr__(self, "entries", entries)
        object.__setattr__(self, "_index", index)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Constant]:
        return (key for key, _ in self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __getitem__(self, key: Constant) -> Value:
        return self.entries[self._index[key]][1]

    def get(self, key: Constant, default: Value | None = None) -> Value | None:
        position = self._index.get(key)
        if position is None:
            return default
        return self.entries[position][1]

    def keys(self) -> list[Constant]:
        return [key for key, _ in self.entries]

    def values(self) -> list[Value]:
        return [value for _, value in self.entries]

    def items(self) -> list[tuple[Constant, Value]]:
        return list(self.entries)


@dataclass(frozen=True)
class Positional:
    """Fields of a tuple, tuple struct or enum variant payload."""

    values: tuple[Value, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class Named:
    """Fields of a struct accessed by identifier, in declaration order."""

    fields: tuple[tuple[str, Value], ...] = ()
    _index: dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        fields = tuple((name, value) for name, value in self.fields)
        index: dict[str, int] = {}
        for position, (name, _) in enumerate(fields):
            if name in index:
                raise ValueError(f"Duplicate field name: {name}")
            index[name] = position
        object.__setattr__(self, "fields", fields)
        object.__setattr__(self, "_index", index)

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __getitem__(self, name: str) -> Value:
        return self.fields[self._index[name]][1]

    def get(self, name: str, default: Value | None = None) -> Value | None:
        position = self._index.get(name)
        if position is None:
            return default
        return self.fields[position][1]

    def names(self) -> list[str]:
        return [name for name, _ in self.fields]


@dataclass(frozen=True)
class Struct:
    """
    Heterogeneous structure with an optional name.

    ``Some(5)`` is ``Struct("Some", Positional((Integer(5),)))`` and
    ``(a: 1)`` is ``Struct(None, Named((("a", Integer(1)),)))``.
    """

    name: str | None = None
    fields: Positional | Named = field(default_factory=Positional)

    @property
    def is_named(self) -> bool:
        return isinstance(self.fields, Named)

    def __len__(self) -> int:
        return len(self.fields)

    def __getitem__(self, key: int | str) -> Value:
        if isinstance(self.fields, Named):
            if isinstance(key, int):
                return self.fields.fields[key][1]
            return self.fields[key]
        if not isinstance(key, int):
            raise TypeError("Positional struct fields are accessed by index")
        return self.fields.values[key]


Constant = Union[Bool, Integer, Float, String]
Value = Union[Bool, Integer, Float, String, Array, Map, Struct]

CONSTANT_TYPES = (Bool, Integer, Float, String)
VALUE_TYPES = (Bool, Integer, Float, String, Array, Map, Struct)


# ---------------------------------------------------------------------------
# Shape tags
# ---------------------------------------------------------------------------

class Kind(Enum):
    """Top-level variant of a value, as named in error messages."""

    BOOL = "Bool"
    INTEGER = "Integer"
    FLOAT = "Float"
    STRING = "String"
    ARRAY = "Array"
    MAP = "Map"
    STRUCT = "Struct"


_KIND_BY_TYPE = {
    Bool: Kind.BOOL,
    Integer: Kind.INTEGER,
    Float: Kind.FLOAT,
    String: Kind.STRING,
    Array: Kind.ARRAY,
    Map: Kind.MAP,
    Struct: Kind.STRUCT,
}


@dataclass(frozen=True)
class Shape:
    """
    Equivalence class used for homogeneity checks.

    Primitive and container kinds are one shape each. Structs are further
    split by name, field style and arity, so an array of structs must hold
    structs of one exact shape.
    """

    kind: Kind
    name: str | None = None
    named: bool | None = None
    arity: int | None = None

    def __str__(self) -> str:
        if self.kind is not Kind.STRUCT:
            return self.kind.value
        style = "named" if self.named else "positional"
        if self.name:
            return f"Struct {self.name}({style}, {self.arity})"
        return f"Struct ({style}, {self.arity})"


def kind_of(value: Value) -> Kind:
    """Return the Kind of a value."""
    try:
        return _KIND_BY_TYPE[type(value)]
    except KeyError:
        raise TypeError(f"Not a RON value: {type(value).__name__}") from None


def shape_of(value: Value) -> Shape:
    """Return the shape tag of a value."""
    kind = kind_of(value)
    if kind is Kind.STRUCT:
        return Shape(kind, value.name, value.is_named, len(value.fields))
    return Shape(kind)
