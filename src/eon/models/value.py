"""Value model implementation."""

import math
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

# A Value is one of: None, bool, int, float, str, list, Map, Variant.
Value = Any


def structural_key(value: Value) -> tuple:
    """
    Build a hashable key describing a value by its contents.

    Two values have the same key iff they are structurally equal: bools never
    equal numbers, ``1 == 1.0``, ``0.0 == -0.0``, all NaNs are equal, and maps
    compare regardless of entry order.

    Raises:
        TypeError: If the value is not an Eon value
    """
    if value is None:
        return ("null",)
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, int):
        return ("number", value)
    if isinstance(value, float):
        if math.isnan(value):
            return ("number", "nan")
        if value.is_integer():
            return ("number", int(value))
        return ("number", value)
    if isinstance(value, str):
        return ("string", value)
    if isinstance(value, (list, tuple)):
        return ("list", tuple(structural_key(item) for item in value))
    if isinstance(value, Map):
        return ("map", frozenset(
            (key, structural_key(item)) for key, (_, item) in value._entries.items()
        ))
    if isinstance(value, Mapping):
        return ("map", frozenset(
            (structural_key(key), structural_key(item)) for key, item in value.items()
        ))
    if isinstance(value, Variant):
        return ("variant", value.tag, tuple(structural_key(arg) for arg in value.args))
    raise TypeError(f"Not an Eon value: {type(value).__name__}")


def values_equal(a: Value, b: Value) -> bool:
    """Deep structural equality of two values."""
    return structural_key(a) == structural_key(b)


class Map(MutableMapping):
    """
    Ordered mapping whose keys can be any value, including lists and maps.

    Keys are compared structurally (see ``structural_key``), insertion order
    is kept for iteration and formatting.
    """

    def __init__(self, items: Optional[Iterable[Tuple[Value, Value]]] = None):
        self._entries: Dict[tuple, Tuple[Value, Value]] = {}
        if items is not None:
            if isinstance(items, Mapping):
                items = items.items()
            for key, value in items:
                self[key] = value

    def __getitem__(self, key: Value) -> Value:
        try:
            return self._entries[structural_key(key)][1]
        except TypeError:
            raise KeyError(key) from None

    def __setitem__(self, key: Value, value: Value) -> None:
        hashed = structural_key(key)
        existing = self._entries.get(hashed)
        if existing is not None:
            key = existing[0]
        self._entries[hashed] = (key, value)

    def __delitem__(self, key: Value) -> None:
        del self._entries[structural_key(key)]

    def __contains__(self, key: object) -> bool:
        try:
            return structural_key(key) in self._entries
        except TypeError:
            return False

    def __iter__(self) -> Iterator[Value]:
        return (key for key, _ in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        try:
            return structural_key(self) == structural_key(other)
        except TypeError:
            return False

    __hash__ = None

    def insert(self, key: Value, value: Value) -> Optional[Value]:
        """Set ``key`` and return the value it replaced, if any."""
        hashed = structural_key(key)
        existing = self._entries.get(hashed)
        self[key] = value
        return existing[1] if existing is not None else None

    def items(self) -> List[Tuple[Value, Value]]:
        """Key/value pairs in insertion order."""
        return list(self._entries.values())

    def __repr__(self) -> str:
        return f"Map({self.items()!r})"


@dataclass(eq=False)
class Variant:
    """
    A sum-type (enum) variant carrying data, like ``"Rgb"(255, 0, 0)``.

    A variant without arguments is represented as a plain string; use
    ``make_variant`` to get that normalization.
    """

    tag: str
    args: List[Value]

    def __post_init__(self):
        """Validate variant after initialization."""
        if not isinstance(self.tag, str):
            raise TypeError("tag must be a string")
        self.args = list(self.args)
        if not self.args:
            raise ValueError("a Variant needs at least one argument; use make_variant()")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Variant):
            return NotImplemented
        return values_equal(self, other)

    __hash__ = None


def make_variant(tag: str, args: Iterable[Value]) -> Value:
    """Build a variant value; a call with no arguments is the plain string ``tag``."""
    args = list(args)
    if not args:
        return tag
    return Variant(tag, args)
