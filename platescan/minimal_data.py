"""Ordered container of named, typed values that may nest."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

_INT32_MIN = -(1 << 31)
_INT32_MAX = (1 << 31) - 1


class MinimalDataType(IntEnum):
    """Kind of value held by an element."""

    EMPTY = 0
    T_BOOL = 1 << 0
    T_INT32 = 1 << 1
    T_DOUBLE = 1 << 2
    T_STRING = 1 << 3
    T_INT8_ARRAY = 1 << 4
    NODE = 1 << 5


_ZERO: dict[MinimalDataType, Any] = {
    MinimalDataType.T_BOOL: False,
    MinimalDataType.T_INT32: 0,
    MinimalDataType.T_DOUBLE: 0.0,
    MinimalDataType.T_STRING: "",
}

_MISSING = object()


def _classify(value: Any) -> tuple[MinimalDataType, Any]:
    if isinstance(value, MinimalData):
        return MinimalDataType.NODE, value
    if isinstance(value, bool):
        return MinimalDataType.T_BOOL, value
    if isinstance(value, int):
        if not _INT32_MIN <= value <= _INT32_MAX:
            raise ValueError(f"integer {value} does not fit in 32 bits")
        return MinimalDataType.T_INT32, value
    if isinstance(value, float):
        return MinimalDataType.T_DOUBLE, value
    if isinstance(value, str):
        return MinimalDataType.T_STRING, value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return MinimalDataType.T_INT8_ARRAY, bytes(value)
    raise TypeError(f"unsupported value type: {type(value).__name__}")


@dataclass(slots=True)
class _Elem:
    name: str
    kind: MinimalDataType
    value: Any


class MinimalData:
    """A list of named values; lookups by name return the first element of that name."""

    def __init__(self) -> None:
        self._elems: list[_Elem] = []
        self._index: dict[str, int] = {}

    def add(self, name: str, value: Any) -> None:
        """Append value under name; elements with an empty name are not stored."""
        kind, stored = _classify(value)
        if not name:
            return
        self._index.setdefault(name, len(self._elems))
        self._elems.append(_Elem(name, kind, stored))

    def add_node(self, name: str) -> MinimalData:
        """Append a new child container under name and return it."""
        node = MinimalData()
        self.add(name, node)
        return node

    def _locate(self, key: int | str) -> int | None:
        if isinstance(key, str):
            return self._index.get(key)
        if isinstance(key, int) and not isinstance(key, bool):
            return key if 0 <= key < len(self._elems) else None
        raise TypeError("key must be an index or a name")

    def get(self, key: int | str, kind: MinimalDataType, default: Any = _MISSING) -> Any:
        """The value at an index or name if it is of the given kind, else default."""
        if default is _MISSING:
            default = _ZERO.get(kind)
        pos = self._locate(key)
        if pos is None or self._elems[pos].kind != kind:
            return default
        return self._elems[pos].value

    def find(self, name: str, kind: MinimalDataType) -> Any:
        """The first element called name if it is of the given kind, else None."""
        pos = self._index.get(name)
        if pos is None or self._elems[pos].kind != kind:
            return None
        return self._elems[pos].value

    def type_of(self, index: int) -> MinimalDataType:
        """The kind of the element at index, EMPTY when out of range."""
        if 0 <= index < len(self._elems):
            return self._elems[index].kind
        return MinimalDataType.EMPTY

    def name_of(self, index: int) -> str:
        """The name of the element at index."""
        if not 0 <= index < len(self._elems):
            raise IndexError("element index out of range")
        return self._elems[index].name

    def clear(self) -> None:
        """Remove every element."""
        self._elems.clear()
        self._index.clear()

    def __len__(self) -> int:
        return len(self._elems)

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        for elem in self._elems:
            yield elem.name, elem.value