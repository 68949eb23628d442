"""Typed access to the recognition data tree and loading it from disk."""

from __future__ import annotations

import os
from enum import IntEnum

from .minimal_data import MinimalData, MinimalDataType
from .serializer import deserialize


class HADataType(IntEnum):
    """Element kinds as numbered in the data file."""

    BOOL = 0
    INT = 1
    FLOAT = 2
    STRING = 3
    RAW = 4
    HAD = 5
    UNKNOWN = -1


class HAData:
    """A view on one node of the tree with defaulting accessors."""

    def __init__(self, manager: HADataManager, data: MinimalData) -> None:
        self._manager = manager
        self._data = data

    def get_int(self, key: int | str, default: int = 0) -> int:
        """The integer at an index or name, or default."""
        return self._data.get(key, MinimalDataType.T_INT32, default)

    def get_float(self, name: str, default: float = 0.0) -> float:
        """The floating-point value called name, or default."""
        return float(self._data.get(name, MinimalDataType.T_DOUBLE, float(default)))

    def get_raw(self, name: str) -> bytes | None:
        """The raw byte block called name, or None."""
        return self._data.find(name, MinimalDataType.T_INT8_ARRAY)

    def get_node(self, key: int | str) -> HAData | None:
        """The child node at an index or name, or None."""
        return self._manager._child(self._data, key)

    def __len__(self) -> int:
        return len(self._data)


class HADataManager:
    """Owns the data tree and hands out one view object per node."""

    def __init__(self) -> None:
        self._root_data = MinimalData()
        self._root = HAData(self, self._root_data)
        self._views: dict[MinimalData, HAData] = {}

    @property
    def root(self) -> HAData:
        """The view on the root node."""
        return self._root

    def _child(self, parent: MinimalData, key: int | str) -> HAData | None:
        if isinstance(key, str):
            node = parent.find(key, MinimalDataType.NODE)
        else:
            node = parent.get(key, MinimalDataType.NODE, None)
        if node is None:
            return None
        view = self._views.get(node)
        if view is None:
            view = self._views[node] = HAData(self, node)
        return view

    def load_bytes(self, payload: bytes) -> None:
        """Replace the tree with the one serialized in payload."""
        self._views.clear()
        deserialize(self._root_data, payload)

    def load_file(self, path: str | os.PathLike[str]) -> None:
        """Replace the tree with the one stored in the file at path."""
        with open(path, "rb") as handle:
            payload = handle.read()
        self.load_bytes(payload)