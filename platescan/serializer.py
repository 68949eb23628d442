"""Reader for the binary tree format of the recognition data files."""

from __future__ import annotations

import struct

from .minimal_data import MinimalData

_TYPE_CODES = {0: "bool", 1: "int", 2: "double", 3: "string", 4: "raw", 5: "node"}
_NODE_CODE = 5


class DeserializeError(ValueError):
    """The payload is not a valid serialized tree."""


class _Reader:
    def __init__(self, payload: bytes) -> None:
        self._data = bytes(payload)
        self.pos = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self.pos

    def take(self, count: int) -> bytes:
        if count > self.remaining:
            raise DeserializeError("payload is truncated")
        chunk = self._data[self.pos:self.pos + count]
        self.pos += count
        return chunk

    def byte(self) -> int:
        return self.take(1)[0]

    def unpack(self, fmt: str):
        return struct.unpack(fmt, self.take(struct.calcsize(fmt)))[0]


def _read_elements(reader: _Reader, container: MinimalData, count: int) -> None:
    container.clear()
    parsed = 0
    # The first element is read even when the count is zero.
    while reader.remaining > 0 and parsed < max(count, 1):
        kind = _TYPE_CODES.get(reader.byte())
        if kind is None:
            break
        name = reader.take(reader.byte()).decode("latin-1")
        if kind == "bool":
            container.add(name, reader.unpack("<i") != 0)
        elif kind == "int":
            container.add(name, reader.unpack("<i"))
        elif kind == "double":
            container.add(name, float(reader.unpack("<f")))
        elif kind == "string":
            container.add(name, reader.take(reader.unpack("<I")).decode("latin-1"))
        elif kind == "raw":
            container.add(name, reader.take(reader.unpack("<I")))
        else:
            child_count = reader.unpack("<I")
            _read_elements(reader, container.add_node(name), child_count)
        parsed += 1


def deserialize(target: MinimalData, payload: bytes) -> None:
    """Replace the contents of target with the tree held in payload."""
    target.clear()
    if len(payload) < 2 or payload[0] != _NODE_CODE or payload[1] != 0:
        raise DeserializeError("payload does not start with a root node header")
    reader = _Reader(payload)
    reader.take(2)
    try:
        count = reader.unpack("<I")
        _read_elements(reader, target, count)
    except DeserializeError:
        target.clear()
        raise


def loads(payload: bytes) -> MinimalData:
    """Parse payload into a new tree."""
    data = MinimalData()
    deserialize(data, payload)
    return data