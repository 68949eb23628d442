"""A value store shared by several networks, each owning a slice of it."""

from __future__ import annotations

from collections.abc import Iterable


class SharedNetValueBuffer:
    """Hands out offsets into one lazily allocated list of fixed-point values."""

    def __init__(self) -> None:
        self._allocation_size = 0
        self._buffer: list[int] | None = None

    def reserve(self, count: int) -> int:
        """Reserve count values and return the offset of the reserved slice."""
        self._allocation_size += count
        return self._allocation_size - count

    def buffer(self) -> list[int]:
        """The value list, allocated and zeroed on first use."""
        if self._buffer is None:
            self._buffer = [0] * self._allocation_size
        return self._buffer

    def _store(self, index: int, values: list[int]) -> None:
        buf = self.buffer()
        if index < 0 or index + len(values) > len(buf):
            raise ValueError("values do not fit in the buffer")
        buf[index:index + len(values)] = values

    @staticmethod
    def _image_values(data, width: int, height: int, scanline: int) -> list[int]:
        view = memoryview(data).cast("B")
        values: list[int] = []
        for y in range(height):
            start = y * scanline
            values.extend(view[start:start + width])
        if len(values) != width * height:
            raise ValueError("image data is too short")
        return values

    def copy_image(self, data, width: int, height: int, scanline: int) -> None:
        """Copy an 8-bit image, row by row, to the start of the buffer."""
        self._store(0, self._image_values(data, width, height, scanline))

    def copy_image_with_avg(
        self, data, width: int, height: int, scanline: int,
        avg1: int, avg2: int, avg3: int,
    ) -> None:
        """Copy an 8-bit image to the start of the buffer followed by three values."""
        values = self._image_values(data, width, height, scanline)
        values.extend((avg1, avg2, avg3))
        self._store(0, values)

    def copy_values(self, index: int, data: Iterable[int]) -> None:
        """Copy byte values into the buffer starting at index."""
        self._store(index, list(data))

    def reset(self) -> None:
        """Release the allocated buffer and its reservations."""
        if self._buffer is not None:
            self._buffer = None
            self._allocation_size = 0