"""Single-channel 8-bit image with a row stride."""

from __future__ import annotations


class NetImage:
    """An 8-bit grey image that either owns its pixels or maps a caller's buffer."""

    def __init__(self) -> None:
        self.data: bytearray | memoryview | None = None
        self.width = 0
        self.height = 0
        self.scanline = 0
        self.is_mapped = False
        self._capacity = 0

    def create(self, width: int, height: int) -> None:
        """Make an owned image of the given size, reusing the buffer when large enough."""
        if width < 0 or height < 0:
            raise ValueError("image dimensions must not be negative")
        needed = width * height
        if self._capacity < needed:
            self.free()
            self.data = bytearray(needed)
            self._capacity = needed
        self.width = width
        self.height = height
        self.scanline = width

    def create_map(self, width: int, height: int, scanline: int, data) -> None:
        """Use an external buffer as the pixel store without copying it."""
        if width < 0 or height < 0 or scanline < width:
            raise ValueError("invalid image geometry")
        view = memoryview(data).cast("B")
        needed = scanline * (height - 1) + width if height else 0
        if view.nbytes < needed:
            raise ValueError("buffer is too small for the image geometry")
        self.free()
        self.width = width
        self.height = height
        self.scanline = scanline
        self.data = view
        self.is_mapped = True

    def fill(self, value: int) -> None:
        """Set every byte of the image, stride padding included, to value."""
        count = self.height * self.scanline
        if count == 0:
            return
        self.data[:count] = bytes([value]) * count

    def free(self) -> None:
        """Drop the pixel store and reset the geometry."""
        self.data = None
        self._capacity = 0
        self.width = 0
        self.height = 0
        self.scanline = 0
        self.is_mapped = False

    def offset(self, x: int, y: int) -> int:
        """Index of pixel (x, y) in the pixel store."""
        return self.scanline * y + x

    def row(self, y: int) -> memoryview:
        """A writable view of the visible pixels of row y."""
        if self.data is None:
            raise ValueError("image has no pixel data")
        start = self.offset(0, y)
        return memoryview(self.data)[start:start + self.width]

    def pixel(self, x: int, y: int) -> int:
        """The value of pixel (x, y)."""
        if self.data is None:
            raise ValueError("image has no pixel data")
        return self.data[self.offset(x, y)]