"""Lazily built pyramid of half-resolution copies of a source image."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .geometry import PointFixed
from .netimage import NetImage


@dataclass(frozen=True)
class MipMapResult:
    """The chosen pyramid level and the coordinates scaled down to it."""

    image: NetImage
    shift_matrix: tuple[PointFixed, PointFixed]
    ref: PointFixed
    min_point: PointFixed
    max_point: PointFixed
    veclen: int
    level: int


def _magnitude(value: int) -> int:
    return -value if value & 0xF0000000 else value


def _shift(point: PointFixed, level: int) -> PointFixed:
    return PointFixed(point.x >> level, point.y >> level)


class MipMapper:
    """Builds and caches successively halved versions of a source image."""

    def __init__(self) -> None:
        self._mipmaps: list[NetImage] = []
        self._source: NetImage | None = None
        self._source_width = 0
        self._source_height = 0
        self._valid_count = 0

    def set_source(self, image: NetImage) -> bool:
        """Use image as the source; return True when its resolution changed."""
        if self._source is not None:
            if (image.width, image.height) != (self._source_width, self._source_height):
                self._free()
                changed = True
            else:
                self.invalidate()
                changed = False
        else:
            changed = True
        self._source_width = image.width
        self._source_height = image.height
        self._source = image
        return changed

    def invalidate(self) -> None:
        """Mark every cached level as stale."""
        self._valid_count = 0

    def get_mipmap(
        self,
        shift_matrix: Sequence[PointFixed],
        ref: PointFixed,
        min_point: PointFixed,
        max_point: PointFixed,
        resvl: int,
    ) -> MipMapResult:
        """Pick the coarsest level where the step vectors are at most resvl long."""
        if self._source is None:
            raise RuntimeError("no source image set")
        first, second = shift_matrix
        veclen = max(_magnitude(c) for c in (first.x, first.y, second.x, second.y))
        level = 0
        while veclen > resvl:
            veclen >>= 1
            level += 1
        image = self._source if level == 0 else self._prepare(level - 1)
        return MipMapResult(
            image=image,
            shift_matrix=(_shift(first, level), _shift(second, level)),
            ref=_shift(ref, level),
            min_point=_shift(min_point, level),
            max_point=_shift(max_point, level),
            veclen=veclen,
            level=level,
        )

    def full_mipmap(self, level: int) -> NetImage | None:
        """The image at pyramid level (0 is the source), or None without a source."""
        if self._source is None:
            return None
        if level == 0:
            return self._source
        return self._prepare(level - 1)

    def _free(self) -> None:
        self._mipmaps.clear()
        self._valid_count = 0

    def _prepare(self, index: int) -> NetImage:
        while index >= self._valid_count:
            level = self._valid_count
            if len(self._mipmaps) == level:
                current = NetImage()
                current.create(self._source_width >> (level + 1),
                               self._source_height >> (level + 1))
                self._mipmaps.append(current)
            else:
                current = self._mipmaps[level]
            parent = self._source if level == 0 else self._mipmaps[level - 1]

            width = current.width
            for y in range(current.height):
                top = parent.row(2 * y)
                bottom = parent.row(2 * y + 1)
                current.row(y)[:] = bytes(
                    (a + b + c + d) // 4
                    for a, b, c, d in zip(
                        top[0:2 * width:2], top[1:2 * width:2],
                        bottom[0:2 * width:2], bottom[1:2 * width:2],
                    )
                )
            self._valid_count += 1
        return self._mipmaps[index]