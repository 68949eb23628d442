"""Scanline filling of polygons into a mask image."""

from __future__ import annotations

from collections.abc import Sequence

from .netimage import NetImage

_FILLED = 255


def _lin_tran(pos: float, begin1: float, end1: float, begin2: float, end2: float) -> float:
    return begin2 + (pos - begin1) / (end1 - begin1) * (end2 - begin2)


def _fill_span(row: memoryview, start: int, stop: int) -> None:
    start = max(start, 0)
    stop = min(stop, len(row) - 1)
    if stop >= start:
        row[start:stop + 1] = bytes([_FILLED]) * (stop - start + 1)


def draw_polygon(image: NetImage, points: Sequence[tuple[int, int]]) -> None:
    """Clear image and paint the polygon given by (x, y) vertices with 255."""
    image.fill(0)
    vertices = [(int(x), int(y)) for x, y in points]
    if not vertices:
        return
    ys = [y for _, y in vertices]
    if max(ys) < 0 or min(ys) >= image.height:
        return

    edges = list(zip(vertices, vertices[1:] + vertices[:1]))
    for y in range(image.height):
        row = image.row(y)
        crossings: list[int] = []
        for (x1, y1), (x2, y2) in edges:
            if y1 == y2 and y == y1:
                _fill_span(row, x1, x2)
                continue
            fy1 = y1 + 0.1
            fy2 = y2 + 0.1
            if fy1 > y > fy2 or fy1 < y < fy2:
                crossings.append(int(_lin_tran(y, fy1, fy2, x1, x2) + 0.5))

        crossings.sort()
        for left, right in zip(crossings[::2], crossings[1::2]):
            if right > 0 and left < image.width:
                _fill_span(row, left, right)