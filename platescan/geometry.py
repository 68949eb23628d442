"""Points in 16.16 fixed-point and in floating-point coordinates."""

from __future__ import annotations

from dataclasses import dataclass

FIXED_SHIFT = 16
FIXED_ONE = 1 << FIXED_SHIFT


def to_fixed(value: float) -> int:
    """Convert a number to 16.16 fixed point, truncating toward zero."""
    if isinstance(value, int):
        return value << FIXED_SHIFT
    return int(value * FIXED_ONE)


def from_fixed(value: int) -> float:
    """Convert a 16.16 fixed-point number to a float."""
    return value / FIXED_ONE


@dataclass(frozen=True, slots=True)
class PointFixed:
    """A point whose coordinates are 16.16 fixed-point integers."""

    x: int = 0
    y: int = 0


@dataclass(frozen=True, slots=True)
class PointFloat:
    """A point with floating-point coordinates."""

    x: float = 0.0
    y: float = 0.0