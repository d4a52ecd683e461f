"""
Geometry primitives for placement and motion.

All coordinates are millimeters. Positions are immutable values; ``z`` is
only meaningful for machine positions (tape pick heights).
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

__all__ = ["Position", "Dimension", "distance", "ORIGIN"]


@dataclass(frozen=True)
class Position:
    """2D position with an optional height."""

    x: float = 0.0
    y: float = 0.0
    z: float | None = None

    def __add__(self, other: Position) -> Position:
        return Position(self.x + other.x, self.y + other.y, self.z)

    def __sub__(self, other: Position) -> Position:
        return Position(self.x - other.x, self.y - other.y, self.z)

    def __mul__(self, scalar: float) -> Position:
        return Position(self.x * scalar, self.y * scalar, self.z)

    def __rmul__(self, scalar: float) -> Position:
        return self.__mul__(scalar)

    def __truediv__(self, scalar: float) -> Position:
        return Position(self.x / scalar, self.y / scalar, self.z)

    def is_zero(self) -> bool:
        """True if both planar components are zero."""
        return self.x == 0 and self.y == 0

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


ORIGIN = Position(0.0, 0.0)


def distance(a: Position, b: Position) -> float:
    """Euclidean distance in the XY plane, plus Z when both positions have it."""
    dx = a.x - b.x
    dy = a.y - b.y
    if a.z is not None and b.z is not None:
        dz = a.z - b.z
        return math.sqrt(dx * dx + dy * dy + dz * dz)
    return math.hypot(dx, dy)


@dataclass(frozen=True)
class Dimension:
    """Axis-aligned bounding rectangle."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def corners(self) -> tuple[Position, Position, Position, Position]:
        """Corners in fixed order: (min,min), (max,min), (min,max), (max,max)."""
        return (
            Position(self.min_x, self.min_y),
            Position(self.max_x, self.min_y),
            Position(self.min_x, self.max_y),
            Position(self.max_x, self.max_y),
        )

    def contains(self, pos: Position) -> bool:
        return self.min_x <= pos.x <= self.max_x and self.min_y <= pos.y <= self.max_y

    @classmethod
    def enclosing(cls, positions: Iterable[Position]) -> Dimension:
        """
        Smallest rectangle containing all positions.

        Raises:
            ValueError: If ``positions`` is empty
        """
        it = iter(positions)
        try:
            first = next(it)
        except StopIteration:
            raise ValueError("Cannot compute bounds of no positions") from None

        min_x = max_x = first.x
        min_y = max_y = first.y
        for pos in it:
            min_x = min(min_x, pos.x)
            min_y = min(min_y, pos.y)
            max_x = max(max_x, pos.x)
            max_y = max(max_y, pos.y)
        return cls(min_x, min_y, max_x, max_y)
