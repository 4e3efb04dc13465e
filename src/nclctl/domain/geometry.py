"""Immutable 2D geometry used for positions and layout hints.

Coordinates are cosmetic: nothing in the constraint logic reads them.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    """A 2D vector."""

    x: float = 0.0
    y: float = 0.0

    @classmethod
    def of(cls, value: Point | Sequence[float] | None) -> Point:
        """Build a point from a point, a sequence (extra items ignored), or None."""
        if value is None:
            return cls()
        if isinstance(value, Point):
            return value
        coords = [float(v) for v in list(value)[:2]]
        coords += [0.0] * (2 - len(coords))
        return cls(coords[0], coords[1])

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> Point:
        return Point(self.x / divisor, self.y / divisor)

    def __neg__(self) -> Point:
        return Point(-self.x, -self.y)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def norm(self) -> float:
        return math.hypot(self.x, self.y)

    def normalized(self) -> Point:
        """Unit vector in the same direction; the zero vector stays zero."""
        length = self.norm()
        if length == 0:
            return self
        return self / length

    def distance(self, other: Point) -> float:
        return (self - other).norm()

    def as_list(self) -> list[float]:
        return [self.x, self.y]


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned box. Derived on demand, never stored."""

    min: Point
    max: Point

    @classmethod
    def around(cls, points: Iterable[Point]) -> Bounds:
        """Smallest box containing *points*; zero box at the origin when empty."""
        pts = list(points)
        if not pts:
            return cls(Point(), Point())
        return cls(
            Point(min(p.x for p in pts), min(p.y for p in pts)),
            Point(max(p.x for p in pts), max(p.y for p in pts)),
        )

    @property
    def size(self) -> Point:
        return self.max - self.min

    @property
    def extents(self) -> Point:
        return self.size / 2

    @property
    def center(self) -> Point:
        return self.min + self.extents


def mean(points: Sequence[Point]) -> Point:
    """Component-wise mean of a non-empty sequence of points."""
    total = Point()
    for p in points:
        total = total + p
    return total / len(points)
