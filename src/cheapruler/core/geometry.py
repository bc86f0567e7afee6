"""
Geometry primitives.

Coordinates are `(x, y)` = `(longitude, latitude)` in decimal degrees. Longitudes are
not wrapped into [-180, 180]; operations that compare longitudes go through
`long_diff` instead.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence


@dataclass(frozen=True)
class Point:
    """A longitude/latitude pair in decimal degrees."""

    x: float
    y: float

    @property
    def lon(self) -> float:
        return self.x

    @property
    def lat(self) -> float:
        return self.y

    @classmethod
    def of(cls, value: Point | Sequence[float]) -> Point:
        """Build a point from a `Point` or an `(x, y)` pair."""
        if isinstance(value, Point):
            return value
        x, y = value
        return cls(float(x), float(y))

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


# A line is any ordered sequence of points; operations return plain lists.
Line = Sequence[Point]


def as_line(coords: Sequence[Point | Sequence[float]]) -> list[Point]:
    """Convert a sequence of points or `(x, y)` pairs into a list of points."""
    return [Point.of(c) for c in coords]


@dataclass(frozen=True)
class Polygon:
    """An exterior ring plus zero or more holes. Rings are implicitly closed."""

    exterior: tuple[Point, ...]
    interiors: tuple[tuple[Point, ...], ...] = field(default_factory=tuple)

    @classmethod
    def of(
        cls,
        exterior: Sequence[Point | Sequence[float]],
        interiors: Sequence[Sequence[Point | Sequence[float]]] = (),
    ) -> Polygon:
        return cls(
            exterior=tuple(as_line(exterior)),
            interiors=tuple(tuple(as_line(ring)) for ring in interiors),
        )


@dataclass(frozen=True)
class Rect:
    """A bounding box given by its `min` and `max` corners.

    The corners are kept exactly as given. A box crossing the antimeridian is written
    with `min.x > max.x` (e.g. min=(179.9, 32.7), max=(-179.9, 32.9)), so the
    constructor must never reorder them.
    """

    min: Point
    max: Point

    @classmethod
    def from_bounds(cls, min_x: float, min_y: float, max_x: float, max_y: float) -> Rect:
        return cls(Point(float(min_x), float(min_y)), Point(float(max_x), float(max_y)))

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        return (self.min.x, self.min.y, self.max.x, self.max.y)

    @property
    def crosses_antimeridian(self) -> bool:
        return self.min.x > self.max.x


@dataclass(frozen=True)
class PointOnLine:
    """Closest point on a line, as produced by `CheapRuler.point_on_line`.

    `index` is the start vertex of the segment holding `point`; `t` is the position
    along that segment, 0 at its start and 1 at its end.
    """

    point: Point
    index: int
    t: float


def long_diff(a: float, b: float) -> float:
    """Return `a - b` wrapped into (-180, 180] degrees."""
    diff = a - b
    # `+ 0.0` maps -0.0 to 0.0; bearing relies on the sign of dx.
    return diff - math.ceil(diff / 360.0 - 0.5) * 360.0 + 0.0


def interpolate(a: Point, b: Point, t: float) -> Point:
    """Return the point at fraction `t` of the way from `a` to `b`."""
    dx = long_diff(b.x, a.x)
    dy = b.y - a.y
    return Point(a.x + dx * t, a.y + dy * t)
