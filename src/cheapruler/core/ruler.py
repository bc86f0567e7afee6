"""
Cheap ruler: fast approximate geodesic measurements on a city scale.

The ruler projects coordinates onto a plane tangent to the WGS84 ellipsoid at a
reference latitude. Degrees of longitude and latitude are scaled by `kx` and `ky`,
derived from the normal and meridional radii of curvature at that latitude, and all
measurements are then plain planar math. Accuracy is good (well under 0.1%) for
extents of a few hundred kilometers around the reference latitude and degrades with
distance from it and towards the poles, where `kx` approaches zero.

A ruler is stateless with respect to queries. The only mutation is `change_unit`,
which rescales `kx`/`ky` from the cached curvature terms `dkx`/`dky`; a ruler shared
between threads should be branched with `clone_with_unit` instead.
"""

from __future__ import annotations

import logging
import math

from cheapruler.core.geometry import Line, Point, PointOnLine, Polygon, Rect, interpolate, long_diff
from cheapruler.core.units import DistanceUnit, factor_to_kilometers

logger = logging.getLogger(__name__)

RE = 6378.137  # WGS84 equatorial radius, km
FE = 1.0 / 298.257223563  # WGS84 flattening
E2 = FE * (2.0 - FE)

MAX_TILE_ZOOM = 31


def _multipliers(distance_unit: DistanceUnit, dkx: float, dky: float) -> tuple[float, float]:
    mul = math.radians(factor_to_kilometers(distance_unit)) * RE
    return mul * dkx, mul * dky


def _ring_sum(ring: Line) -> float:
    # Shoelace sum; the ring is closed implicitly through the wrap-around term.
    total = 0.0
    k = len(ring) - 1
    for j in range(len(ring)):
        total += (ring[j].x - ring[k].x) * (ring[j].y + ring[k].y)
        k = j
    return total


def _interpolate_within(a: Point, b: Point, offset: float, length: float) -> Point:
    if length == 0:
        return a
    return interpolate(a, b, offset / length)


class CheapRuler:
    """Approximate measurements around a reference latitude.

    Points are `(x = longitude, y = latitude)`; distances and areas are expressed in
    `distance_unit` (and its square).
    """

    def __init__(self, latitude: float, distance_unit: DistanceUnit = DistanceUnit.KILOMETERS):
        # Curvature formulas from https://en.wikipedia.org/wiki/Earth_radius#Meridional
        coslat = math.cos(math.radians(latitude))
        w2 = 1.0 / (1.0 - E2 * (1.0 - coslat * coslat))
        w = math.sqrt(w2)

        self.dkx = w * coslat  # normal radius of curvature
        self.dky = w * w2 * (1.0 - E2)  # meridional radius of curvature
        self._distance_unit = DistanceUnit.parse(distance_unit)
        self.kx, self.ky = _multipliers(self._distance_unit, self.dkx, self.dky)

    @classmethod
    def from_tile(cls, y: int, z: int, distance_unit: DistanceUnit = DistanceUnit.KILOMETERS) -> CheapRuler:
        """Create a ruler for the center latitude of row `y` of an XYZ tile grid at zoom `z`."""
        if int(z) != z or not 0 <= z <= MAX_TILE_ZOOM:
            raise ValueError(f"Tile zoom must be an integer between 0 and {MAX_TILE_ZOOM}, got {z}")
        n = math.pi * (1.0 - 2.0 * (y + 0.5) / (1 << int(z)))
        latitude = math.degrees(math.atan(math.sinh(n)))
        logger.debug("Ruler from tile y=%s z=%s uses latitude %.6f", y, z, latitude)
        return cls(latitude, distance_unit)

    @classmethod
    def _from_curvature(cls, dkx: float, dky: float, distance_unit: DistanceUnit) -> CheapRuler:
        ruler = cls.__new__(cls)
        ruler.dkx = dkx
        ruler.dky = dky
        ruler._distance_unit = distance_unit
        ruler.kx, ruler.ky = _multipliers(distance_unit, dkx, dky)
        return ruler

    @property
    def distance_unit(self) -> DistanceUnit:
        return self._distance_unit

    def change_unit(self, distance_unit: DistanceUnit) -> None:
        """Switch this ruler to `distance_unit` in place."""
        unit = DistanceUnit.parse(distance_unit)
        logger.debug("Ruler unit changed %s -> %s", self._distance_unit.value, unit.value)
        self._distance_unit = unit
        self.kx, self.ky = _multipliers(unit, self.dkx, self.dky)

    def clone_with_unit(self, distance_unit: DistanceUnit) -> CheapRuler:
        """Return a new ruler for the same latitude expressed in `distance_unit`."""
        return self._from_curvature(self.dkx, self.dky, DistanceUnit.parse(distance_unit))

    def clone(self) -> CheapRuler:
        return self._from_curvature(self.dkx, self.dky, self._distance_unit)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CheapRuler):
            return NotImplemented
        return (self.kx, self.ky, self.dkx, self.dky, self._distance_unit) == (
            other.kx,
            other.ky,
            other.dkx,
            other.dky,
            other._distance_unit,
        )

    __hash__ = None  # mutable via change_unit

    def __repr__(self) -> str:
        return (
            f"CheapRuler(kx={self.kx!r}, ky={self.ky!r}, dkx={self.dkx!r}, dky={self.dky!r}, "
            f"distance_unit={self._distance_unit.value!r})"
        )

    # Points

    def square_distance(self, a: Point, b: Point) -> float:
        dx = long_diff(a.x, b.x) * self.kx
        dy = (a.y - b.y) * self.ky
        return dx * dx + dy * dy

    def distance(self, a: Point, b: Point) -> float:
        """Approximate distance between two points."""
        return math.sqrt(self.square_distance(a, b))

    def bearing(self, a: Point, b: Point) -> float:
        """Bearing from `a` to `b` in degrees clockwise from north, in (-180, 180]."""
        dx = long_diff(b.x, a.x) * self.kx
        dy = (b.y - a.y) * self.ky
        return math.degrees(math.atan2(dx, dy))

    def destination(self, origin: Point, dist: float, bearing: float) -> Point:
        """Point reached by travelling `dist` from `origin` along `bearing` (degrees)."""
        a = math.radians(bearing)
        return self.offset(origin, math.sin(a) * dist, math.cos(a) * dist)

    def offset(self, origin: Point, dx: float, dy: float) -> Point:
        """Point shifted from `origin` by an easting `dx` and northing `dy` in ruler units."""
        return Point(origin.x + dx / self.kx, origin.y + dy / self.ky)

    # Lines

    def line_distance(self, line: Line) -> float:
        """Total length of a line; 0 for fewer than two points."""
        total = 0.0
        for i in range(len(line) - 1):
            total += self.distance(line[i], line[i + 1])
        return total

    def along(self, line: Line, dist: float) -> Point | None:
        """Point at distance `dist` along the line, or None for an empty line.

        Distances at or below zero give the first point; distances past the end give
        the last point.
        """
        if not line:
            return None
        if dist <= 0:
            return line[0]

        total = 0.0
        for i in range(len(line) - 1):
            p0 = line[i]
            p1 = line[i + 1]
            d = self.distance(p0, p1)
            total += d
            if total > dist:
                return _interpolate_within(p0, p1, dist - (total - d), d)
        return line[-1]

    def point_to_segment_distance(self, p: Point, start: Point, end: Point) -> float:
        """Shortest distance from `p` to the segment `start`-`end`."""
        x = start.x
        y = start.y
        dx = long_diff(end.x, x) * self.kx
        dy = (end.y - y) * self.ky

        if dx != 0 or dy != 0:
            t = (long_diff(p.x, x) * self.kx * dx + (p.y - y) * self.ky * dy) / (dx * dx + dy * dy)
            if t > 1:
                x = end.x
                y = end.y
            elif t > 0:
                x += (dx / self.kx) * t
                y += (dy / self.ky) * t
        return self.distance(p, Point(x, y))

    def point_on_line(self, line: Line, point: Point) -> PointOnLine | None:
        """Closest point on `line` to `point`.

        Returns the projected point, the index of the segment's start vertex and the
        position `t` in [0, 1] along that segment. Lines without a segment (fewer
        than two points) give None.
        """
        if len(line) < 2:
            return None

        min_dist = math.inf
        min_x = min_y = min_t = 0.0
        min_i = 0

        for i in range(len(line) - 1):
            start = line[i]
            end = line[i + 1]
            t = 0.0
            x = start.x
            y = start.y
            dx = long_diff(end.x, x) * self.kx
            dy = (end.y - y) * self.ky

            if dx != 0 or dy != 0:
                t = (long_diff(point.x, x) * self.kx * dx + (point.y - y) * self.ky * dy) / (dx * dx + dy * dy)
                if t > 1:
                    x = end.x
                    y = end.y
                elif t > 0:
                    x += (dx / self.kx) * t
                    y += (dy / self.ky) * t

            d2 = self.square_distance(point, Point(x, y))
            if d2 < min_dist:
                min_dist = d2
                min_x = x
                min_y = y
                min_i = i
                min_t = t

        return PointOnLine(Point(min_x, min_y), min_i, max(0.0, min(1.0, min_t)))

    def line_slice(self, start: Point, stop: Point, line: Line) -> list[Point]:
        """Part of `line` between the projections of `start` and `stop`.

        The slice always runs in the line's own direction, whichever anchor comes first.
        """
        pol1 = self.point_on_line(line, start)
        pol2 = self.point_on_line(line, stop)
        if pol1 is None or pol2 is None:
            return []

        if (pol1.index, pol1.t) > (pol2.index, pol2.t):
            pol1, pol2 = pol2, pol1

        result = [pol1.point]
        left = pol1.index + 1
        right = pol2.index

        if left <= right and line[left] != result[0]:
            result.append(line[left])
        result.extend(line[left + 1 : right + 1])

        if line[right] != pol2.point:
            result.append(pol2.point)
        return result

    def line_slice_along(self, start: float, stop: float, line: Line) -> list[Point]:
        """Part of `line` between the distances `start` and `stop` along it."""
        total = 0.0
        result: list[Point] = []

        for i in range(len(line) - 1):
            p0 = line[i]
            p1 = line[i + 1]
            d = self.distance(p0, p1)
            total += d

            if total > start and not result:
                result.append(_interpolate_within(p0, p1, start - (total - d), d))

            if total >= stop:
                result.append(_interpolate_within(p0, p1, stop - (total - d), d))
                return result

            if total > start:
                result.append(p1)

        return result

    # Polygons and boxes

    def area(self, polygon: Polygon) -> float:
        """Area of a polygon minus its holes, in the squared ruler unit."""
        total = _ring_sum(polygon.exterior) - sum(_ring_sum(ring) for ring in polygon.interiors)
        return abs(total) / 2.0 * self.kx * self.ky

    def buffer_point(self, p: Point, buffer: float) -> Rect:
        """Box around `p` extended by `buffer` ruler units on every side."""
        v = buffer / self.ky
        h = buffer / self.kx
        return Rect(Point(p.x - h, p.y - v), Point(p.x + h, p.y + v))

    def buffer_bbox(self, bbox: Rect, buffer: float) -> Rect:
        """`bbox` extended by `buffer` ruler units on every side."""
        v = buffer / self.ky
        h = buffer / self.kx
        return Rect(Point(bbox.min.x - h, bbox.min.y - v), Point(bbox.max.x + h, bbox.max.y + v))

    def inside_bbox(self, p: Point, bbox: Rect) -> bool:
        """Whether `p` lies in `bbox`, boundary included; handles boxes across the antimeridian."""
        return (
            bbox.min.y <= p.y <= bbox.max.y
            and long_diff(p.x, bbox.min.x) >= 0
            and long_diff(p.x, bbox.max.x) <= 0
        )
