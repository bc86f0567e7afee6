"""
Geometry input/output models (Pydantic).

These types are the JSON-facing contract of the CLI: they accept GeoJSON-shaped
geometry, validate it, and convert it to the plain dataclasses in
`cheapruler.core.geometry` that the ruler works with. Results go back out through the
same models so JSON output stays GeoJSON-compatible.

Latitudes must lie in [-90, 90]. Longitudes are left unconstrained because the ruler
wraps longitude differences itself.
"""

from __future__ import annotations

import json
from typing import Any, Literal, Sequence

from pydantic import BaseModel, Field, field_validator

from cheapruler.core.geometry import Point, Polygon, Rect, as_line

Coordinate = tuple[float, float]


def _check_latitude(coord: Coordinate) -> Coordinate:
    if not -90 <= coord[1] <= 90:
        raise ValueError(f"latitude {coord[1]} is outside [-90, 90]")
    return coord


class GeoJsonPoint(BaseModel):
    type: Literal["Point"] = "Point"
    coordinates: Coordinate

    @field_validator("coordinates")
    @classmethod
    def _validate_coordinates(cls, value: Coordinate) -> Coordinate:
        return _check_latitude(value)

    @classmethod
    def from_point(cls, point: Point) -> GeoJsonPoint:
        return cls(coordinates=point.as_tuple())

    def to_point(self) -> Point:
        return Point.of(self.coordinates)


class GeoJsonLineString(BaseModel):
    type: Literal["LineString"] = "LineString"
    coordinates: list[Coordinate] = Field(default_factory=list)

    @field_validator("coordinates")
    @classmethod
    def _validate_coordinates(cls, value: list[Coordinate]) -> list[Coordinate]:
        return [_check_latitude(c) for c in value]

    @classmethod
    def from_line(cls, line: Sequence[Point]) -> GeoJsonLineString:
        return cls(coordinates=[p.as_tuple() for p in line])

    def to_line(self) -> list[Point]:
        return as_line(self.coordinates)


class GeoJsonPolygon(BaseModel):
    """Polygon rings: the first is the exterior, the rest are holes."""

    type: Literal["Polygon"] = "Polygon"
    coordinates: list[list[Coordinate]] = Field(..., min_length=1)

    @field_validator("coordinates")
    @classmethod
    def _validate_coordinates(cls, value: list[list[Coordinate]]) -> list[list[Coordinate]]:
        return [[_check_latitude(c) for c in ring] for ring in value]

    @classmethod
    def from_polygon(cls, polygon: Polygon) -> GeoJsonPolygon:
        rings = [polygon.exterior, *polygon.interiors]
        return cls(coordinates=[[p.as_tuple() for p in ring] for ring in rings])

    def to_polygon(self) -> Polygon:
        exterior, *interiors = self.coordinates
        return Polygon.of(exterior, interiors)


def _load(value: str | Any) -> Any:
    # Accept JSON text or already-decoded data; unwrap GeoJSON Features.
    data = json.loads(value) if isinstance(value, str) else value
    if isinstance(data, dict) and data.get("type") == "Feature":
        data = data.get("geometry")
    return data


def _as_geometry(data: Any, geometry_type: str) -> dict[str, Any]:
    if isinstance(data, dict):
        return data
    if isinstance(data, (list, tuple)):
        return {"type": geometry_type, "coordinates": data}
    raise ValueError(f"Expected a GeoJSON {geometry_type} or a coordinate array, got {type(data).__name__}")


def parse_point(value: str | Any) -> Point:
    """Parse a point from GeoJSON, a `[lon, lat]` array, or `"lon,lat"` text."""
    if isinstance(value, str) and not value.lstrip().startswith(("{", "[")):
        parts = [p.strip() for p in value.split(",")]
        if len(parts) != 2:
            raise ValueError(f"Invalid point '{value}', expected LON,LAT")
        value = [float(parts[0]), float(parts[1])]
    return GeoJsonPoint.model_validate(_as_geometry(_load(value), "Point")).to_point()


def parse_line(value: str | Any) -> list[Point]:
    """Parse a line from a GeoJSON LineString (or Feature) or a coordinate array."""
    return GeoJsonLineString.model_validate(_as_geometry(_load(value), "LineString")).to_line()


def parse_polygon(value: str | Any) -> Polygon:
    """Parse a polygon from a GeoJSON Polygon (or Feature) or an array of rings."""
    return GeoJsonPolygon.model_validate(_as_geometry(_load(value), "Polygon")).to_polygon()


def parse_bbox(value: str | Sequence[float]) -> Rect:
    """Parse `minx,miny,maxx,maxy` into a Rect, keeping the corners as given."""
    parts = value.split(",") if isinstance(value, str) else list(value)
    if len(parts) != 4:
        raise ValueError(f"Invalid bbox '{value}', expected MINX,MINY,MAXX,MAXY")
    min_x, min_y, max_x, max_y = (float(p) for p in parts)
    _check_latitude((min_x, min_y))
    _check_latitude((max_x, max_y))
    return Rect.from_bounds(min_x, min_y, max_x, max_y)
