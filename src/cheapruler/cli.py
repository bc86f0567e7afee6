"""
cheapruler CLI entrypoint.

Measure distances, bearings, lines and areas from a shell.
It delegates all geometry to `cheapruler.core.ruler.CheapRuler`.

Geometry arguments accept GeoJSON (geometry or Feature) or bare coordinate arrays;
points also accept `LON,LAT` text.
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from cheapruler.config.settings import get_settings
from cheapruler.core.geometry import Point, Polygon, Rect
from cheapruler.core.logging import configure_logging
from cheapruler.core.ruler import MAX_TILE_ZOOM, CheapRuler
from cheapruler.core.units import DistanceUnit, factor_to_kilometers
from cheapruler.domain.models import (
    GeoJsonLineString,
    GeoJsonPoint,
    parse_bbox,
    parse_line,
    parse_point,
    parse_polygon,
)


def _parse_tile(value: str) -> tuple[int, int]:
    """Parse `Y,Z` into a tile row and zoom."""
    parts = value.split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"invalid tile '{value}', expected Y,Z")
    try:
        y, z = int(parts[0]), int(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid tile '{value}', Y and Z must be integers") from None
    if not 0 <= z <= MAX_TILE_ZOOM:
        raise argparse.ArgumentTypeError(f"tile zoom must be between 0 and {MAX_TILE_ZOOM}, got {z}")
    return y, z


def _first_latitude(*geometries: Any) -> float | None:
    for g in geometries:
        if isinstance(g, Point):
            return g.y
        if isinstance(g, Rect):
            return (g.min.y + g.max.y) / 2.0
        if isinstance(g, Polygon):
            if g.exterior:
                return g.exterior[0].y
            continue
        if isinstance(g, list) and g:
            return g[0].y
    return None


def build_ruler(args: argparse.Namespace, *geometries: Any) -> CheapRuler:
    """Build the ruler for a command from CLI flags, settings, or the input geometry."""
    settings = get_settings()
    unit = args.unit or settings.ruler.unit
    if args.tile is not None:
        y, z = args.tile
        return CheapRuler.from_tile(y, z, unit)

    latitude = args.latitude
    if latitude is None:
        latitude = settings.ruler.latitude
    if latitude is None:
        latitude = _first_latitude(*geometries)
    if latitude is None:
        latitude = 0.0
    return CheapRuler(latitude, unit)


def _point_json(p: Point | None) -> Any:
    return None if p is None else GeoJsonPoint.from_point(p).model_dump(mode="json")


def _print_result(result: dict[str, Any], args: argparse.Namespace) -> None:
    settings = get_settings()
    if args.json:
        print(json.dumps(result, ensure_ascii=False, indent=settings.output.json_indent))
        return
    digits = settings.output.precision
    for key, value in result.items():
        if isinstance(value, float):
            value = round(value, digits)
        elif isinstance(value, (dict, list)):
            value = json.dumps(value, ensure_ascii=False)
        print(f"{key}: {value}")


def _cmd_distance(args: argparse.Namespace) -> dict[str, Any]:
    ruler = build_ruler(args, args.start, args.end)
    return {"distance": ruler.distance(args.start, args.end), "unit": ruler.distance_unit.value}


def _cmd_bearing(args: argparse.Namespace) -> dict[str, Any]:
    ruler = build_ruler(args, args.start, args.end)
    return {"bearing": ruler.bearing(args.start, args.end)}


def _cmd_destination(args: argparse.Namespace) -> dict[str, Any]:
    ruler = build_ruler(args, args.origin)
    return {"destination": _point_json(ruler.destination(args.origin, args.distance, args.bearing))}


def _cmd_offset(args: argparse.Namespace) -> dict[str, Any]:
    ruler = build_ruler(args, args.origin)
    return {"point": _point_json(ruler.offset(args.origin, args.dx, args.dy))}


def _cmd_line_distance(args: argparse.Namespace) -> dict[str, Any]:
    ruler = build_ruler(args, args.line)
    return {"length": ruler.line_distance(args.line), "unit": ruler.distance_unit.value}


def _cmd_along(args: argparse.Namespace) -> dict[str, Any]:
    ruler = build_ruler(args, args.line)
    return {"point": _point_json(ruler.along(args.line, args.distance))}


def _cmd_point_on_line(args: argparse.Namespace) -> dict[str, Any]:
    ruler = build_ruler(args, args.line, args.point)
    pol = ruler.point_on_line(args.line, args.point)
    if pol is None:
        return {"point": None, "index": None, "t": None}
    return {"point": _point_json(pol.point), "index": pol.index, "t": pol.t}


def _cmd_point_to_segment(args: argparse.Namespace) -> dict[str, Any]:
    ruler = build_ruler(args, args.start, args.point)
    return {
        "distance": ruler.point_to_segment_distance(args.point, args.start, args.end),
        "unit": ruler.distance_unit.value,
    }


def _cmd_line_slice(args: argparse.Namespace) -> dict[str, Any]:
    ruler = build_ruler(args, args.line)
    part = ruler.line_slice(args.start, args.stop, args.line)
    return {"line": GeoJsonLineString.from_line(part).model_dump(mode="json")}


def _cmd_line_slice_along(args: argparse.Namespace) -> dict[str, Any]:
    ruler = build_ruler(args, args.line)
    part = ruler.line_slice_along(args.start, args.stop, args.line)
    return {"line": GeoJsonLineString.from_line(part).model_dump(mode="json")}


def _cmd_area(args: argparse.Namespace) -> dict[str, Any]:
    ruler = build_ruler(args, args.polygon)
    return {"area": ruler.area(args.polygon), "unit": f"square {ruler.distance_unit.value}"}


def _cmd_buffer_point(args: argparse.Namespace) -> dict[str, Any]:
    ruler = build_ruler(args, args.point)
    return {"bbox": list(ruler.buffer_point(args.point, args.buffer).bounds)}


def _cmd_buffer_bbox(args: argparse.Namespace) -> dict[str, Any]:
    ruler = build_ruler(args, args.bbox)
    return {"bbox": list(ruler.buffer_bbox(args.bbox, args.buffer).bounds)}


def _cmd_inside_bbox(args: argparse.Namespace) -> dict[str, Any]:
    ruler = build_ruler(args, args.point)
    return {"inside": ruler.inside_bbox(args.point, args.bbox)}


def _cmd_units(_: argparse.Namespace) -> dict[str, Any]:
    return {unit.value: factor_to_kilometers(unit) for unit in DistanceUnit}


def _add_ruler_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--unit", type=DistanceUnit.parse, default=None, help="Distance unit (km, mi, nmi, m, yd, ft, in).")
    p.add_argument("--latitude", type=float, default=None, help="Reference latitude of the ruler.")
    p.add_argument("--tile", type=_parse_tile, default=None, metavar="Y,Z", help="Build the ruler from a tile row.")
    p.add_argument("--json", action="store_true", help="Output machine-readable JSON")


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the cheapruler CLI."""
    parser = argparse.ArgumentParser(prog="cheapruler")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Override the configured log level.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def command(name: str, func: Any, help_text: str) -> argparse.ArgumentParser:
        p = sub.add_parser(name, help=help_text)
        _add_ruler_options(p)
        p.set_defaults(func=func)
        return p

    p = command("distance", _cmd_distance, "Distance between two points.")
    p.add_argument("--from", dest="start", required=True, type=parse_point, metavar="LON,LAT")
    p.add_argument("--to", dest="end", required=True, type=parse_point, metavar="LON,LAT")

    p = command("bearing", _cmd_bearing, "Bearing between two points (degrees from north).")
    p.add_argument("--from", dest="start", required=True, type=parse_point, metavar="LON,LAT")
    p.add_argument("--to", dest="end", required=True, type=parse_point, metavar="LON,LAT")

    p = command("destination", _cmd_destination, "Point at a distance and bearing from an origin.")
    p.add_argument("--origin", required=True, type=parse_point, metavar="LON,LAT")
    p.add_argument("--distance", required=True, type=float)
    p.add_argument("--bearing", required=True, type=float)

    p = command("offset", _cmd_offset, "Point shifted by easting/northing offsets.")
    p.add_argument("--origin", required=True, type=parse_point, metavar="LON,LAT")
    p.add_argument("--dx", required=True, type=float)
    p.add_argument("--dy", required=True, type=float)

    p = command("line-distance", _cmd_line_distance, "Total length of a line.")
    p.add_argument("--line", required=True, type=parse_line)

    p = command("along", _cmd_along, "Point at a distance along a line.")
    p.add_argument("--line", required=True, type=parse_line)
    p.add_argument("--distance", required=True, type=float)

    p = command("point-on-line", _cmd_point_on_line, "Closest point on a line.")
    p.add_argument("--line", required=True, type=parse_line)
    p.add_argument("--point", required=True, type=parse_point, metavar="LON,LAT")

    p = command("point-to-segment", _cmd_point_to_segment, "Distance from a point to a segment.")
    p.add_argument("--point", required=True, type=parse_point, metavar="LON,LAT")
    p.add_argument("--start", required=True, type=parse_point, metavar="LON,LAT")
    p.add_argument("--end", required=True, type=parse_point, metavar="LON,LAT")

    p = command("line-slice", _cmd_line_slice, "Part of a line between two points.")
    p.add_argument("--line", required=True, type=parse_line)
    p.add_argument("--start", required=True, type=parse_point, metavar="LON,LAT")
    p.add_argument("--stop", required=True, type=parse_point, metavar="LON,LAT")

    p = command("line-slice-along", _cmd_line_slice_along, "Part of a line between two distances.")
    p.add_argument("--line", required=True, type=parse_line)
    p.add_argument("--start", required=True, type=float)
    p.add_argument("--stop", required=True, type=float)

    p = command("area", _cmd_area, "Area of a polygon (holes subtracted).")
    p.add_argument("--polygon", required=True, type=parse_polygon)

    p = command("buffer-point", _cmd_buffer_point, "Bounding box around a point.")
    p.add_argument("--point", required=True, type=parse_point, metavar="LON,LAT")
    p.add_argument("--buffer", required=True, type=float)

    p = command("buffer-bbox", _cmd_buffer_bbox, "Bounding box grown by a distance.")
    p.add_argument("--bbox", required=True, type=parse_bbox, metavar="MINX,MINY,MAXX,MAXY")
    p.add_argument("--buffer", required=True, type=float)

    p = command("inside-bbox", _cmd_inside_bbox, "Whether a point lies in a bounding box.")
    p.add_argument("--point", required=True, type=parse_point, metavar="LON,LAT")
    p.add_argument("--bbox", required=True, type=parse_bbox, metavar="MINX,MINY,MAXX,MAXY")

    p = sub.add_parser("units", help="List distance units and their factors from kilometers.")
    p.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    p.set_defaults(func=_cmd_units)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m cheapruler.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    func: Any = getattr(args, "func")
    _print_result(func(args), args)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
