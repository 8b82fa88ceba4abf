"""WKT polygon / multipolygon parsing and serialisation."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Union

from addrquery.common.errors import GeometryParseError

Position = tuple[float, float]
Ring = tuple[Position, ...]

_POLYGON_RE = re.compile(r"^POLYGON\s*\(\s*\((?P<body>.*)\)\s*\)$", re.IGNORECASE | re.DOTALL)
_MULTIPOLYGON_RE = re.compile(
    r"^MULTIPOLYGON\s*\(\s*\(\s*\((?P<body>.*)\)\s*\)\s*\)$", re.IGNORECASE | re.DOTALL
)
_RING_SPLIT_RE = re.compile(r"\)\s*,\s*\(")
_POLYGON_SPLIT_RE = re.compile(r"\)\s*\)\s*,\s*\(\s*\(")
_PAIR_SPLIT_RE = re.compile(r"\s*,\s*")


@dataclass(frozen=True)
class Polygon:
    rings: tuple[Ring, ...]


@dataclass(frozen=True)
class MultiPolygon:
    polygons: tuple[Polygon, ...]


Geometry = Union[Polygon, MultiPolygon]


def _check_balanced(text: str) -> None:
    depth = 0
    for char in text:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise GeometryParseError("Unbalanced parentheses in WKT", text)
    if depth != 0:
        raise GeometryParseError("Unbalanced parentheses in WKT", text)


def _parse_position(pair: str) -> Position:
    parts = pair.split()
    if len(parts) != 2:
        raise GeometryParseError("Invalid coordinate in WKT", pair)
    try:
        lon, lat = float(parts[0]), float(parts[1])
    except ValueError as exc:
        raise GeometryParseError("Invalid coordinate in WKT", pair) from exc
    if not (math.isfinite(lon) and math.isfinite(lat)):
        raise GeometryParseError("Invalid coordinate in WKT", pair)
    return lon, lat


def _parse_ring(text: str) -> Ring:
    return tuple(_parse_position(pair) for pair in _PAIR_SPLIT_RE.split(text.strip()))


def _parse_polygon_body(text: str) -> Polygon:
    return Polygon(rings=tuple(_parse_ring(part) for part in _RING_SPLIT_RE.split(text)))


def parse_wkt(wkt: str) -> Geometry:
    """Parse a ``POLYGON`` or ``MULTIPOLYGON`` WKT string.

    Rings come back in input order as siblings; exterior and interior rings
    are not told apart and open rings are not closed here.
    """
    if not isinstance(wkt, str):
        raise GeometryParseError("WKT region must be a string", repr(wkt))
    trimmed = wkt.strip()
    upper = trimmed.upper()

    if upper.startswith("MULTIPOLYGON"):
        _check_balanced(trimmed)
        match = _MULTIPOLYGON_RE.match(trimmed)
        if match is None:
            raise GeometryParseError("Malformed MULTIPOLYGON", trimmed)
        chunks = _POLYGON_SPLIT_RE.split(match.group("body"))
        return MultiPolygon(polygons=tuple(_parse_polygon_body(chunk) for chunk in chunks))

    if upper.startswith("POLYGON"):
        _check_balanced(trimmed)
        match = _POLYGON_RE.match(trimmed)
        if match is None:
            raise GeometryParseError("Malformed POLYGON", trimmed)
        return _parse_polygon_body(match.group("body"))

    raise GeometryParseError("Unsupported WKT type. Use POLYGON or MULTIPOLYGON", trimmed[:32])


def _ring_wkt(ring: Ring) -> str:
    return "(" + ", ".join(f"{lon!r} {lat!r}" for lon, lat in ring) + ")"


def _polygon_wkt_body(polygon: Polygon) -> str:
    return "(" + ", ".join(_ring_wkt(ring) for ring in polygon.rings) + ")"


def to_wkt(geometry: Geometry) -> str:
    if isinstance(geometry, MultiPolygon):
        return "MULTIPOLYGON(" + ", ".join(_polygon_wkt_body(p) for p in geometry.polygons) + ")"
    return "POLYGON" + _polygon_wkt_body(geometry)


def _polygon_coordinates(polygon: Polygon) -> list:
    return [[[lon, lat] for lon, lat in ring] for ring in polygon.rings]


def to_geojson(geometry: Geometry) -> dict:
    if isinstance(geometry, MultiPolygon):
        return {
            "type": "MultiPolygon",
            "coordinates": [_polygon_coordinates(polygon) for polygon in geometry.polygons],
        }
    return {"type": "Polygon", "coordinates": _polygon_coordinates(geometry)}


def close_rings(geometry: Geometry) -> Geometry:
    """Return ``geometry`` with every open ring closed by repeating its first point."""

    def _close(polygon: Polygon) -> Polygon:
        rings = []
        for ring in polygon.rings:
            if ring and ring[0] != ring[-1]:
                ring = ring + (ring[0],)
            rings.append(ring)
        return Polygon(rings=tuple(rings))

    if isinstance(geometry, MultiPolygon):
        return MultiPolygon(polygons=tuple(_close(polygon) for polygon in geometry.polygons))
    return _close(geometry)


def iter_rings(geometry: Geometry):
    polygons = geometry.polygons if isinstance(geometry, MultiPolygon) else (geometry,)
    for polygon in polygons:
        yield from polygon.rings
