"""Containment and proximity predicate construction."""

from __future__ import annotations

import math
from typing import Any, Sequence

from addrquery.common.constants import DEFAULT_MAX_DISTANCE_M
from addrquery.common.errors import ValidationError
from addrquery.query.filters import FilterInput, build_filter_predicate
from addrquery.query.geometry import Geometry, close_rings, iter_rings
from addrquery.query.predicates import NearPoint, Predicate, WithinRegion, all_of

MIN_RING_POSITIONS = 4


def _finite_float(value: Any, *, name: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be numeric, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{name} must be numeric, got {value!r}") from exc
    if not math.isfinite(number):
        raise ValidationError(f"{name} must be finite, got {value!r}")
    return number


def validate_point(point: Sequence[Any] | None) -> tuple[float, float]:
    """Return ``(longitude, latitude)`` or raise ``ValidationError``."""
    if point is None or isinstance(point, (str, bytes)) or len(point) != 2:
        raise ValidationError(f"point must be a [longitude, latitude] pair, got {point!r}")
    lon = _finite_float(point[0], name="longitude")
    lat = _finite_float(point[1], name="latitude")
    if not -180 <= lon <= 180:
        raise ValidationError(f"longitude out of range: {lon}")
    if not -90 <= lat <= 90:
        raise ValidationError(f"latitude out of range: {lat}")
    return lon, lat


def resolve_max_distance(max_distance: Any, default: float = DEFAULT_MAX_DISTANCE_M) -> float:
    if max_distance is None:
        return float(default)
    distance = _finite_float(max_distance, name="maxDistance")
    if distance < 0:
        raise ValidationError(f"maxDistance must not be negative, got {max_distance!r}")
    return distance


def build_containment_predicate(geometry: Geometry, filters: FilterInput | None = None) -> Predicate:
    closed = close_rings(geometry)
    for ring in iter_rings(closed):
        if len(ring) < MIN_RING_POSITIONS:
            raise ValidationError(
                f"Polygon rings need at least {MIN_RING_POSITIONS} positions once closed, got {len(ring)}"
            )
    return all_of(WithinRegion(geometry=closed), build_filter_predicate(filters))


def build_proximity_predicate(
    point: Sequence[Any] | None,
    max_distance: Any = None,
    filters: FilterInput | None = None,
    *,
    default_max_distance: float = DEFAULT_MAX_DISTANCE_M,
) -> Predicate:
    lon, lat = validate_point(point)
    distance = resolve_max_distance(max_distance, default=default_max_distance)
    near = NearPoint(longitude=lon, latitude=lat, max_distance_m=distance)
    return all_of(near, build_filter_predicate(filters))
