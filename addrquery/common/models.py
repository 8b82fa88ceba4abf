"""Data models used across the query engine."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any

from addrquery.common.constants import ADDRESS_PROPERTY_FIELDS
from addrquery.common.errors import ValidationError


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _coordinate(value: Any, *, name: str, bound: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{name} must be numeric, got {value!r}") from exc
    if not math.isfinite(number) or not -bound <= number <= bound:
        raise ValidationError(f"{name} out of range: {value!r}")
    return number


@dataclass(frozen=True)
class Address:
    id: str
    hash: str
    longitude: float
    latitude: float
    number: str = ""
    street: str = ""
    unit: str = ""
    city: str = ""
    district: str = ""
    region: str = ""
    postcode: str = ""
    record_key: Any = field(default=None, compare=False)

    def field_value(self, name: str) -> str:
        return getattr(self, name)

    def with_record_key(self, record_key: Any) -> "Address":
        return replace(self, record_key=record_key)

    @classmethod
    def from_feature(cls, feature: dict[str, Any], *, record_key: Any = None) -> "Address":
        geometry = feature.get("geometry") or {}
        if geometry.get("type") != "Point":
            raise ValidationError(f"Address geometry must be a Point, got {geometry.get('type')!r}")
        coordinates = geometry.get("coordinates") or []
        if len(coordinates) < 2:
            raise ValidationError("Address geometry must carry [longitude, latitude]")

        properties = feature.get("properties") or {}
        address_id = _text(properties.get("id"))
        if not address_id:
            raise ValidationError("Address is missing properties.id")

        return cls(
            id=address_id,
            hash=_text(properties.get("hash")),
            longitude=_coordinate(coordinates[0], name="longitude", bound=180.0),
            latitude=_coordinate(coordinates[1], name="latitude", bound=90.0),
            number=_text(properties.get("number")),
            street=_text(properties.get("street")),
            unit=_text(properties.get("unit")),
            city=_text(properties.get("city")),
            district=_text(properties.get("district")),
            region=_text(properties.get("region")),
            postcode=_text(properties.get("postcode")),
            record_key=record_key,
        )

    def to_feature(self) -> dict[str, Any]:
        return {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [self.longitude, self.latitude]},
            "properties": {name: self.field_value(name) for name in ADDRESS_PROPERTY_FIELDS},
        }


@dataclass(frozen=True)
class FeatureCollection:
    features: tuple[dict[str, Any], ...] = ()

    @classmethod
    def from_addresses(cls, addresses) -> "FeatureCollection":
        return cls(features=tuple(address.to_feature() for address in addresses))

    def to_dict(self) -> dict[str, Any]:
        return {"type": "FeatureCollection", "features": list(self.features)}


@dataclass(frozen=True)
class BatchResult:
    geojson: FeatureCollection
    next_cursor: str | None
    has_more: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "geojson": self.geojson.to_dict(),
            "nextCursor": self.next_cursor,
            "hasMore": self.has_more,
        }
