"""In-memory reference store evaluating predicates directly."""

from __future__ import annotations

import re
from collections import Counter
from pathlib import Path
from typing import Any, Callable, Iterable

from pyproj import Geod
from shapely.geometry import Point, shape

from addrquery.common.errors import StoreOperationError
from addrquery.common.fs import iter_jsonl
from addrquery.common.models import Address
from addrquery.query.geometry import to_geojson
from addrquery.query.predicates import (
    AllOf,
    AnyOf,
    KeyAfter,
    NearPoint,
    Predicate,
    SubstringMatch,
    WithinRegion,
    find_near_point,
)

Matcher = Callable[[Address], bool]

_GEOD = Geod(ellps="WGS84")
_KEY_RE = re.compile(r"^\d+$")


def geodesic_distance_m(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    _fwd, _back, distance = _GEOD.inv(lon1, lat1, lon2, lat2)
    return distance


def _compile(predicate: Predicate) -> Matcher:
    if isinstance(predicate, SubstringMatch):
        field, needle = predicate.field, predicate.value
        return lambda address: needle in address.field_value(field).lower()

    if isinstance(predicate, AllOf):
        matchers = [_compile(child) for child in predicate.children]
        return lambda address: all(matcher(address) for matcher in matchers)

    if isinstance(predicate, AnyOf):
        matchers = [_compile(child) for child in predicate.children]
        return lambda address: any(matcher(address) for matcher in matchers)

    if isinstance(predicate, WithinRegion):
        # GeoJSON semantics: the first ring of each polygon is the shell, the rest are holes.
        region = shape(to_geojson(predicate.geometry))
        return lambda address: region.covers(Point(address.longitude, address.latitude))

    if isinstance(predicate, NearPoint):
        return lambda address: (
            geodesic_distance_m(predicate.longitude, predicate.latitude, address.longitude, address.latitude)
            <= predicate.max_distance_m
        )

    if isinstance(predicate, KeyAfter):
        return lambda address: address.record_key > predicate.key

    raise TypeError(f"Unsupported predicate: {type(predicate).__name__}")


class InMemoryAddressStore:
    """Address collection held in insertion order with integer record keys.

    ``id`` and ``hash`` are unique, mirroring the unique indexes of the
    persisted collection. An empty ``hash`` is a value like any other, so at
    most one record may lack one.
    """

    def __init__(self, addresses: Iterable[Address] = ()) -> None:
        self._records: list[Address] = []
        self._ids: set[str] = set()
        self._hashes: set[str] = set()
        self._next_key = 1
        for address in addresses:
            self.insert(address)

    @classmethod
    def from_features(cls, features: Iterable[dict[str, Any]]) -> "InMemoryAddressStore":
        return cls(Address.from_feature(feature) for feature in features)

    @classmethod
    def from_jsonl(cls, path: Path) -> "InMemoryAddressStore":
        return cls.from_features(iter_jsonl(path))

    def __len__(self) -> int:
        return len(self._records)

    def insert(self, address: Address) -> Address:
        if address.id in self._ids:
            raise StoreOperationError("insert", f"duplicate address id {address.id!r}")
        if address.hash in self._hashes:
            raise StoreOperationError("insert", f"duplicate address hash {address.hash!r}")

        stored = address.with_record_key(self._next_key)
        self._next_key += 1
        self._records.append(stored)
        self._ids.add(stored.id)
        self._hashes.add(stored.hash)
        return stored

    def find(
        self,
        predicate: Predicate,
        *,
        limit: int | None = None,
        order_by_key: bool = False,
    ) -> list[Address]:
        matcher = _compile(predicate)
        # Records are kept in key order, so insertion order already satisfies order_by_key.
        matches = [address for address in self._records if matcher(address)]

        near = find_near_point(predicate)
        if near is not None:
            matches.sort(
                key=lambda address: geodesic_distance_m(
                    near.longitude, near.latitude, address.longitude, address.latitude
                )
            )

        if limit is not None:
            matches = matches[:limit]
        return matches

    def parse_record_key(self, text: str) -> int:
        if not _KEY_RE.match(text):
            raise ValueError(f"not a record key: {text!r}")
        return int(text)

    def format_record_key(self, key: int) -> str:
        return str(key)

    def summary(self, top: int = 10) -> dict[str, Any]:
        cities = Counter(address.city for address in self._records if address.city)
        streets = Counter(address.street for address in self._records if address.street)
        return {
            "total_addresses": len(self._records),
            "cities": [{"name": name, "count": count} for name, count in cities.most_common(top)],
            "streets": [{"name": name, "count": count} for name, count in streets.most_common(top)],
        }
