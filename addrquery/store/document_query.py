"""Lowering of typed predicates into document-store filter documents.

The output uses the MongoDB query language over the persisted address layout
(``geometry`` GeoJSON point, ``properties.*`` scalar fields, ``_id`` record key).
"""

from __future__ import annotations

import re
from typing import Any

from addrquery.query.geometry import to_geojson
from addrquery.query.predicates import (
    AllOf,
    AnyOf,
    KeyAfter,
    NearPoint,
    Predicate,
    SubstringMatch,
    WithinRegion,
)

RECORD_KEY_FIELD = "_id"
GEOMETRY_FIELD = "geometry"

# Never matches: $or with no branches is rejected by the server.
MATCH_NOTHING = {RECORD_KEY_FIELD: {"$exists": False}}


def property_path(field: str) -> str:
    return f"properties.{field}"


def _merge_conjuncts(documents: list[dict[str, Any]]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    overflow: list[dict[str, Any]] = []
    for document in documents:
        if merged.keys() & document.keys():
            overflow.append(document)
        else:
            merged.update(document)
    if overflow:
        if "$and" in merged:
            overflow.insert(0, {"$and": merged.pop("$and")})
        merged["$and"] = overflow
    return merged


def to_document_filter(predicate: Predicate) -> dict[str, Any]:
    if isinstance(predicate, SubstringMatch):
        return {property_path(predicate.field): {"$regex": re.escape(predicate.value), "$options": "i"}}

    if isinstance(predicate, AllOf):
        # Conjuncts are merged at one level where keys allow; $near must not sit inside $or.
        return _merge_conjuncts([to_document_filter(child) for child in predicate.children])

    if isinstance(predicate, AnyOf):
        if not predicate.children:
            return dict(MATCH_NOTHING)
        return {"$or": [to_document_filter(child) for child in predicate.children]}

    if isinstance(predicate, WithinRegion):
        return {GEOMETRY_FIELD: {"$geoWithin": {"$geometry": to_geojson(predicate.geometry)}}}

    if isinstance(predicate, NearPoint):
        return {
            GEOMETRY_FIELD: {
                "$nearSphere": {
                    "$geometry": {"type": "Point", "coordinates": [predicate.longitude, predicate.latitude]},
                    "$maxDistance": predicate.max_distance_m,
                }
            }
        }

    if isinstance(predicate, KeyAfter):
        return {RECORD_KEY_FIELD: {"$gt": predicate.key}}

    raise TypeError(f"Unsupported predicate: {type(predicate).__name__}")
