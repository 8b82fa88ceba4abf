"""Adapter over a pymongo-compatible address collection."""

from __future__ import annotations

import re
from typing import Any, Callable

from addrquery.common.errors import ValidationError
from addrquery.common.models import Address
from addrquery.query.predicates import Predicate
from addrquery.store.document_query import RECORD_KEY_FIELD, to_document_filter

PROJECTION = {RECORD_KEY_FIELD: 1, "type": 1, "geometry": 1, "properties": 1}

# Index layout the containment, proximity and filter queries rely on.
ADDRESS_INDEXES = (
    {"keys": [("geometry", "2dsphere")]},
    {"keys": [("properties.id", 1)], "unique": True},
    {"keys": [("properties.hash", 1)], "unique": True},
    {"keys": [("properties.city", 1), ("geometry", "2dsphere")]},
    {"keys": [("properties.postcode", 1), ("geometry", "2dsphere")]},
    {"keys": [("properties.street", 1)]},
)

_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def _to_address(document: dict[str, Any]) -> Address:
    record_key = document.get(RECORD_KEY_FIELD)
    try:
        return Address.from_feature(document, record_key=record_key)
    except ValidationError as exc:
        # A malformed stored document is a store failure, not a request error.
        raise ValueError(f"malformed address document {record_key}: {exc}") from exc


class DocumentAddressStore:
    """Address store backed by a document collection.

    ``collection`` needs a pymongo-style ``find(filter, projection=..., sort=...,
    limit=...)``. ``key_factory`` turns a validated 24-hex cursor into the
    collection's key type; pass ``bson.ObjectId`` for MongoDB.
    """

    def __init__(self, collection: Any, *, key_factory: Callable[[str], Any]) -> None:
        self.collection = collection
        self.key_factory = key_factory

    def find(
        self,
        predicate: Predicate,
        *,
        limit: int | None = None,
        order_by_key: bool = False,
    ) -> list[Address]:
        kwargs: dict[str, Any] = {"projection": PROJECTION}
        if order_by_key:
            kwargs["sort"] = [(RECORD_KEY_FIELD, 1)]
        if limit is not None:
            kwargs["limit"] = limit

        documents = self.collection.find(to_document_filter(predicate), **kwargs)
        return [_to_address(document) for document in documents]

    def parse_record_key(self, text: str) -> Any:
        if not _OBJECT_ID_RE.match(text):
            raise ValueError(f"cursor must be a 24 character hex string, got {text!r}")
        return self.key_factory(text)

    def format_record_key(self, key: Any) -> str:
        return str(key)

    def ensure_indexes(self) -> None:
        for spec in ADDRESS_INDEXES:
            self.collection.create_index(spec["keys"], unique=spec.get("unique", False))
