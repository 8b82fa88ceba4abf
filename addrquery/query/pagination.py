"""Keyset (cursor) pagination over store fetches."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from addrquery.common.constants import DEFAULT_BATCH_SIZE
from addrquery.common.errors import InvalidCursorError, ValidationError
from addrquery.common.models import Address
from addrquery.query.predicates import KeyAfter, Predicate, all_of
from addrquery.store.base import AddressStore, guarded_find


@dataclass(frozen=True)
class Page:
    records: list[Address]
    next_cursor: str | None
    has_more: bool


def resolve_batch_size(batch_size: Any, limit: Any = None, default: int = DEFAULT_BATCH_SIZE) -> int:
    value = batch_size if batch_size is not None else limit
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"batchSize must be a positive integer, got {value!r}")
    return value


def decode_cursor(store: AddressStore, cursor: str) -> Any:
    if not isinstance(cursor, str) or not cursor.strip():
        raise InvalidCursorError(f"Invalid cursor value: {cursor!r}")
    try:
        return store.parse_record_key(cursor.strip())
    except (TypeError, ValueError) as exc:
        raise InvalidCursorError(f"Invalid cursor value: {cursor!r}") from exc


def fetch_page(
    store: AddressStore,
    predicate: Predicate,
    batch_size: int,
    cursor: str | None = None,
    *,
    operation: str = "containment",
) -> Page:
    """Fetch one page in ascending record-key order.

    ``has_more`` is true whenever the page is exactly full, so the last page
    of a result set whose size is a multiple of ``batch_size`` reports more
    and the following call returns an empty page.
    """
    if cursor is not None:
        predicate = all_of(predicate, KeyAfter(key=decode_cursor(store, cursor)))

    records = guarded_find(store, predicate, operation=operation, limit=batch_size, order_by_key=True)
    next_cursor = store.format_record_key(records[-1].record_key) if records else None
    return Page(records=records, next_cursor=next_cursor, has_more=len(records) == batch_size)
