"""Store protocol consumed by the query engine."""

from __future__ import annotations

from typing import Any, Protocol

from addrquery.common.errors import QueryError, StoreOperationError
from addrquery.common.models import Address
from addrquery.query.predicates import Predicate


class AddressStore(Protocol):
    def find(
        self,
        predicate: Predicate,
        *,
        limit: int | None = None,
        order_by_key: bool = False,
    ) -> list[Address]:
        """Return matching addresses, each carrying its ``record_key``.

        Results containing a ``NearPoint`` are ordered by increasing distance;
        otherwise ``order_by_key`` requests ascending record-key order.
        """
        ...

    def parse_record_key(self, text: str) -> Any:
        """Decode a cursor string, raising ``ValueError`` when it is not a key."""
        ...

    def format_record_key(self, key: Any) -> str:
        ...


def guarded_find(
    store: AddressStore,
    predicate: Predicate,
    *,
    operation: str,
    limit: int | None = None,
    order_by_key: bool = False,
) -> list[Address]:
    try:
        return store.find(predicate, limit=limit, order_by_key=order_by_key)
    except QueryError:
        raise
    except Exception as exc:
        raise StoreOperationError(operation, str(exc) or type(exc).__name__) from exc
