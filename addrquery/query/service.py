"""Per-request orchestration of parse, predicate build, fetch and post-process stages."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Sequence, TypeVar

from addrquery.common.errors import QueryError, ValidationError
from addrquery.common.ids import generate_request_id
from addrquery.common.logging import get_logger, log_event
from addrquery.common.models import BatchResult, FeatureCollection
from addrquery.common.policy import QueryDefaults, RankingPolicy
from addrquery.common.time_utils import elapsed_ms
from addrquery.query.filters import FilterInput
from addrquery.query.geometry import parse_wkt
from addrquery.query.pagination import fetch_page, resolve_batch_size
from addrquery.query.ranking import search_addresses
from addrquery.query.spatial import build_containment_predicate, build_proximity_predicate
from addrquery.store.base import AddressStore, guarded_find

T = TypeVar("T")


@dataclass(frozen=True)
class SearchRequest:
    query: str | None
    limit: int | None = None


@dataclass(frozen=True)
class ContainmentRequest:
    region_wkt: str
    limit: int | None = None
    batch_size: int | None = None
    cursor: str | None = None
    filters: FilterInput | None = None


@dataclass(frozen=True)
class ProximityRequest:
    point: Sequence[Any] | None
    max_distance: float | None = None
    filters: FilterInput | None = None


def _positive_limit(value: Any, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"limit must be a positive integer, got {value!r}")
    return value


class AddressQueryService:
    """Stateless query front for free-text, containment and proximity lookups."""

    def __init__(
        self,
        store: AddressStore,
        *,
        ranking: RankingPolicy | None = None,
        defaults: QueryDefaults | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.ranking = ranking or RankingPolicy()
        self.defaults = defaults or QueryDefaults()
        self.logger = logger or get_logger("service")

    def _run(self, operation: str, handler: Callable[[dict], T]) -> T:
        request_id = generate_request_id()
        started_at = time.perf_counter()
        stats: dict[str, Any] = {}
        log_event(self.logger, f"{operation} start", request_id=request_id, operation=operation, event="QUERY_START")
        try:
            result = handler(stats)
        except QueryError as exc:
            log_event(
                self.logger,
                f"{operation} failed: {exc}",
                level=logging.WARNING,
                request_id=request_id,
                operation=operation,
                event="QUERY_FAIL",
                status="error",
                duration_ms=elapsed_ms(started_at),
                error_code=exc.error_code,
            )
            raise
        log_event(
            self.logger,
            f"{operation} end",
            request_id=request_id,
            operation=operation,
            event="QUERY_END",
            status="ok",
            duration_ms=elapsed_ms(started_at),
            rows_in=stats.get("rows_in"),
            rows_out=stats.get("rows_out"),
        )
        return result

    def search(self, request: SearchRequest) -> FeatureCollection:
        def _handle(stats: dict) -> FeatureCollection:
            limit = _positive_limit(request.limit, self.defaults.search_limit)
            ranked, pool_size = search_addresses(self.store, request.query, limit, self.ranking)
            stats.update(rows_in=pool_size, rows_out=len(ranked))
            return FeatureCollection.from_addresses(item.address for item in ranked)

        return self._run("search", _handle)

    def within_region(self, request: ContainmentRequest) -> BatchResult:
        def _handle(stats: dict) -> BatchResult:
            batch_size = resolve_batch_size(request.batch_size, request.limit, default=self.defaults.batch_size)
            predicate = build_containment_predicate(parse_wkt(request.region_wkt), request.filters)
            page = fetch_page(self.store, predicate, batch_size, request.cursor or None)
            stats.update(rows_out=len(page.records))
            return BatchResult(
                geojson=FeatureCollection.from_addresses(page.records),
                next_cursor=page.next_cursor,
                has_more=page.has_more,
            )

        return self._run("containment", _handle)

    def near_point(self, request: ProximityRequest) -> FeatureCollection:
        def _handle(stats: dict) -> FeatureCollection:
            predicate = build_proximity_predicate(
                request.point,
                request.max_distance,
                request.filters,
                default_max_distance=self.defaults.max_distance_m,
            )
            records = guarded_find(self.store, predicate, operation="proximity")
            stats.update(rows_out=len(records))
            return FeatureCollection.from_addresses(records)

        return self._run("proximity", _handle)
