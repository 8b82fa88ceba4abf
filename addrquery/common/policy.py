"""Tunable ranking policy and request defaults."""

from __future__ import annotations

from dataclasses import dataclass, field

from addrquery.common.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_MAX_DISTANCE_M,
    DEFAULT_SEARCH_LIMIT,
    SEARCH_FIELDS,
)


def _default_weights() -> dict[str, float]:
    return {"street": 1.0, "city": 0.9, "postcode": 0.8, "number": 0.5}


@dataclass(frozen=True)
class RankingPolicy:
    """Free-text ranking constants.

    ``close_match_threshold``, ``close_match_floor`` and ``close_match_band``
    define the "close matches only" cut: once the best score reaches the
    threshold, only candidates scoring at least
    ``max(close_match_floor, best - close_match_band)`` are kept.
    """

    fields: tuple[str, ...] = SEARCH_FIELDS
    weights: dict[str, float] = field(default_factory=_default_weights)
    prefix_boost: float = 0.15
    close_match_threshold: float = 0.75
    close_match_floor: float = 0.70
    close_match_band: float = 0.08
    pool_multiplier: int = 2
    pool_minimum: int = 100

    def pool_size(self, limit: int) -> int:
        return max(limit * self.pool_multiplier, self.pool_minimum)

    @classmethod
    def from_config(cls, cfg: dict) -> "RankingPolicy":
        close_match = cfg["close_match"]
        pool = cfg["candidate_pool"]
        return cls(
            fields=tuple(cfg["fields"]),
            weights={name: float(value) for name, value in cfg["weights"].items()},
            prefix_boost=float(cfg["prefix_boost"]),
            close_match_threshold=float(close_match["threshold"]),
            close_match_floor=float(close_match["floor"]),
            close_match_band=float(close_match["band"]),
            pool_multiplier=int(pool["multiplier"]),
            pool_minimum=int(pool["minimum"]),
        )


@dataclass(frozen=True)
class QueryDefaults:
    search_limit: int = DEFAULT_SEARCH_LIMIT
    batch_size: int = DEFAULT_BATCH_SIZE
    max_distance_m: float = DEFAULT_MAX_DISTANCE_M

    @classmethod
    def from_config(cls, cfg: dict) -> "QueryDefaults":
        return cls(
            search_limit=int(cfg["search_limit"]),
            batch_size=int(cfg["batch_size"]),
            max_distance_m=float(cfg["max_distance_m"]),
        )
