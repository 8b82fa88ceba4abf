"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from addrquery.common.constants import SEARCH_FIELDS
from addrquery.common.errors import ConfigError


def _assert_mapping(obj, ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    _assert_mapping(obj, ctx)
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_unit_interval(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 1:
        raise ConfigError(f"{ctx} must be a number between 0 and 1")


def _assert_positive_int(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive integer")


def validate_ranking_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"fields", "weights", "prefix_boost", "close_match", "candidate_pool"}
    _assert_required_keys(cfg, top_required, "ranking config")
    _assert_no_unknown_keys(cfg, top_required, "ranking config", allow_unknown)

    fields = cfg["fields"]
    if not isinstance(fields, list) or not fields:
        raise ConfigError("ranking.fields must be a non-empty list")
    unsupported = set(fields) - set(SEARCH_FIELDS)
    if unsupported:
        raise ConfigError(f"Unsupported ranking fields: {', '.join(sorted(unsupported))}")

    _assert_required_keys(cfg["weights"], set(fields), "ranking.weights")
    for name, weight in cfg["weights"].items():
        _assert_unit_interval(weight, f"ranking.weights.{name}")
    _assert_unit_interval(cfg["prefix_boost"], "ranking.prefix_boost")

    close_match = cfg["close_match"]
    _assert_required_keys(close_match, {"threshold", "floor", "band"}, "ranking.close_match")
    for key in ("threshold", "floor", "band"):
        _assert_unit_interval(close_match[key], f"ranking.close_match.{key}")

    pool = cfg["candidate_pool"]
    _assert_required_keys(pool, {"multiplier", "minimum"}, "ranking.candidate_pool")
    _assert_positive_int(pool["multiplier"], "ranking.candidate_pool.multiplier")
    _assert_positive_int(pool["minimum"], "ranking.candidate_pool.minimum")

    return cfg


def validate_query_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    required = {"search_limit", "batch_size", "max_distance_m"}
    _assert_required_keys(cfg, required, "query config")
    _assert_no_unknown_keys(cfg, required, "query config", allow_unknown)

    _assert_positive_int(cfg["search_limit"], "query.search_limit")
    _assert_positive_int(cfg["batch_size"], "query.batch_size")
    distance = cfg["max_distance_m"]
    if isinstance(distance, bool) or not isinstance(distance, (int, float)) or distance < 0:
        raise ConfigError("query.max_distance_m must be a non-negative number")

    return cfg
