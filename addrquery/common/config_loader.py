"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from addrquery.common.errors import ConfigError
from addrquery.common.fs import read_yaml
from addrquery.common.policy import QueryDefaults, RankingPolicy
from addrquery.common.schema import validate_query_config, validate_ranking_config


@dataclass(frozen=True)
class ConfigBundle:
    ranking: RankingPolicy = field(default_factory=RankingPolicy)
    defaults: QueryDefaults = field(default_factory=QueryDefaults)


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    return _deep_merge(base, overlay)


def load_all_configs(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> ConfigBundle:
    def _overlay(name: str) -> Path | None:
        if overlay_config_dir is None:
            return None
        return overlay_config_dir / name

    ranking = validate_ranking_config(
        _load_yaml_with_overlay(config_dir / "ranking.yml", _overlay("ranking.yml")),
        allow_unknown=allow_unknown,
    )
    query = validate_query_config(
        _load_yaml_with_overlay(config_dir / "query.yml", _overlay("query.yml")),
        allow_unknown=allow_unknown,
    )
    return ConfigBundle(
        ranking=RankingPolicy.from_config(ranking),
        defaults=QueryDefaults.from_config(query),
    )
