import copy

import pytest

from addrquery.common.errors import ConfigError
from addrquery.common.schema import validate_query_config, validate_ranking_config

BASE_RANKING = {
    "fields": ["street", "number", "postcode", "city"],
    "weights": {"street": 1.0, "city": 0.9, "postcode": 0.8, "number": 0.5},
    "prefix_boost": 0.15,
    "close_match": {"threshold": 0.75, "floor": 0.7, "band": 0.08},
    "candidate_pool": {"multiplier": 2, "minimum": 100},
}


def _ranking(**changes):
    cfg = copy.deepcopy(BASE_RANKING)
    cfg.update(changes)
    return cfg


def test_validate_ranking_config_accepts_valid_shape():
    assert validate_ranking_config(_ranking())["prefix_boost"] == 0.15


@pytest.mark.parametrize(
    "changes",
    [
        {"fields": []},
        {"fields": ["street", "unit"]},
        {"weights": {"street": 1.0}},
        {"weights": {"street": 1.5, "city": 0.9, "postcode": 0.8, "number": 0.5}},
        {"prefix_boost": "high"},
        {"close_match": {"threshold": 0.75, "floor": 0.7}},
        {"candidate_pool": {"multiplier": 0, "minimum": 100}},
        {"candidate_pool": {"multiplier": 2, "minimum": 1.5}},
        {"close_match": [0.75, 0.7, 0.08]},
    ],
)
def test_validate_ranking_config_rejects_bad_values(changes):
    with pytest.raises(ConfigError):
        validate_ranking_config(_ranking(**changes))


def test_validate_ranking_config_rejects_unknown_key_by_default():
    bad = _ranking(stemming=True)
    with pytest.raises(ConfigError):
        validate_ranking_config(bad)
    validate_ranking_config(bad, allow_unknown=True)


def test_validate_query_config():
    assert validate_query_config({"search_limit": 10, "batch_size": 20, "max_distance_m": 0})["batch_size"] == 20

    with pytest.raises(ConfigError):
        validate_query_config({"search_limit": 10, "batch_size": 20})
    with pytest.raises(ConfigError):
        validate_query_config({"search_limit": 10, "batch_size": -1, "max_distance_m": 5})
    with pytest.raises(ConfigError):
        validate_query_config({"search_limit": 10, "batch_size": 20, "max_distance_m": -5})
