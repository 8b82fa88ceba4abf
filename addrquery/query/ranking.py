"""Free-text relevance ranking over a bounded candidate pool."""

from __future__ import annotations

import re
from dataclasses import dataclass

from addrquery.common.models import Address
from addrquery.common.policy import RankingPolicy
from addrquery.common.scoring import clamp, similarity, weighted_field_scores
from addrquery.query.predicates import Predicate, SubstringMatch, all_of, any_of
from addrquery.store.base import AddressStore, guarded_find

_TOKEN_SPLIT_RE = re.compile(r"[\W_]+")


@dataclass(frozen=True)
class ScoredAddress:
    address: Address
    score: float


def normalise_query(query: str | None) -> str:
    if not query:
        return ""
    return query.strip().lower()


def tokenize(query: str | None) -> list[str]:
    return [token for token in _TOKEN_SPLIT_RE.split(normalise_query(query)) if token]


def build_candidate_predicate(tokens: list[str], fields: tuple[str, ...]) -> Predicate:
    # Every token must appear in at least one of the searchable fields.
    return all_of(
        *(any_of(*(SubstringMatch(field=field, value=token) for field in fields)) for token in tokens)
    )


def score_address(query: str, address: Address, policy: RankingPolicy) -> float:
    """Score one candidate against an already normalised query."""
    values = {name: address.field_value(name).lower() for name in policy.fields}
    combined = " ".join(value for value in values.values() if value)

    combined_score = similarity(query, combined)
    field_scores = weighted_field_scores(query, values, policy.weights)
    best = max(combined_score, *field_scores.values())

    if any(value.startswith(query) for value in values.values()):
        best += policy.prefix_boost
    return clamp(best, minimum=0.0, maximum=1.0)


def rank_candidates(
    query: str,
    candidates: list[Address],
    limit: int,
    policy: RankingPolicy,
) -> list[ScoredAddress]:
    if not candidates:
        return []

    scored = [
        ScoredAddress(address=candidate, score=score_address(query, candidate, policy))
        for candidate in candidates
    ]
    # sorted() is stable, so equal scores keep retrieval order.
    ranked = sorted(scored, key=lambda item: -item.score)

    best = ranked[0].score
    if best >= policy.close_match_threshold:
        cutoff = max(policy.close_match_floor, best - policy.close_match_band)
        ranked = [item for item in ranked if item.score >= cutoff]
    return ranked[:limit]


def search_addresses(
    store: AddressStore,
    query: str | None,
    limit: int,
    policy: RankingPolicy | None = None,
) -> tuple[list[ScoredAddress], int]:
    """Return ranked matches plus the size of the candidate pool that was scored."""
    policy = policy or RankingPolicy()
    tokens = tokenize(query)
    if not tokens:
        return [], 0

    predicate = build_candidate_predicate(tokens, policy.fields)
    candidates = guarded_find(store, predicate, operation="search", limit=policy.pool_size(limit))
    return rank_candidates(normalise_query(query), candidates, limit, policy), len(candidates)
