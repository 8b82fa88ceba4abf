"""Lexical similarity utilities for relevance scoring."""

from __future__ import annotations

import re

import textdistance

_WHITESPACE_RE = re.compile(r"\s+")
_BIGRAM_DICE = textdistance.Sorensen(qval=2, as_set=False, external=False)


def clamp(value: float, *, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def similarity(left: str, right: str) -> float:
    """Dice coefficient over character bigrams, whitespace ignored.

    Identical strings score 1.0; a string shorter than two characters has no
    bigrams and scores 0.0 against anything else.
    """
    left = _WHITESPACE_RE.sub("", left)
    right = _WHITESPACE_RE.sub("", right)
    if left == right:
        return 1.0
    if len(left) < 2 or len(right) < 2:
        return 0.0
    return float(_BIGRAM_DICE.similarity(left, right))


def weighted_field_scores(query: str, fields: dict[str, str], weights: dict[str, float]) -> dict[str, float]:
    return {name: similarity(query, value) * weights.get(name, 0.0) for name, value in fields.items()}
