"""Typed query predicates, independent of any store's wire format.

Stores either evaluate these directly (``store/memory.py``) or lower them to
their native query form (``store/document_query.py``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Union

from addrquery.query.geometry import Geometry


@dataclass(frozen=True)
class SubstringMatch:
    """Case-insensitive literal substring match on an address field."""

    field: str
    value: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", self.value.lower())


@dataclass(frozen=True)
class AnyOf:
    children: tuple["Predicate", ...]


@dataclass(frozen=True)
class AllOf:
    children: tuple["Predicate", ...]


@dataclass(frozen=True)
class WithinRegion:
    geometry: Geometry


@dataclass(frozen=True)
class NearPoint:
    longitude: float
    latitude: float
    max_distance_m: float


@dataclass(frozen=True)
class KeyAfter:
    key: Any


Predicate = Union[SubstringMatch, AnyOf, AllOf, WithinRegion, NearPoint, KeyAfter]

MATCH_ALL = AllOf(children=())


def all_of(*predicates: Predicate | None) -> Predicate:
    """AND the given predicates, flattening nested groups and skipping ``None``."""
    children: list[Predicate] = []
    for predicate in predicates:
        if predicate is None:
            continue
        if isinstance(predicate, AllOf):
            children.extend(predicate.children)
        else:
            children.append(predicate)
    if not children:
        return MATCH_ALL
    if len(children) == 1:
        return children[0]
    return AllOf(children=tuple(children))


def any_of(*predicates: Predicate) -> Predicate:
    """OR the given predicates. An empty group matches nothing."""
    if len(predicates) == 1:
        return predicates[0]
    return AnyOf(children=tuple(predicates))


def walk(predicate: Predicate) -> Iterator[Predicate]:
    yield predicate
    if isinstance(predicate, (AnyOf, AllOf)):
        for child in predicate.children:
            yield from walk(child)


def find_near_point(predicate: Predicate) -> NearPoint | None:
    for node in walk(predicate):
        if isinstance(node, NearPoint):
            return node
    return None
