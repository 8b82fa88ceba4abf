"""Optional categorical filters turned into substring predicates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence, Union

from addrquery.common.constants import LIST_FILTER_FIELDS
from addrquery.common.errors import ValidationError
from addrquery.query.predicates import Predicate, SubstringMatch, all_of, any_of

FilterValue = Union[str, Sequence[str], None]


@dataclass(frozen=True)
class FilterInput:
    city: FilterValue = None
    street: FilterValue = None
    postcode: FilterValue = None
    district: FilterValue = None
    region: FilterValue = None
    number: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> "FilterInput":
        if not raw:
            return cls()
        unknown = set(raw) - {*LIST_FILTER_FIELDS, "number"}
        if unknown:
            raise ValidationError(f"Unknown filter fields: {', '.join(sorted(unknown))}")
        return cls(**raw)


def normalise_filter_values(value: FilterValue) -> list[str]:
    """Comma-split a string (or take a list) into trimmed, lower-cased, non-empty items."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        raise ValidationError(f"Filter values must be a string or a list of strings, got {value!r}")

    out: list[str] = []
    for item in items:
        if not isinstance(item, str):
            raise ValidationError(f"Filter values must be strings, got {item!r}")
        cleaned = item.strip().lower()
        if cleaned:
            out.append(cleaned)
    return out


def build_filter_predicate(filters: FilterInput | None) -> Predicate | None:
    if filters is None:
        return None

    parts: list[Predicate] = []
    for field in LIST_FILTER_FIELDS:
        values = normalise_filter_values(getattr(filters, field))
        if values:
            parts.append(any_of(*(SubstringMatch(field=field, value=value) for value in values)))

    if filters.number is not None:
        if not isinstance(filters.number, str):
            raise ValidationError(f"number filter must be a single string, got {filters.number!r}")
        number = filters.number.strip()
        if number:
            parts.append(SubstringMatch(field="number", value=number))

    if not parts:
        return None
    return all_of(*parts)
