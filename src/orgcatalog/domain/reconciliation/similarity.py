"""Name similarity between candidate records.

The primary name of each record is compared against the other record's
primary name and aliases. Taking the maximum over both directions keeps the
score symmetric and lets an alias on one side match the canonical name on the
other.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rapidfuzz import fuzz

from .keys import normalize_name

if TYPE_CHECKING:
    from orgcatalog.domain.model import CandidateRecord


type ComparableNames = tuple[str, ...]


def comparable_names(record: CandidateRecord) -> ComparableNames:
    """Normalized primary name followed by the normalized, distinct aliases."""

    names: list[str] = []
    for raw in (record.name, *record.alternative_names):
        normalized = normalize_name(raw)
        if normalized and normalized not in names:
            names.append(normalized)
    return tuple(names)


def name_similarity(left: str, right: str) -> float:
    """Token-set similarity of two names in ``[0, 1]``."""

    return _normalized_similarity(normalize_name(left), normalize_name(right))


def names_similarity(left: ComparableNames, right: ComparableNames) -> float:
    """Best match of either primary name against the other side's names."""

    if not left or not right:
        return 0.0
    best = 0.0
    for candidate in right:
        best = max(best, _normalized_similarity(left[0], candidate))
    for candidate in left:
        best = max(best, _normalized_similarity(right[0], candidate))
    return best


def record_similarity(left: CandidateRecord, right: CandidateRecord) -> float:
    return names_similarity(comparable_names(left), comparable_names(right))


def _normalized_similarity(left: str | None, right: str | None) -> float:
    if not left or not right:
        return 0.0
    if left == right:
        return 1.0
    return fuzz.token_set_ratio(left, right) / 100.0
