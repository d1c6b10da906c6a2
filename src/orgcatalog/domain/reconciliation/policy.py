"""Conflict/merge policy for reconciliation.

Responsibilities of this stage:
- rank cluster members according to the configured resolution strategy
- pick the member that supplies a field value, the canonical name, or a
  conflict recommendation
- phrase the rationale for audit/debugging

Ranking is deterministic: ties always go to the member that appeared first in
the input batch.

``most_complete`` scores whole-record completeness (fraction of mergeable
fields populated), not per-field completeness. This is a deliberate policy:
a record that is well populated overall is treated as the more careful
source for every field it carries.

``newest`` ranks by ``CandidateRecord.updated_at``: ``last_updated`` when the
source reports it, otherwise ``retrieved_at``. A record without a source
timestamp therefore competes on its fetch time, and can beat a record whose
``last_updated`` is older than that fetch. Records with neither timestamp rank
last.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final, cast

from orgcatalog.domain.model import ConflictResolutionStrategy

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from orgcatalog.domain.model import CandidateRecord, FieldValue, OrganisationField


type RankKey = Callable[[CandidateRecord], float | datetime]

_NEVER: Final[datetime] = datetime.min.replace(tzinfo=UTC)


def _newest(record: CandidateRecord) -> datetime:
    return record.updated_at or _NEVER


def _confidence(record: CandidateRecord) -> float:
    return record.confidence


def _completeness(record: CandidateRecord) -> float:
    return record.completeness


_RANK_KEYS: Final[dict[ConflictResolutionStrategy, RankKey]] = {
    ConflictResolutionStrategy.NEWEST: _newest,
    ConflictResolutionStrategy.HIGHEST_CONFIDENCE: _confidence,
    ConflictResolutionStrategy.MOST_COMPLETE: _completeness,
    # manual review keeps the most trusted value as a provisional choice
    ConflictResolutionStrategy.MANUAL: _confidence,
}


def preferred_member(
    members: Sequence[CandidateRecord],
    strategy: ConflictResolutionStrategy,
) -> CandidateRecord:
    """Return the best-ranked member; earlier members win ties."""

    if not members:
        raise ValueError("Cannot rank an empty member list")
    rank = _RANK_KEYS[strategy]
    best = members[0]
    best_rank = rank(best)
    for member in members[1:]:
        member_rank = rank(member)
        if member_rank > best_rank:
            best, best_rank = member, member_rank
    return best


def select_value(
    members: Sequence[CandidateRecord],
    organisation_field: OrganisationField,
    strategy: ConflictResolutionStrategy,
) -> tuple[CandidateRecord, FieldValue] | None:
    """Pick the member (and its value) that supplies ``organisation_field``."""

    carriers = [member for member in members if member.value_for(organisation_field) is not None]
    if not carriers:
        return None
    winner = preferred_member(carriers, strategy)
    return winner, cast("FieldValue", winner.value_for(organisation_field))


def explain(
    strategy: ConflictResolutionStrategy,
    winner: CandidateRecord,
    *,
    candidates: int,
) -> str:
    """Human-readable reasoning for a strategy-driven choice."""

    source = str(winner.source_origin)
    if strategy is ConflictResolutionStrategy.NEWEST:
        updated = winner.updated_at
        stamp = updated.isoformat() if updated is not None else "unknown"
        return (
            f"Most recently updated of {candidates} values: {source} "
            f"record {winner.record_id} (last updated {stamp})"
        )
    if strategy is ConflictResolutionStrategy.HIGHEST_CONFIDENCE:
        return (
            f"Highest source confidence of {candidates} values: {source} "
            f"record {winner.record_id} (confidence {winner.confidence:.2f})"
        )
    if strategy is ConflictResolutionStrategy.MOST_COMPLETE:
        return (
            f"Most complete record of {candidates} values: {source} "
            f"record {winner.record_id} (completeness {winner.completeness:.2f})"
        )
    return (
        f"Provisional value from highest-confidence {source} record {winner.record_id}; "
        "awaiting manual review"
    )
