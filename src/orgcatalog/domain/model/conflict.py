"""Field-level disagreement between members of one cluster."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from orgcatalog.domain.model.candidate import FieldValue, SourceOrigin
    from orgcatalog.domain.model.enums import ConflictSeverity, OrganisationField


@dataclass(frozen=True, slots=True, kw_only=True)
class ConflictValue:
    """One distinct observed value and every source that reported it."""

    value: FieldValue
    sources: tuple[SourceOrigin, ...]
    record_ids: tuple[str, ...]


@dataclass(frozen=True, slots=True, kw_only=True)
class ConflictResolution:
    """Recommendation produced by the configured resolution strategy."""

    value: FieldValue
    source: SourceOrigin
    confidence: float
    reasoning: str


@dataclass(frozen=True, slots=True, kw_only=True)
class Conflict:
    conflict_id: UUID
    canonical_id: UUID
    field: OrganisationField
    values: tuple[ConflictValue, ...]
    severity: ConflictSeverity
    requires_manual_review: bool
    resolution: ConflictResolution | None = None

    def __post_init__(self) -> None:
        if len(self.values) < 2:
            raise ValueError("Conflict must include at least two distinct values")

    @property
    def sources(self) -> tuple[SourceOrigin, ...]:
        seen: list[SourceOrigin] = []
        for conflict_value in self.values:
            for source in conflict_value.sources:
                if source not in seen:
                    seen.append(source)
        return tuple(seen)
