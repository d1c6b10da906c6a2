"""Merge output: one canonical record per cluster plus its audit trail."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime
    from uuid import UUID

    from orgcatalog.domain.model.candidate import FieldValue, SourceOrigin
    from orgcatalog.domain.model.enums import (
        ConflictResolutionStrategy,
        MergeMethod,
        OrganisationField,
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class SourceReference:
    """Contribution of one source to a canonical record."""

    source: SourceOrigin
    record_ids: tuple[str, ...]
    confidence: float
    retrieved_at: datetime | None = None
    url: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DataQuality:
    completeness: float
    has_conflicts: bool
    conflict_fields: tuple[OrganisationField, ...] = ()
    requires_review: bool = False
    review_reasons: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class MergeAudit:
    """Audit record for one cluster collapsed into one canonical record."""

    canonical_id: UUID
    original_ids: tuple[str, ...]
    merge_method: MergeMethod | None
    merge_date: datetime
    strategy: ConflictResolutionStrategy
    exact_links: int = 0
    fuzzy_links: int = 0


@dataclass(frozen=True, slots=True, kw_only=True)
class CanonicalRecord:
    """Single merged record representing one real-world organisation.

    ``field_provenance`` maps ``"name"`` and every populated
    ``OrganisationField`` value to the source that supplied the surviving
    value. It is empty when provenance tracking is disabled.
    """

    canonical_id: UUID
    name: str
    alternative_names: tuple[str, ...]
    identifiers: Mapping[str, tuple[str, ...]]
    fields: Mapping[OrganisationField, FieldValue]
    sources: tuple[SourceReference, ...]
    field_provenance: Mapping[str, SourceOrigin]
    confidence: float
    data_quality: DataQuality
    merge_audit: MergeAudit
    last_updated: datetime | None = None

    def value_for(self, organisation_field: OrganisationField) -> FieldValue | None:
        return self.fields.get(organisation_field)

    @property
    def requires_review(self) -> bool:
        return self.data_quality.requires_review

    @property
    def original_ids(self) -> tuple[str, ...]:
        return self.merge_audit.original_ids
