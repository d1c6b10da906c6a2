"""Merge resolution: one canonical record per cluster.

Responsibilities of this stage:
- derive a stable canonical id from the cluster's original identifiers
- choose every surviving value with the configured strategy
- record which source supplied each surviving value
- score merge confidence and data quality

Out of scope for this stage:
- deciding cluster membership
- persistence/serialization
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final, Protocol
from uuid import NAMESPACE_URL, UUID, uuid5

from orgcatalog.domain.model import (
    CanonicalRecord,
    ConflictResolutionStrategy,
    DataQuality,
    MergeAudit,
    OrganisationField,
    SourceReference,
    as_utc,
)

from .keys import normalize_name
from .policy import preferred_member, select_value

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from orgcatalog.domain.model import (
        CandidateRecord,
        Conflict,
        FieldValue,
        SourceOrigin,
    )

    from .contracts import Cluster, ReconciliationConfig


CANONICAL_ID_NAMESPACE: Final[UUID] = uuid5(NAMESPACE_URL, "urn:orgcatalog:canonical-record")

_CONFLICT_PENALTY: Final[float] = 0.1
_MAX_CONFLICT_PENALTY: Final[float] = 0.3
_CORROBORATION_BOOST: Final[float] = 0.1

log = logging.getLogger(__name__)


class MergeCluster(Protocol):
    """Collapse one cluster into its canonical record."""

    def __call__(
        self,
        cluster: Cluster,
        *,
        conflicts: Sequence[Conflict],
        config: ReconciliationConfig,
        merge_date: datetime,
    ) -> CanonicalRecord: ...


def canonical_id_for(cluster: Cluster) -> UUID:
    """Deterministic id over the sorted ``(source, record_id)`` pairs of the members."""

    originals = sorted((str(member.source_origin), member.record_id) for member in cluster.members)
    return uuid5(
        CANONICAL_ID_NAMESPACE,
        "|".join(f"{source}:{record_id}" for source, record_id in originals),
    )


def merge_cluster(
    cluster: Cluster,
    *,
    conflicts: Sequence[Conflict],
    config: ReconciliationConfig,
    merge_date: datetime,
) -> CanonicalRecord:
    """Assemble the canonical record and its provenance for ``cluster``."""

    strategy = config.conflict_resolution_strategy
    canonical_id = canonical_id_for(cluster)
    members = cluster.members

    name_source = preferred_member(members, strategy)
    fields: dict[OrganisationField, FieldValue] = {}
    provenance: dict[str, SourceOrigin] = {"name": name_source.source_origin}
    for organisation_field in OrganisationField:
        selected = select_value(members, organisation_field, strategy)
        if selected is None:
            continue
        winner, value = selected
        fields[organisation_field] = value
        provenance[organisation_field.value] = winner.source_origin

    data_quality = _data_quality(fields, conflicts=conflicts, config=config)
    audit = MergeAudit(
        canonical_id=canonical_id,
        original_ids=tuple(sorted(cluster.record_ids)),
        merge_method=cluster.merge_method,
        merge_date=merge_date,
        strategy=strategy,
        exact_links=cluster.exact_links,
        fuzzy_links=cluster.fuzzy_links,
    )
    if not cluster.is_singleton:
        log.debug(
            "Merged %s records into %s (%s, method=%s, conflicts=%s)",
            len(members),
            canonical_id,
            name_source.name,
            cluster.merge_method,
            len(conflicts),
        )

    return CanonicalRecord(
        canonical_id=canonical_id,
        name=name_source.name.strip(),
        alternative_names=_alternative_names(members, chosen_name=name_source.name),
        identifiers=_identifiers(members),
        fields=fields,
        sources=_source_references(members),
        field_provenance=provenance if config.track_provenance else {},
        confidence=merge_confidence(members, conflict_count=len(conflicts)),
        data_quality=data_quality,
        merge_audit=audit,
        last_updated=_latest_update(members),
    )


def merge_confidence(members: Sequence[CandidateRecord], *, conflict_count: int) -> float:
    """Mean member confidence, penalised per conflict, boosted by corroboration."""

    average = sum(member.confidence for member in members) / len(members)
    penalty = min(conflict_count * _CONFLICT_PENALTY, _MAX_CONFLICT_PENALTY)
    boost = _CORROBORATION_BOOST if len(members) > 2 else 0.0
    return round(max(0.0, min(1.0, average - penalty + boost)), 6)


def _data_quality(
    fields: dict[OrganisationField, FieldValue],
    *,
    conflicts: Sequence[Conflict],
    config: ReconciliationConfig,
) -> DataQuality:
    completeness = len(fields) / len(OrganisationField)
    review_reasons: list[str] = []
    flagged = [conflict.field.value for conflict in conflicts if conflict.requires_manual_review]
    if config.conflict_resolution_strategy is ConflictResolutionStrategy.MANUAL and conflicts:
        review_reasons.append("Conflicts awaiting manual resolution: " + ", ".join(flagged))
    elif flagged:
        review_reasons.append("High-severity conflicts: " + ", ".join(flagged))
    if completeness < config.min_completeness:
        review_reasons.append(f"Low data completeness after merge ({completeness:.2f})")
    return DataQuality(
        completeness=completeness,
        has_conflicts=bool(conflicts),
        conflict_fields=tuple(conflict.field for conflict in conflicts),
        requires_review=bool(review_reasons),
        review_reasons=tuple(review_reasons),
    )


def _alternative_names(
    members: Sequence[CandidateRecord],
    *,
    chosen_name: str,
) -> tuple[str, ...]:
    seen = {normalize_name(chosen_name)}
    names: list[str] = []
    for member in members:
        for raw in (member.name, *member.alternative_names):
            normalized = normalize_name(raw)
            if normalized is None or normalized in seen:
                continue
            seen.add(normalized)
            names.append(raw.strip())
    return tuple(names)


def _identifiers(members: Sequence[CandidateRecord]) -> dict[str, tuple[str, ...]]:
    values_by_scheme: dict[str, set[str]] = {}
    for member in members:
        for scheme, value in member.identifiers.items():
            cleaned = str(value).strip()
            if cleaned:
                values_by_scheme.setdefault(scheme, set()).add(cleaned)
    return {scheme: tuple(sorted(values_by_scheme[scheme])) for scheme in sorted(values_by_scheme)}


def _source_references(members: Sequence[CandidateRecord]) -> tuple[SourceReference, ...]:
    """One reference per source in first-appearance order, keeping the best confidence."""

    grouped: dict[SourceOrigin, list[CandidateRecord]] = {}
    for member in members:
        grouped.setdefault(member.source_origin, []).append(member)

    references: list[SourceReference] = []
    for source, source_members in grouped.items():
        best = preferred_member(source_members, ConflictResolutionStrategy.HIGHEST_CONFIDENCE)
        retrieved = [
            stamp for member in source_members if (stamp := as_utc(member.retrieved_at)) is not None
        ]
        references.append(
            SourceReference(
                source=source,
                record_ids=tuple(member.record_id for member in source_members),
                confidence=best.confidence,
                retrieved_at=max(retrieved) if retrieved else None,
                url=best.url,
            )
        )
    return tuple(references)


def _latest_update(members: Sequence[CandidateRecord]) -> datetime | None:
    stamps = [member.updated_at for member in members if member.updated_at is not None]
    return max(stamps) if stamps else None
