"""Conflict detection for one cluster.

A field conflicts when cluster members carry two or more distinct present
values for it. A value that is missing on some members is treated as unset
there, not as a disagreement.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Final, Protocol
from uuid import uuid5

from orgcatalog.domain.model import (
    Conflict,
    ConflictResolution,
    ConflictResolutionStrategy,
    ConflictSeverity,
    ConflictValue,
    OrganisationField,
)

from .policy import explain, select_value

if TYPE_CHECKING:
    from collections.abc import Mapping
    from uuid import UUID

    from orgcatalog.domain.model import FieldValue, SourceOrigin

    from .contracts import Cluster


SEVERITY_BY_FIELD: Final[Mapping[OrganisationField, ConflictSeverity]] = MappingProxyType(
    {
        OrganisationField.TYPE: ConflictSeverity.HIGH,
        OrganisationField.CLASSIFICATION: ConflictSeverity.HIGH,
        OrganisationField.STATUS: ConflictSeverity.HIGH,
        OrganisationField.PARENT_ORGANISATION: ConflictSeverity.MEDIUM,
        OrganisationField.CONTROLLING_UNIT: ConflictSeverity.MEDIUM,
        OrganisationField.ESTABLISHMENT_DATE: ConflictSeverity.MEDIUM,
        OrganisationField.DISSOLUTION_DATE: ConflictSeverity.MEDIUM,
        OrganisationField.LOCATION: ConflictSeverity.LOW,
        OrganisationField.DESCRIPTION: ConflictSeverity.LOW,
        OrganisationField.WEBSITE: ConflictSeverity.LOW,
    }
)


class DetectConflicts(Protocol):
    """Find field-level disagreements inside one cluster."""

    def __call__(
        self,
        cluster: Cluster,
        *,
        canonical_id: UUID,
        strategy: ConflictResolutionStrategy,
    ) -> tuple[Conflict, ...]: ...


def severity_for(organisation_field: OrganisationField) -> ConflictSeverity:
    return SEVERITY_BY_FIELD[organisation_field]


def detect_conflicts(
    cluster: Cluster,
    *,
    canonical_id: UUID,
    strategy: ConflictResolutionStrategy,
) -> tuple[Conflict, ...]:
    """Return one conflict per disagreeing field, in field declaration order."""

    conflicts: list[Conflict] = []
    for organisation_field in OrganisationField:
        observed = observed_values(cluster, organisation_field)
        if len(observed) < 2:
            continue
        severity = severity_for(organisation_field)
        conflicts.append(
            Conflict(
                conflict_id=uuid5(canonical_id, organisation_field.value),
                canonical_id=canonical_id,
                field=organisation_field,
                values=observed,
                severity=severity,
                requires_manual_review=(
                    severity is ConflictSeverity.HIGH
                    or strategy is ConflictResolutionStrategy.MANUAL
                ),
                resolution=_recommend(cluster, organisation_field, strategy, len(observed)),
            )
        )
    return tuple(conflicts)


def observed_values(
    cluster: Cluster,
    organisation_field: OrganisationField,
) -> tuple[ConflictValue, ...]:
    """Distinct present values for one field, in first-appearance order."""

    sources_by_value: dict[FieldValue, list[SourceOrigin]] = {}
    record_ids_by_value: dict[FieldValue, list[str]] = {}
    for member in cluster.members:
        value = member.value_for(organisation_field)
        if value is None:
            continue
        sources = sources_by_value.setdefault(value, [])
        if member.source_origin not in sources:
            sources.append(member.source_origin)
        record_ids_by_value.setdefault(value, []).append(member.record_id)
    return tuple(
        ConflictValue(
            value=value,
            sources=tuple(sources),
            record_ids=tuple(record_ids_by_value[value]),
        )
        for value, sources in sources_by_value.items()
    )


def _recommend(
    cluster: Cluster,
    organisation_field: OrganisationField,
    strategy: ConflictResolutionStrategy,
    candidates: int,
) -> ConflictResolution | None:
    if strategy is ConflictResolutionStrategy.MANUAL:
        return None
    selected = select_value(cluster.members, organisation_field, strategy)
    if selected is None:
        return None
    winner, value = selected
    return ConflictResolution(
        value=value,
        source=winner.source_origin,
        confidence=winner.confidence,
        reasoning=explain(strategy, winner, candidates=candidates),
    )
