"""Builders for candidate records used across reconciliation tests."""

from __future__ import annotations

from datetime import UTC, datetime
from itertools import count
from typing import TYPE_CHECKING

from orgcatalog.domain.model import CandidateRecord, OrganisationField, Source
from orgcatalog.domain.reconciliation import Cluster

if TYPE_CHECKING:
    from collections.abc import Mapping

    from orgcatalog.domain.model import FieldValue, MergeMethod, SourceOrigin

_RECORD_IDS = count(1)


def make_record(
    name: str = "Department for Example",
    *,
    record_id: str | None = None,
    source: SourceOrigin = Source.GOV_UK_API,
    alternative_names: tuple[str, ...] = (),
    identifiers: Mapping[str, str] | None = None,
    fields: Mapping[OrganisationField, FieldValue] | None = None,
    confidence: float = 0.9,
    last_updated: datetime | None = None,
    retrieved_at: datetime | None = None,
    url: str | None = None,
) -> CandidateRecord:
    """Create a candidate record with a unique id unless one is given."""

    return CandidateRecord(
        record_id=record_id or f"rec-{next(_RECORD_IDS)}",
        source_origin=source,
        name=name,
        alternative_names=alternative_names,
        identifiers=dict(identifiers or {}),
        fields=dict(fields or {}),
        confidence=confidence,
        last_updated=last_updated,
        retrieved_at=retrieved_at,
        url=url,
    )


def at(year: int, month: int = 1, day: int = 1) -> datetime:
    return datetime(year, month, day, tzinfo=UTC)


FULL_FIELDS: dict[OrganisationField, FieldValue] = {
    OrganisationField.TYPE: "ministerial_department",
    OrganisationField.CLASSIFICATION: "Central Government",
    OrganisationField.STATUS: "active",
    OrganisationField.PARENT_ORGANISATION: "HM Government",
    OrganisationField.CONTROLLING_UNIT: "Cabinet Office",
    OrganisationField.DESCRIPTION: "Leads on policy",
    OrganisationField.WEBSITE: "https://www.gov.uk/example",
}


def make_cluster(*records: CandidateRecord, merge_method: MergeMethod | None = None) -> Cluster:
    """Cluster of ``records`` at consecutive positions."""

    return Cluster(
        members=tuple(records),
        positions=tuple(range(len(records))),
        merge_method=merge_method,
    )
