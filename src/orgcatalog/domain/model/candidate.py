"""Candidate records produced by per-source mappers.

Candidate records are immutable observations. The mapping layer creates them
once per fetch and the reconciliation core only ever reads them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from orgcatalog.domain.model.enums import OrganisationField, Source

if TYPE_CHECKING:
    from collections.abc import Mapping


type SourceOrigin = str | Source


@dataclass(frozen=True, slots=True, kw_only=True)
class Location:
    country: str
    address: str | None = None
    region: str | None = None


type FieldValue = str | date | Location


def is_present(value: object) -> bool:
    """A field is unset when it is ``None`` or a blank string."""

    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass(frozen=True, slots=True, kw_only=True)
class CandidateRecord:
    """One organisation observation from one source."""

    record_id: str
    source_origin: SourceOrigin
    name: str
    alternative_names: tuple[str, ...] = ()
    identifiers: Mapping[str, str] = field(default_factory=dict["str", "str"])
    fields: Mapping[OrganisationField, FieldValue] = field(
        default_factory=dict["OrganisationField", "FieldValue"]
    )
    confidence: float = 1.0
    retrieved_at: datetime | None = None
    last_updated: datetime | None = None
    url: str | None = None

    def value_for(self, organisation_field: OrganisationField) -> FieldValue | None:
        value = self.fields.get(organisation_field)
        return value if is_present(value) else None

    @property
    def completeness(self) -> float:
        """Fraction of mergeable fields that carry a value."""

        populated = sum(1 for member in OrganisationField if self.value_for(member) is not None)
        return populated / len(OrganisationField)

    @property
    def updated_at(self) -> datetime | None:
        return as_utc(self.last_updated or self.retrieved_at)
