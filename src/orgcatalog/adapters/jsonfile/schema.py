"""Pydantic models for candidate record files."""

from __future__ import annotations

from datetime import date, datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field

from orgcatalog.domain.model import CandidateRecord, Location, OrganisationField, Source


class CandidateBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class LocationPayload(CandidateBaseModel):
    country: str
    address: str | None = None
    region: str | None = None


class CandidatePayload(CandidateBaseModel):
    record_id: str
    source: str
    name: str | None = None
    alternative_names: list[str] = Field(default_factory=list["str"])
    identifiers: dict[str, str] = Field(default_factory=dict["str", "str"])
    confidence: float = 1.0
    retrieved_at: datetime | None = None
    last_updated: datetime | None = None
    url: str | None = None

    type: str | None = None
    classification: str | None = None
    status: str | None = None
    parent_organisation: str | None = None
    controlling_unit: str | None = None
    establishment_date: date | None = None
    dissolution_date: date | None = None
    location: LocationPayload | None = None
    description: str | None = None
    website: str | None = None

    def to_candidate(self) -> CandidateRecord:
        fields: dict[OrganisationField, str | date | Location] = {}
        for organisation_field in OrganisationField:
            value = getattr(self, organisation_field.value)
            if value is None:
                continue
            if isinstance(value, LocationPayload):
                value = Location(country=value.country, address=value.address, region=value.region)
            fields[organisation_field] = value
        return CandidateRecord(
            record_id=self.record_id,
            source_origin=_source(self.source),
            name=self.name or "",
            alternative_names=tuple(self.alternative_names),
            identifiers=dict(self.identifiers),
            fields=fields,
            confidence=self.confidence,
            retrieved_at=self.retrieved_at,
            last_updated=self.last_updated,
            url=self.url,
        )


def _source(value: str) -> Source | str:
    try:
        return Source(value)
    except ValueError:
        return value
