"""Write a reconciliation result as a JSON catalogue."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Final

from pydantic_core import to_json

from orgcatalog.domain.model import OrganisationField, Source

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from orgcatalog.domain.model import CanonicalRecord, Conflict, MergeAudit, SourceOrigin
    from orgcatalog.domain.reconciliation import ReconciliationResult, SkippedRecord


log = getLogger(__name__)

DEFAULT_SOURCE_LABELS: Final[Mapping[str, str]] = MappingProxyType(
    {
        Source.GOV_UK_API: "GOV.UK",
        Source.ONS_INSTITUTIONAL: "ONS Classification Guide",
        Source.ONS_NON_INSTITUTIONAL: "ONS Classification Guide",
        Source.GIAS: "Get Information About Schools",
        Source.NI_SCHOOLS: "OpenDataNI Schools",
        Source.COLLEGES: "Association of Colleges",
        Source.NHS_PROVIDER_DIRECTORY: "NHS England Provider Directory",
        Source.NHS_SCOTLAND: "NHS Scotland",
        Source.NI_HEALTH: "NI Health & Social Care",
        Source.POLICE: "Police.uk",
        Source.FIRE: "National Fire Chiefs Council",
        Source.COURTS: "HM Courts & Tribunals Service",
        Source.DEFRA_UK_AIR: "DEFRA UK-AIR",
        Source.DEVOLVED_ADMIN: "Devolved Administrations",
        Source.GROUNDWORK: "Groundwork Trusts",
        Source.NHS_CHARITIES: "NHS Charities Together",
    }
)


@dataclass(frozen=True, slots=True)
class CatalogueWriter:
    """Serialise reconciliation results; labels are resolved through ``source_labels``."""

    pretty_print: bool = True
    source_labels: Mapping[str, str] = field(default=DEFAULT_SOURCE_LABELS)

    def label_for(self, source: SourceOrigin) -> str:
        return self.source_labels.get(str(source), str(source))

    def write(
        self,
        result: ReconciliationResult,
        path: Path,
        *,
        processed_at: datetime | None = None,
    ) -> Path:
        document = self.build_document(result, processed_at=processed_at)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(to_json(document, indent=2 if self.pretty_print else None))
        log.info(
            "Wrote %s organisations and %s conflicts to %s",
            len(result.canonical_records),
            len(result.conflicts),
            path,
        )
        return path

    def build_document(
        self,
        result: ReconciliationResult,
        *,
        processed_at: datetime | None = None,
    ) -> dict[str, Any]:
        """Plain ``dict`` representation of the catalogue."""

        stamp = processed_at or datetime.now(tz=UTC)
        return {
            "organisations": [self._organisation(record) for record in result.canonical_records],
            "conflicts": [_conflict(conflict) for conflict in result.conflicts],
            "audit": [_audit(audit) for audit in result.audits],
            "skipped": [_skipped(skipped) for skipped in result.skipped],
            "metadata": _metadata(result, processed_at=stamp),
            "summary": self._summary(result, generated=stamp),
        }

    def _organisation(self, record: CanonicalRecord) -> dict[str, Any]:
        return {
            "id": record.canonical_id,
            "name": record.name,
            "alternative_names": record.alternative_names,
            "identifiers": record.identifiers,
            **{str(name): value for name, value in record.fields.items()},
            "sources": [
                {
                    "source": reference.source,
                    "label": self.label_for(reference.source),
                    "record_ids": reference.record_ids,
                    "confidence": reference.confidence,
                    "retrieved_at": reference.retrieved_at,
                    "url": reference.url,
                }
                for reference in record.sources
            ],
            "field_provenance": record.field_provenance,
            "confidence": record.confidence,
            "data_quality": {
                "completeness": record.data_quality.completeness,
                "has_conflicts": record.data_quality.has_conflicts,
                "conflict_fields": record.data_quality.conflict_fields,
                "requires_review": record.data_quality.requires_review,
                "review_reasons": record.data_quality.review_reasons,
            },
            "last_updated": record.last_updated,
        }

    def _summary(self, result: ReconciliationResult, *, generated: datetime) -> dict[str, Any]:
        records = result.canonical_records
        by_type = Counter(_field_label(record, OrganisationField.TYPE) for record in records)
        by_status = Counter(_field_label(record, OrganisationField.STATUS) for record in records)
        by_source: Counter[str] = Counter()
        for record in records:
            by_source.update({self.label_for(reference.source) for reference in record.sources})
        completeness = (
            sum(record.data_quality.completeness for record in records) / len(records)
            if records
            else 0.0
        )
        return {
            "total_organisations": len(records),
            "organisations_by_type": dict(sorted(by_type.items())),
            "organisations_by_status": dict(sorted(by_status.items())),
            "data_quality": {
                "average_completeness": round(completeness, 4),
                "organisations_requiring_review": sum(
                    1 for record in records if record.requires_review
                ),
                "organisations_with_conflicts": sum(
                    1 for record in records if record.data_quality.has_conflicts
                ),
            },
            "sources": dict(sorted(by_source.items())),
            "generated": generated,
        }


def write_catalogue(
    result: ReconciliationResult,
    path: Path,
    *,
    pretty_print: bool = True,
    source_labels: Mapping[str, str] | None = None,
) -> Path:
    writer = CatalogueWriter(
        pretty_print=pretty_print,
        source_labels=DEFAULT_SOURCE_LABELS if source_labels is None else source_labels,
    )
    return writer.write(result, path)


def _field_label(record: CanonicalRecord, organisation_field: OrganisationField) -> str:
    value = record.value_for(organisation_field)
    return str(value) if value is not None else "unknown"


def _conflict(conflict: Conflict) -> dict[str, Any]:
    resolution = conflict.resolution
    return {
        "id": conflict.conflict_id,
        "organisation_id": conflict.canonical_id,
        "field": conflict.field,
        "severity": conflict.severity,
        "requires_manual_review": conflict.requires_manual_review,
        "values": [
            {"value": value.value, "sources": value.sources, "record_ids": value.record_ids}
            for value in conflict.values
        ],
        "resolution": None
        if resolution is None
        else {
            "value": resolution.value,
            "source": resolution.source,
            "confidence": resolution.confidence,
            "reasoning": resolution.reasoning,
        },
    }


def _audit(audit: MergeAudit) -> dict[str, Any]:
    return {
        "canonical_id": audit.canonical_id,
        "original_ids": audit.original_ids,
        "merge_method": audit.merge_method,
        "merge_date": audit.merge_date,
        "strategy": audit.strategy,
        "exact_links": audit.exact_links,
        "fuzzy_links": audit.fuzzy_links,
    }


def _skipped(skipped: SkippedRecord) -> dict[str, Any]:
    return {
        "record_id": skipped.record_id,
        "source": skipped.source,
        "reason": skipped.reason,
        "position": skipped.position,
    }


def _metadata(result: ReconciliationResult, *, processed_at: datetime) -> dict[str, Any]:
    config = result.config
    return {
        "processed_at": processed_at,
        "configuration": {
            "similarity_threshold": config.similarity_threshold,
            "conflict_resolution_strategy": config.conflict_resolution_strategy,
            "track_provenance": config.track_provenance,
            "min_completeness": config.min_completeness,
        },
        "statistics": {
            "original_count": result.original_count,
            "accepted_count": result.accepted_count,
            "deduplicated_count": result.deduplicated_count,
            "duplicates_merged": result.duplicates_merged,
            "conflicts_detected": len(result.conflicts),
            "skipped_count": len(result.skipped),
        },
    }
