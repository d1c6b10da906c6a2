from __future__ import annotations

import json
from typing import TYPE_CHECKING

from orgcatalog.adapters.jsonfile import DEFAULT_SOURCE_LABELS, CatalogueWriter, write_catalogue
from orgcatalog.domain.model import OrganisationField, Source
from orgcatalog.domain.reconciliation import ReconciliationResult, reconcile
from tests.helpers.records import FULL_FIELDS, at, make_record

if TYPE_CHECKING:
    from pathlib import Path

PROCESSED_AT = at(2025, 6, 1)


def _result() -> ReconciliationResult:
    return reconcile(
        [
            make_record(
                "Met Office",
                record_id="1",
                source=Source.GOV_UK_API,
                fields={**FULL_FIELDS, OrganisationField.STATUS: "active"},
            ),
            make_record(
                "Met Office",
                record_id="2",
                source=Source.ONS_INSTITUTIONAL,
                fields={OrganisationField.STATUS: "inactive"},
            ),
            make_record("Forestry Commission", record_id="3", source="local_register"),
            make_record(" ", record_id="4"),
        ],
        merge_date=PROCESSED_AT,
    )


def test_document_sections_and_summary() -> None:
    document = CatalogueWriter().build_document(_result(), processed_at=PROCESSED_AT)

    assert list(document) == [
        "organisations",
        "conflicts",
        "audit",
        "skipped",
        "metadata",
        "summary",
    ]
    assert [organisation["name"] for organisation in document["organisations"]] == [
        "Met Office",
        "Forestry Commission",
    ]
    summary = document["summary"]
    assert summary["total_organisations"] == 2
    assert summary["organisations_by_status"] == {"active": 1, "unknown": 1}
    assert summary["data_quality"]["organisations_with_conflicts"] == 1
    assert summary["data_quality"]["organisations_requiring_review"] == 2
    assert summary["sources"] == {
        "GOV.UK": 1,
        "ONS Classification Guide": 1,
        "local_register": 1,
    }
    statistics = document["metadata"]["statistics"]
    assert statistics["original_count"] == 4
    assert statistics["duplicates_merged"] == 1
    assert statistics["skipped_count"] == 1


def test_injected_source_labels_replace_defaults() -> None:
    writer = CatalogueWriter(source_labels={"local_register": "Local Register"})

    document = writer.build_document(_result(), processed_at=PROCESSED_AT)

    assert document["summary"]["sources"] == {
        "Local Register": 1,
        "gov_uk_api": 1,
        "ons_institutional_unit": 1,
    }


def test_default_source_labels_cover_every_known_source() -> None:
    assert set(DEFAULT_SOURCE_LABELS) == set(Source)


def test_write_catalogue_serialises_json(tmp_path: Path) -> None:
    path = tmp_path / "dist" / "orgs.json"

    written = write_catalogue(_result(), path)

    payload = json.loads(written.read_text())
    organisation = payload["organisations"][0]
    assert organisation["status"] == "active"
    assert organisation["sources"][0]["label"] == "GOV.UK"
    assert organisation["field_provenance"]["status"] == "gov_uk_api"
    (conflict,) = payload["conflicts"]
    assert conflict["field"] == "status"
    assert conflict["severity"] == "high"
    assert conflict["organisation_id"] == organisation["id"]
    assert payload["skipped"][0]["reason"] == "blank_name"
    assert payload["audit"][0]["merge_method"] == "exact"
    assert payload["metadata"]["configuration"]["conflict_resolution_strategy"] == "most_complete"


def test_compact_output_has_no_indentation(tmp_path: Path) -> None:
    path = tmp_path / "orgs.json"

    CatalogueWriter(pretty_print=False).write(_result(), path, processed_at=PROCESSED_AT)

    assert "\n" not in path.read_text()
