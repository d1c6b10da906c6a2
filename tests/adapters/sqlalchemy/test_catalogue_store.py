from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from orgcatalog.adapters.sqlalchemy import (
    SqlCatalogueStore,
    canonical_record_table,
    canonical_source_table,
    conflict_table,
    merge_audit_table,
)
from orgcatalog.domain.model import OrganisationField, Source
from orgcatalog.domain.reconciliation import ReconciliationResult, reconcile
from tests.helpers.records import at, make_record

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def _result() -> ReconciliationResult:
    return reconcile(
        [
            make_record(
                "Met Office",
                record_id="1",
                source=Source.GOV_UK_API,
                fields={OrganisationField.STATUS: "active"},
                retrieved_at=at(2024),
            ),
            make_record(
                "Met Office",
                record_id="2",
                source=Source.ONS_INSTITUTIONAL,
                fields={OrganisationField.STATUS: "inactive"},
            ),
            make_record("Forestry Commission", record_id="3"),
        ],
        merge_date=at(2025, 6, 1),
    )


def test_write_result_persists_catalogue(sqlite_engine: Engine) -> None:
    store = SqlCatalogueStore(sqlite_engine)
    result = _result()

    met_office_id = result.canonical_records[0].canonical_id

    store.write_result(result)

    assert store.count_records() == 2
    with sqlite_engine.connect() as connection:
        names = connection.execute(
            select(canonical_record_table.c.name).order_by(canonical_record_table.c.position)
        ).scalars()
        assert list(names) == ["Met Office", "Forestry Commission"]
        sources = connection.execute(
            select(canonical_source_table.c.source, canonical_source_table.c.retrieved_at)
            .where(canonical_source_table.c.canonical_id == met_office_id)
            .order_by(canonical_source_table.c.position)
        ).all()
        assert [row.source for row in sources] == ["gov_uk_api", "ons_institutional_unit"]
        assert sources[0].retrieved_at == at(2024)
        conflict = connection.execute(select(conflict_table)).one()
        assert conflict.field == "status"
        assert [value["value"] for value in conflict.observed_values] == ["active", "inactive"]
        audit_methods = connection.execute(select(merge_audit_table.c.merge_method)).scalars()
        assert set(audit_methods) == {"exact", None}


def test_write_result_replaces_previous_run(sqlite_engine: Engine) -> None:
    store = SqlCatalogueStore(sqlite_engine)
    store.write_result(_result())

    store.write_result(reconcile([make_record("Ofsted", record_id="9")]))

    assert store.count_records() == 1
    with sqlite_engine.connect() as connection:
        assert connection.execute(select(conflict_table)).all() == []
        (audit,) = connection.execute(select(merge_audit_table)).all()
        assert audit.original_ids == ["9"]
        assert audit.merge_method is None
