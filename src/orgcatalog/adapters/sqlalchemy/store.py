"""Persist reconciliation results with SQLAlchemy Core."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic_core import to_jsonable_python
from sqlalchemy import create_engine, delete, func, select

from .tables import (
    canonical_record_table,
    canonical_source_table,
    conflict_table,
    merge_audit_table,
    metadata,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine

    from orgcatalog.domain.model import CanonicalRecord, Conflict
    from orgcatalog.domain.reconciliation import ReconciliationResult


log = getLogger(__name__)


@dataclass(slots=True)
class SqlCatalogueStore:
    """Catalogue tables on one engine; every write replaces the previous run."""

    engine: Engine

    @classmethod
    def from_uri(cls, database_uri: str) -> SqlCatalogueStore:
        return cls(create_engine(database_uri, future=True))

    def create_tables(self) -> None:
        metadata.create_all(self.engine)

    def write_result(self, result: ReconciliationResult) -> None:
        """Replace the stored catalogue with ``result`` in one transaction."""

        self.create_tables()
        with self.engine.begin() as connection:
            _clear(connection)
            for position, record in enumerate(result.canonical_records):
                _insert_record(connection, record, position=position)
            for conflict in result.conflicts:
                _insert_conflict(connection, conflict)
        log.info(
            "Stored %s canonical records and %s conflicts",
            len(result.canonical_records),
            len(result.conflicts),
        )

    def count_records(self) -> int:
        with self.engine.connect() as connection:
            return connection.execute(
                select(func.count()).select_from(canonical_record_table)
            ).scalar_one()


def _clear(connection: Connection) -> None:
    for table in (merge_audit_table, conflict_table, canonical_source_table):
        connection.execute(delete(table))
    connection.execute(delete(canonical_record_table))


def _insert_record(connection: Connection, record: CanonicalRecord, *, position: int) -> None:
    quality = record.data_quality
    connection.execute(
        canonical_record_table.insert().values(
            id=record.canonical_id,
            position=position,
            name=record.name,
            alternative_names=list(record.alternative_names),
            identifiers=to_jsonable_python(record.identifiers),
            fields=to_jsonable_python({str(name): value for name, value in record.fields.items()}),
            field_provenance=to_jsonable_python(record.field_provenance),
            confidence=record.confidence,
            completeness=quality.completeness,
            requires_review=quality.requires_review,
            review_reasons=list(quality.review_reasons),
            last_updated=record.last_updated,
        )
    )
    source_rows: list[dict[str, Any]] = [
        {
            "canonical_id": record.canonical_id,
            "position": index,
            "source": str(reference.source),
            "record_ids": list(reference.record_ids),
            "confidence": reference.confidence,
            "retrieved_at": reference.retrieved_at,
            "url": reference.url,
        }
        for index, reference in enumerate(record.sources)
    ]
    if source_rows:
        connection.execute(canonical_source_table.insert(), source_rows)
    audit = record.merge_audit
    connection.execute(
        merge_audit_table.insert().values(
            canonical_id=audit.canonical_id,
            original_ids=list(audit.original_ids),
            merge_method=None if audit.merge_method is None else audit.merge_method.value,
            merge_date=audit.merge_date,
            strategy=audit.strategy.value,
            exact_links=audit.exact_links,
            fuzzy_links=audit.fuzzy_links,
        )
    )


def _insert_conflict(connection: Connection, conflict: Conflict) -> None:
    connection.execute(
        conflict_table.insert().values(
            id=conflict.conflict_id,
            canonical_id=conflict.canonical_id,
            field=conflict.field.value,
            severity=conflict.severity.value,
            requires_manual_review=conflict.requires_manual_review,
            observed_values=to_jsonable_python(
                [
                    {"value": value.value, "sources": value.sources, "record_ids": value.record_ids}
                    for value in conflict.values
                ]
            ),
            resolution=None
            if conflict.resolution is None
            else to_jsonable_python(
                {
                    "value": conflict.resolution.value,
                    "source": conflict.resolution.source,
                    "confidence": conflict.resolution.confidence,
                    "reasoning": conflict.resolution.reasoning,
                }
            ),
        )
    )
