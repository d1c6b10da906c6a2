"""SQLAlchemy Core tables for the persisted catalogue."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    TypeDecorator,
    Uuid,
)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

canonical_record_table = Table(
    "canonical_record",
    metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("position", Integer, nullable=False),
    Column("name", String(512), nullable=False, index=True),
    Column("alternative_names", JSON, nullable=False),
    Column("identifiers", JSON, nullable=False),
    Column("fields", JSON, nullable=False),
    Column("field_provenance", JSON, nullable=False),
    Column("confidence", Float, nullable=False),
    Column("completeness", Float, nullable=False),
    Column("requires_review", Boolean, nullable=False),
    Column("review_reasons", JSON, nullable=False),
    Column("last_updated", UTCDateTime(), nullable=True),
)

canonical_source_table = Table(
    "canonical_source",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "canonical_id",
        UUIDColumnType,
        ForeignKey("canonical_record.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("position", Integer, nullable=False),
    Column("source", String(128), nullable=False, index=True),
    Column("record_ids", JSON, nullable=False),
    Column("confidence", Float, nullable=False),
    Column("retrieved_at", UTCDateTime(), nullable=True),
    Column("url", String(2048), nullable=True),
)

conflict_table = Table(
    "conflict",
    metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column(
        "canonical_id",
        UUIDColumnType,
        ForeignKey("canonical_record.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("field", String(64), nullable=False),
    Column("severity", String(16), nullable=False),
    Column("requires_manual_review", Boolean, nullable=False),
    Column("observed_values", JSON, nullable=False),
    Column("resolution", JSON, nullable=True),
)

merge_audit_table = Table(
    "merge_audit",
    metadata,
    Column(
        "canonical_id",
        UUIDColumnType,
        ForeignKey("canonical_record.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("original_ids", JSON, nullable=False),
    Column("merge_method", String(16), nullable=True),
    Column("merge_date", UTCDateTime(), nullable=False),
    Column("strategy", String(32), nullable=False),
    Column("exact_links", Integer, nullable=False),
    Column("fuzzy_links", Integer, nullable=False),
)
