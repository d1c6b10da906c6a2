"""SQLAlchemy adapter package for the persisted catalogue."""

from __future__ import annotations

from .store import SqlCatalogueStore
from .tables import (
    canonical_record_table,
    canonical_source_table,
    conflict_table,
    merge_audit_table,
    metadata,
)

__all__ = [
    "SqlCatalogueStore",
    "canonical_record_table",
    "canonical_source_table",
    "conflict_table",
    "merge_audit_table",
    "metadata",
]
