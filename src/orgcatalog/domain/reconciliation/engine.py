"""Orchestrator for the reconciliation subsystem.

The engine composes stage interfaces but does not prescribe concrete
implementations; the defaults are the in-process stages of this package.
Reconciliation is a pure function of the input batch and configuration: no
intermediate state is persisted and nothing is returned when the partition
invariant fails.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from .clustering import assert_partition, build_clusters
from .conflicts import detect_conflicts
from .contracts import ReconciliationConfig, SkippedRecord, SkipReason
from .merge import canonical_id_for, merge_cluster

if TYPE_CHECKING:
    from collections.abc import Iterable

    from orgcatalog.domain.model import CandidateRecord, CanonicalRecord, Conflict, MergeAudit

    from .clustering import BuildClusters
    from .conflicts import DetectConflicts
    from .merge import MergeCluster


log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationResult:
    """Canonical records, conflicts and audit trail of one run."""

    canonical_records: tuple[CanonicalRecord, ...]
    conflicts: tuple[Conflict, ...]
    audits: tuple[MergeAudit, ...]
    skipped: tuple[SkippedRecord, ...]
    original_count: int
    config: ReconciliationConfig

    @property
    def deduplicated_count(self) -> int:
        return len(self.canonical_records)

    @property
    def accepted_count(self) -> int:
        return self.original_count - len(self.skipped)

    @property
    def duplicates_merged(self) -> int:
        return self.accepted_count - self.deduplicated_count


def validate_candidate(record: CandidateRecord) -> SkipReason | None:
    """Return why ``record`` cannot enter the pipeline, or ``None``."""

    if not record.record_id or not record.record_id.strip():
        return SkipReason.BLANK_RECORD_ID
    if not record.name or not record.name.strip():
        return SkipReason.BLANK_NAME
    if not 0.0 <= record.confidence <= 1.0:
        return SkipReason.CONFIDENCE_OUT_OF_RANGE
    return None


def partition_candidates(
    records: Iterable[CandidateRecord],
) -> tuple[list[CandidateRecord], list[SkippedRecord]]:
    """Split input into well-formed records and skip diagnostics.

    Record ids are scoped by source: the same native id from two sources
    names two different records.
    """

    accepted: list[CandidateRecord] = []
    skipped: list[SkippedRecord] = []
    seen_ids: set[tuple[str, str]] = set()
    for position, record in enumerate(records):
        reason = validate_candidate(record)
        scoped_id = (str(record.source_origin), record.record_id)
        if reason is None and scoped_id in seen_ids:
            reason = SkipReason.DUPLICATE_RECORD_ID
        if reason is not None:
            skipped.append(
                SkippedRecord(
                    record_id=record.record_id,
                    source=record.source_origin,
                    reason=reason,
                    position=position,
                )
            )
            log.warning(
                "Skipping candidate record id=%r source=%s at position %s: %s",
                record.record_id,
                record.source_origin,
                position,
                reason.value,
            )
            continue
        seen_ids.add(scoped_id)
        accepted.append(record)
    return accepted, skipped


@dataclass(slots=True)
class ReconciliationEngine:
    """Run full reconciliation from candidate records to canonical records."""

    config: ReconciliationConfig = field(default_factory=ReconciliationConfig)
    build: BuildClusters = build_clusters
    detect: DetectConflicts = detect_conflicts
    merge: MergeCluster = merge_cluster

    def reconcile(
        self,
        records: Iterable[CandidateRecord],
        *,
        merge_date: datetime | None = None,
    ) -> ReconciliationResult:
        """Run all reconciliation stages for ``records``."""

        batch = tuple(records)
        accepted, skipped = partition_candidates(batch)
        effective_merge_date = merge_date or datetime.now(tz=UTC)

        clusters = self.build(
            accepted,
            threshold=self.config.similarity_threshold,
            max_workers=self.config.max_workers,
        )
        assert_partition(accepted, clusters)

        canonical_records: list[CanonicalRecord] = []
        conflicts: list[Conflict] = []
        for cluster in clusters:
            cluster_conflicts = self.detect(
                cluster,
                canonical_id=canonical_id_for(cluster),
                strategy=self.config.conflict_resolution_strategy,
            )
            canonical_records.append(
                self.merge(
                    cluster,
                    conflicts=cluster_conflicts,
                    config=self.config,
                    merge_date=effective_merge_date,
                )
            )
            conflicts.extend(cluster_conflicts)

        result = ReconciliationResult(
            canonical_records=tuple(canonical_records),
            conflicts=tuple(conflicts),
            audits=tuple(record.merge_audit for record in canonical_records),
            skipped=tuple(skipped),
            original_count=len(batch),
            config=self.config,
        )
        log.info(
            "Reconciled %s candidate records into %s canonical records: "
            "merged=%s, conflicts=%s, skipped=%s, strategy=%s",
            result.original_count,
            result.deduplicated_count,
            result.duplicates_merged,
            len(result.conflicts),
            len(result.skipped),
            self.config.conflict_resolution_strategy.value,
        )
        return result


def reconcile(
    records: Iterable[CandidateRecord],
    config: ReconciliationConfig | None = None,
    *,
    merge_date: datetime | None = None,
) -> ReconciliationResult:
    """Reconcile ``records`` with ``config`` (defaults when omitted)."""

    engine = ReconciliationEngine(config=config or ReconciliationConfig())
    return engine.reconcile(records, merge_date=merge_date)
