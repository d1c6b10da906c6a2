"""Cross-source reconciliation core.

Flow for one batch of candidate records:
1) validate input and collect skip diagnostics
2) extract identity keys and score name similarity
3) build clusters (union-find over exact and fuzzy links)
4) detect field conflicts per cluster
5) merge each cluster into a canonical record with provenance
"""

from __future__ import annotations

from .clustering import UnionFind, assert_partition, build_clusters
from .conflicts import detect_conflicts, severity_for
from .contracts import (
    Cluster,
    IdentityKey,
    InvalidReconciliationConfigError,
    PartitionInvariantError,
    ReconciliationConfig,
    ReconciliationError,
    SkippedRecord,
    SkipReason,
)
from .engine import ReconciliationEngine, ReconciliationResult, reconcile, validate_candidate
from .keys import identity_keys, normalize_name
from .merge import canonical_id_for, merge_cluster
from .similarity import name_similarity, record_similarity

__all__ = [
    "Cluster",
    "IdentityKey",
    "InvalidReconciliationConfigError",
    "PartitionInvariantError",
    "ReconciliationConfig",
    "ReconciliationEngine",
    "ReconciliationError",
    "ReconciliationResult",
    "SkipReason",
    "SkippedRecord",
    "UnionFind",
    "assert_partition",
    "build_clusters",
    "canonical_id_for",
    "detect_conflicts",
    "identity_keys",
    "merge_cluster",
    "name_similarity",
    "normalize_name",
    "reconcile",
    "record_similarity",
    "severity_for",
    "validate_candidate",
]
