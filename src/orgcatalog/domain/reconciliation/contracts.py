"""Shared reconciliation contract components.

This module intentionally holds only:
- identity-key aliases and run configuration
- cluster and diagnostic dataclasses passed between stages
- the error types raised by the reconciliation core
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from orgcatalog.domain.model import ConflictResolutionStrategy

if TYPE_CHECKING:
    from orgcatalog.domain.model import CandidateRecord, MergeMethod, SourceOrigin


type IdentityKey = tuple[Hashable, ...]

DEFAULT_SIMILARITY_THRESHOLD: Final[float] = 0.8
DEFAULT_CONFLICT_RESOLUTION_STRATEGY: Final[ConflictResolutionStrategy] = (
    ConflictResolutionStrategy.MOST_COMPLETE
)
DEFAULT_MIN_COMPLETENESS: Final[float] = 0.6


class ReconciliationError(RuntimeError):
    """Base class for errors that terminate a reconciliation run."""


class PartitionInvariantError(ReconciliationError):
    """Raised when clustering does not produce a true partition of the input."""

    def __init__(
        self,
        *,
        duplicated: tuple[str, ...] = (),
        missing: tuple[str, ...] = (),
    ) -> None:
        self.duplicated = duplicated
        self.missing = missing
        super().__init__(
            "Clusters do not partition the input records: "
            f"duplicated={list(duplicated)}, missing={list(missing)}"
        )


class InvalidReconciliationConfigError(ValueError):
    """Raised when a reconciliation configuration value is out of range."""


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationConfig:
    """Settings consumed by one reconciliation run, validated on construction."""

    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    conflict_resolution_strategy: ConflictResolutionStrategy = (
        DEFAULT_CONFLICT_RESOLUTION_STRATEGY
    )
    track_provenance: bool = True
    min_completeness: float = DEFAULT_MIN_COMPLETENESS
    max_workers: int | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise InvalidReconciliationConfigError(
                f"similarity_threshold must be within [0, 1], got {self.similarity_threshold!r}"
            )
        if not 0.0 <= self.min_completeness <= 1.0:
            raise InvalidReconciliationConfigError(
                f"min_completeness must be within [0, 1], got {self.min_completeness!r}"
            )
        if self.max_workers is not None and self.max_workers < 1:
            raise InvalidReconciliationConfigError(
                f"max_workers must be positive, got {self.max_workers!r}"
            )
        try:
            strategy = ConflictResolutionStrategy(self.conflict_resolution_strategy)
        except ValueError as exc:
            allowed = ", ".join(member.value for member in ConflictResolutionStrategy)
            raise InvalidReconciliationConfigError(
                f"Unknown conflict resolution strategy {self.conflict_resolution_strategy!r} "
                f"(expected one of: {allowed})"
            ) from exc
        object.__setattr__(self, "conflict_resolution_strategy", strategy)


@dataclass(frozen=True, slots=True, kw_only=True)
class Cluster:
    """Records believed to denote one organisation, in input order."""

    members: tuple[CandidateRecord, ...]
    positions: tuple[int, ...]
    merge_method: MergeMethod | None = None
    exact_links: int = 0
    fuzzy_links: int = 0

    def __post_init__(self) -> None:
        if not self.members:
            raise ValueError("Cluster must include at least one record")
        if len(self.members) != len(self.positions):
            raise ValueError("Cluster members and positions must align")

    @property
    def record_ids(self) -> tuple[str, ...]:
        return tuple(member.record_id for member in self.members)

    @property
    def is_singleton(self) -> bool:
        return len(self.members) == 1


class SkipReason(StrEnum):
    """Why a candidate record was excluded before clustering."""

    BLANK_NAME = "blank_name"
    BLANK_RECORD_ID = "blank_record_id"
    CONFIDENCE_OUT_OF_RANGE = "confidence_out_of_range"
    DUPLICATE_RECORD_ID = "duplicate_record_id"


@dataclass(frozen=True, slots=True, kw_only=True)
class SkippedRecord:
    """Diagnostic emitted for a malformed candidate record."""

    record_id: str
    source: SourceOrigin
    reason: SkipReason
    position: int
