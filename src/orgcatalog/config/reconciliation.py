"""Reconciliation run settings loaded from the environment."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from orgcatalog.domain.reconciliation import (
    InvalidReconciliationConfigError,
    ReconciliationConfig,
)

from .env import optional_env_bool, optional_env_float, optional_env_int, optional_env_str
from .errors import InvalidConfigurationError

if TYPE_CHECKING:
    from orgcatalog.domain.model import ConflictResolutionStrategy

SIMILARITY_THRESHOLD_ENV = "ORGCATALOG_SIMILARITY_THRESHOLD"
CONFLICT_STRATEGY_ENV = "ORGCATALOG_CONFLICT_STRATEGY"
TRACK_PROVENANCE_ENV = "ORGCATALOG_TRACK_PROVENANCE"
MIN_COMPLETENESS_ENV = "ORGCATALOG_MIN_COMPLETENESS"
MAX_WORKERS_ENV = "ORGCATALOG_MAX_WORKERS"


def get_reconciliation_config(
    *,
    similarity_threshold: float | None = None,
    conflict_resolution_strategy: ConflictResolutionStrategy | str | None = None,
    track_provenance: bool | None = None,
    min_completeness: float | None = None,
    max_workers: int | None = None,
) -> ReconciliationConfig:
    """Build the run configuration; explicit arguments win over the environment."""

    values: dict[str, Any] = {
        "similarity_threshold": _first(
            similarity_threshold, optional_env_float(SIMILARITY_THRESHOLD_ENV)
        ),
        "conflict_resolution_strategy": _first(
            conflict_resolution_strategy, optional_env_str(CONFLICT_STRATEGY_ENV)
        ),
        "track_provenance": _first(track_provenance, optional_env_bool(TRACK_PROVENANCE_ENV)),
        "min_completeness": _first(min_completeness, optional_env_float(MIN_COMPLETENESS_ENV)),
        "max_workers": _first(max_workers, optional_env_int(MAX_WORKERS_ENV)),
    }
    try:
        return ReconciliationConfig(
            **{name: value for name, value in values.items() if value is not None}
        )
    except InvalidReconciliationConfigError as exc:
        raise InvalidConfigurationError(str(exc)) from exc


def _first[T](*candidates: T | None) -> T | None:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
