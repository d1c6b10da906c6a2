from __future__ import annotations

import pytest

from orgcatalog.domain.model import ConflictResolutionStrategy
from orgcatalog.domain.reconciliation import (
    Cluster,
    InvalidReconciliationConfigError,
    ReconciliationConfig,
)


def test_default_config_values() -> None:
    config = ReconciliationConfig()

    assert config.similarity_threshold == 0.8
    assert config.conflict_resolution_strategy is ConflictResolutionStrategy.MOST_COMPLETE
    assert config.track_provenance is True
    assert config.min_completeness == 0.6
    assert config.max_workers is None


def test_strategy_strings_are_coerced() -> None:
    config = ReconciliationConfig(conflict_resolution_strategy="newest")  # type: ignore[arg-type]

    assert config.conflict_resolution_strategy is ConflictResolutionStrategy.NEWEST


@pytest.mark.parametrize(
    "kwargs",
    [
        {"similarity_threshold": 1.5},
        {"similarity_threshold": -0.1},
        {"min_completeness": 2.0},
        {"max_workers": 0},
        {"conflict_resolution_strategy": "loudest"},
    ],
)
def test_invalid_config_values_are_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(InvalidReconciliationConfigError):
        ReconciliationConfig(**kwargs)  # type: ignore[arg-type]


def test_unknown_strategy_message_lists_allowed_values() -> None:
    with pytest.raises(InvalidReconciliationConfigError, match="most_complete"):
        ReconciliationConfig(conflict_resolution_strategy="loudest")  # type: ignore[arg-type]


def test_cluster_rejects_empty_members() -> None:
    with pytest.raises(ValueError, match="at least one"):
        Cluster(members=(), positions=())
