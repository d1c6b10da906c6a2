"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from orgcatalog.adapters.jsonfile import read_candidate_files, write_catalogue
from orgcatalog.adapters.sqlalchemy import SqlCatalogueStore
from orgcatalog.config import OutputConfig, get_output_config, get_reconciliation_config
from orgcatalog.domain.reconciliation import ReconciliationEngine

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from datetime import datetime
    from pathlib import Path

    from orgcatalog.domain.reconciliation import ReconciliationConfig, ReconciliationResult


log = getLogger(__name__)


def reconcile_catalogue(
    input_paths: Sequence[Path],
    *,
    config: ReconciliationConfig | None = None,
    output: OutputConfig | None = None,
    source_labels: Mapping[str, str] | None = None,
    merge_date: datetime | None = None,
) -> ReconciliationResult:
    """Read candidate files, reconcile them and write the catalogue outputs."""

    effective_config = config or get_reconciliation_config()
    effective_output = output or get_output_config()
    log.info(
        "Starting reconciliation: inputs=%s, threshold=%s, strategy=%s, output=%s",
        len(input_paths),
        effective_config.similarity_threshold,
        effective_config.conflict_resolution_strategy.value,
        effective_output.output_path,
    )

    records = read_candidate_files(input_paths)
    result = ReconciliationEngine(config=effective_config).reconcile(
        records, merge_date=merge_date
    )

    write_catalogue(
        result,
        effective_output.output_path,
        pretty_print=effective_output.pretty_print,
        source_labels=source_labels,
    )
    if effective_output.database_uri:
        SqlCatalogueStore.from_uri(effective_output.database_uri).write_result(result)

    log.info(
        f"Finished reconciliation: canonical={result.deduplicated_count}, "
        f"merged={result.duplicates_merged}, conflicts={len(result.conflicts)}, "
        f"skipped={len(result.skipped)}"
    )
    return result
