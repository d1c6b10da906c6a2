from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from orgcatalog.app import reconcile_catalogue
from orgcatalog.config import (
    ConfigurationError,
    configure_logging,
    get_output_config,
    get_reconciliation_config,
)
from orgcatalog.domain.model import ConflictResolutionStrategy

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile public-sector organisation records")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log cluster and fuzzy-link details",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser(
        "reconcile",
        help="Merge candidate record files into one canonical catalogue",
    )
    reconcile.add_argument(
        "inputs",
        nargs="+",
        type=Path,
        help="Candidate record files (JSON array, or JSON Lines for .jsonl/.ndjson)",
    )
    reconcile.add_argument(
        "--output",
        type=Path,
        help="Catalogue JSON path (defaults to ORGCATALOG_OUTPUT or dist/orgs.json)",
    )
    reconcile.add_argument(
        "--database-uri",
        type=str,
        help="Optional SQLAlchemy database URI to store the catalogue in",
    )
    reconcile.add_argument(
        "--threshold",
        type=float,
        help="Name similarity threshold in [0, 1] for fuzzy matches (defaults to config)",
    )
    reconcile.add_argument(
        "--strategy",
        choices=[strategy.value for strategy in ConflictResolutionStrategy],
        help="Conflict resolution strategy (defaults to config)",
    )
    reconcile.add_argument(
        "--no-provenance",
        action="store_true",
        help="Do not record which source supplied each field",
    )
    reconcile.add_argument(
        "--min-completeness",
        type=float,
        help="Completeness below which a canonical record requires review",
    )
    reconcile.add_argument(
        "--workers",
        type=int,
        help="Thread count for similarity scoring",
    )
    reconcile.add_argument(
        "--compact",
        action="store_true",
        help="Write the catalogue without indentation",
    )

    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.verbose:
            configure_logging(level=logging.DEBUG, force=True)
        config = get_reconciliation_config(
            similarity_threshold=parsed_args.threshold,
            conflict_resolution_strategy=parsed_args.strategy,
            track_provenance=False if parsed_args.no_provenance else None,
            min_completeness=parsed_args.min_completeness,
            max_workers=parsed_args.workers,
        )
        output = get_output_config(
            output_path=parsed_args.output,
            pretty_print=not parsed_args.compact,
            database_uri=parsed_args.database_uri,
        )
        missing = [str(path) for path in parsed_args.inputs if not path.is_file()]
        if missing:
            raise ValueError(f"Input files not found: {', '.join(missing)}")  # noqa: TRY301
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        result = reconcile_catalogue(parsed_args.inputs, config=config, output=output)
        log.info(
            "Catalogue written to %s: %s organisations, %s requiring review",
            output.output_path,
            result.deduplicated_count,
            sum(1 for record in result.canonical_records if record.requires_review),
        )
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
