"""Load candidate records from JSON or JSON Lines files."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from .schema import CandidatePayload

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from pathlib import Path

    from orgcatalog.domain.model import CandidateRecord


log = getLogger(__name__)

JSON_LINES_SUFFIXES = frozenset({".jsonl", ".ndjson"})


class CandidateFileError(ValueError):
    """Raised when a candidate file cannot be decoded into candidate records."""

    def __init__(self, path: Path, message: str, *, line: int | None = None) -> None:
        self.path = path
        self.line = line
        location = f"{path}:{line}" if line is not None else str(path)
        super().__init__(f"{location}: {message}")


def read_candidates(path: Path) -> list[CandidateRecord]:
    """Parse one file; ``.jsonl``/``.ndjson`` are read line by line, others as a JSON array."""

    if path.suffix.lower() in JSON_LINES_SUFFIXES:
        records = list(_read_json_lines(path))
    else:
        records = list(_read_json_array(path))
    log.info("Loaded %s candidate records from %s", len(records), path)
    return records


def read_candidate_files(paths: Iterable[Path]) -> list[CandidateRecord]:
    """Concatenate the records of ``paths`` in the given order."""

    records: list[CandidateRecord] = []
    for path in paths:
        records.extend(read_candidates(path))
    return records


def _read_json_array(path: Path) -> Iterator[CandidateRecord]:
    try:
        payload: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CandidateFileError(path, f"invalid JSON ({exc.msg})", line=exc.lineno) from exc
    if not isinstance(payload, list):
        raise CandidateFileError(path, "expected a JSON array of candidate records")
    for index, item in enumerate(payload):
        yield _to_candidate(path, item, label=f"record {index}")


def _read_json_lines(path: Path) -> Iterator[CandidateRecord]:
    with path.open(encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            try:
                item: Any = json.loads(line)
            except json.JSONDecodeError as exc:
                raise CandidateFileError(
                    path, f"invalid JSON ({exc.msg})", line=line_number
                ) from exc
            yield _to_candidate(path, item, label=f"line {line_number}", line=line_number)


def _to_candidate(
    path: Path,
    item: Any,
    *,
    label: str,
    line: int | None = None,
) -> CandidateRecord:
    try:
        return CandidatePayload.model_validate(item).to_candidate()
    except ValidationError as exc:
        raise CandidateFileError(path, f"invalid {label}: {exc}", line=line) from exc
