"""JSON file adapters for candidate input and catalogue output."""

from __future__ import annotations

from .reader import CandidateFileError, read_candidate_files, read_candidates
from .schema import CandidatePayload, LocationPayload
from .writer import DEFAULT_SOURCE_LABELS, CatalogueWriter, write_catalogue

__all__ = [
    "DEFAULT_SOURCE_LABELS",
    "CandidateFileError",
    "CandidatePayload",
    "CatalogueWriter",
    "LocationPayload",
    "read_candidate_files",
    "read_candidates",
    "write_catalogue",
]
