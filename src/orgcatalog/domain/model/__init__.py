"""Public domain model surface."""

from __future__ import annotations

from orgcatalog.domain.model.candidate import (
    CandidateRecord,
    FieldValue,
    Location,
    SourceOrigin,
    as_utc,
    is_present,
)
from orgcatalog.domain.model.canonical import (
    CanonicalRecord,
    DataQuality,
    MergeAudit,
    SourceReference,
)
from orgcatalog.domain.model.conflict import Conflict, ConflictResolution, ConflictValue
from orgcatalog.domain.model.enums import (
    ConflictResolutionStrategy,
    ConflictSeverity,
    MergeMethod,
    OrganisationField,
    Source,
)

__all__ = [
    "CandidateRecord",
    "CanonicalRecord",
    "Conflict",
    "ConflictResolution",
    "ConflictResolutionStrategy",
    "ConflictSeverity",
    "ConflictValue",
    "DataQuality",
    "FieldValue",
    "Location",
    "MergeAudit",
    "MergeMethod",
    "OrganisationField",
    "Source",
    "SourceOrigin",
    "SourceReference",
    "as_utc",
    "is_present",
]
