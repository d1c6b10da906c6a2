"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Source(StrEnum):
    """Known producers of candidate records.

    The reconciliation core only compares sources for equality, so adapters may
    also pass plain strings for sources that are not listed here.
    """

    GOV_UK_API = "gov_uk_api"
    ONS_INSTITUTIONAL = "ons_institutional_unit"
    ONS_NON_INSTITUTIONAL = "ons_non_institutional_unit"
    GIAS = "gias"
    NI_SCHOOLS = "ni_schools"
    COLLEGES = "colleges"
    NHS_PROVIDER_DIRECTORY = "nhs_provider_directory"
    NHS_SCOTLAND = "nhs_scotland"
    NI_HEALTH = "ni_health"
    POLICE = "police"
    FIRE = "fire"
    COURTS = "courts"
    DEFRA_UK_AIR = "defra_uk_air"
    DEVOLVED_ADMIN = "devolved_admin"
    GROUNDWORK = "groundwork"
    NHS_CHARITIES = "nhs_charities"


class OrganisationField(StrEnum):
    """Fixed set of mergeable organisation attributes."""

    TYPE = "type"
    CLASSIFICATION = "classification"
    STATUS = "status"
    PARENT_ORGANISATION = "parent_organisation"
    CONTROLLING_UNIT = "controlling_unit"
    ESTABLISHMENT_DATE = "establishment_date"
    DISSOLUTION_DATE = "dissolution_date"
    LOCATION = "location"
    DESCRIPTION = "description"
    WEBSITE = "website"


class ConflictSeverity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MergeMethod(StrEnum):
    """Strongest link observed inside a cluster."""

    EXACT = "exact"
    FUZZY = "fuzzy"


class ConflictResolutionStrategy(StrEnum):
    NEWEST = "newest"
    HIGHEST_CONFIDENCE = "highest_confidence"
    MOST_COMPLETE = "most_complete"
    MANUAL = "manual"
