"""Domain entities for the ORCID toolkit."""

from .core import (
    NAME_SCHEMA,
    ORCID_SCHEME,
    ROW_VERSION_ID,
    Activities,
    AffiliationGroup,
    Employment,
    Employments,
    ExtractedIdentifier,
    Identifier,
    NameAffiliation,
    NameIdentifier,
    NormalizedName,
    Organization,
    OrgIdentifier,
    OutputRow,
    Person,
    PersonName,
    Record,
)

__all__ = [
    "NAME_SCHEMA",
    "ORCID_SCHEME",
    "ROW_VERSION_ID",
    "Activities",
    "AffiliationGroup",
    "Employment",
    "Employments",
    "ExtractedIdentifier",
    "Identifier",
    "NameAffiliation",
    "NameIdentifier",
    "NormalizedName",
    "Organization",
    "OrgIdentifier",
    "OutputRow",
    "Person",
    "PersonName",
    "Record",
]
