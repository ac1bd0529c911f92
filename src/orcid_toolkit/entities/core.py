"""Core domain entities used throughout the ORCID toolkit.

The ``Record`` family mirrors the subset of an ORCID record summary document
the toolkit reads. Field aliases cover the element names used by the
different dump schema versions; unknown elements are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

NAME_SCHEMA = "local://names/name-v1.0.0.json"
ORCID_SCHEME = "orcid"
ROW_VERSION_ID = 1


class _DocumentModel(BaseModel):
    """Base for models decoded from XML-derived payloads.

    An element without children or text arrives as ``""``; for structured
    elements that means "present with every field at its default".
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _empty_element(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return {}
        return value


class Identifier(_DocumentModel):
    """Canonical ORCID identifier of a record."""

    uri: str
    path: str


class PersonName(_DocumentModel):
    given_names: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("given-names", "given_names")
    )
    family_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("family-name", "family_name")
    )


class Person(_DocumentModel):
    name: PersonName


class OrgIdentifier(_DocumentModel):
    """Disambiguated organization reference (scheme + identifier)."""

    identifier: str = Field(
        validation_alias=AliasChoices("disambiguated-organization-identifier", "identifier")
    )
    source: str = Field(validation_alias=AliasChoices("disambiguation-source", "source"))


class Organization(_DocumentModel):
    name: str
    identifier: Optional[OrgIdentifier] = Field(
        default=None,
        validation_alias=AliasChoices("disambiguated-organization", "identifier"),
    )


class Employment(_DocumentModel):
    """Single employment summary; the presence of an end date marks it as past."""

    end: Optional[Any] = Field(default=None, validation_alias=AliasChoices("end-date", "end"))
    organization: Organization

    @property
    def is_active(self) -> bool:
        return self.end is None


class AffiliationGroup(_DocumentModel):
    employment: Employment = Field(
        validation_alias=AliasChoices("employment-summary", "employment")
    )


class Employments(_DocumentModel):
    groups: Optional[List[AffiliationGroup]] = Field(
        default=None,
        validation_alias=AliasChoices("affiliation-group", "employment", "groups"),
    )

    @field_validator("groups", mode="before")
    @classmethod
    def _single_group_as_list(cls, value: Any) -> Any:
        if isinstance(value, (dict, str)):
            return [value]
        return value


class Activities(_DocumentModel):
    employments: Employments


class Record(_DocumentModel):
    """Decoded ORCID record summary."""

    identifier: Identifier = Field(
        validation_alias=AliasChoices("orcid-identifier", "identifier")
    )
    person: Person
    activities: Activities = Field(
        validation_alias=AliasChoices("activities-summary", "activities")
    )

    @property
    def orcid(self) -> str:
        return self.identifier.path

    def iter_employments(self):
        """Yield employment summaries in document order."""

        for group in self.activities.employments.groups or ():
            yield group.employment


class ExtractedIdentifier(BaseModel):
    """Organization identifier value object, hashable over both fields."""

    model_config = ConfigDict(frozen=True)

    scheme: str
    identifier: str

    def to_json(self) -> str:
        return self.model_dump_json()


class NameIdentifier(BaseModel):
    scheme: str
    identifier: str


class NameAffiliation(BaseModel):
    """Affiliation entry; ``id`` is the canonical organization id when resolved."""

    id: Optional[str] = None
    name: str


class NormalizedName(BaseModel):
    """Compact researcher identity emitted by the toolkit."""

    model_config = ConfigDict(populate_by_name=True)

    schema_: str = Field(default=NAME_SCHEMA, alias="$schema")
    given_name: str
    family_name: str
    name: str
    identifiers: List[NameIdentifier]
    affiliations: Optional[List[NameAffiliation]] = None

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def orcid(self) -> str:
        for identifier in self.identifiers:
            if identifier.scheme == ORCID_SCHEME:
                return identifier.identifier
        raise ValueError("name carries no orcid identifier")

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-ready mapping, omitting absent optional fields."""

        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class OutputRow:
    """One row of the tabular bulk-load format."""

    COLUMNS = ("created", "updated", "id", "json", "version_id", "pid")

    created: str
    updated: str
    id: str
    json: str
    pid: str
    version_id: int = ROW_VERSION_ID

    def as_tuple(self) -> Tuple[str, str, str, str, int, str]:
        return (self.created, self.updated, self.id, self.json, self.version_id, self.pid)


__all__ = [
    "NAME_SCHEMA",
    "ORCID_SCHEME",
    "ROW_VERSION_ID",
    "Identifier",
    "PersonName",
    "Person",
    "OrgIdentifier",
    "Organization",
    "Employment",
    "AffiliationGroup",
    "Employments",
    "Activities",
    "Record",
    "ExtractedIdentifier",
    "NameIdentifier",
    "NameAffiliation",
    "NormalizedName",
    "OutputRow",
]
