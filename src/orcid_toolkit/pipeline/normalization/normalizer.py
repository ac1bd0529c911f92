"""Record normalization: affiliations, organization ids and display names."""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from ...entities.core import (
    ORCID_SCHEME,
    ExtractedIdentifier,
    NameAffiliation,
    NameIdentifier,
    NormalizedName,
    PersonName,
    Record,
)
from .resolver import OrgResolver


class NormalizationError(ValueError):
    """Raised when a record cannot be turned into a :class:`NormalizedName`."""


def extract_affiliations(record: Record, resolver: OrgResolver) -> List[NameAffiliation]:
    """Return one affiliation per active employment, in document order."""

    affiliations: List[NameAffiliation] = []
    for employment in record.iter_employments():
        if not employment.is_active:
            continue
        organization = employment.organization
        affiliations.append(
            NameAffiliation(id=resolver.resolve(organization.identifier), name=organization.name)
        )
    return affiliations


def deduplicate_affiliations(affiliations: Iterable[NameAffiliation]) -> List[NameAffiliation]:
    """Drop repeated affiliations, keeping first occurrences.

    Identified entries are unique per organization id; unidentified entries
    are unique per display name.
    """

    seen_ids: set[str] = set()
    by_id: List[NameAffiliation] = []
    for affiliation in affiliations:
        if affiliation.id is not None:
            if affiliation.id in seen_ids:
                continue
            seen_ids.add(affiliation.id)
        by_id.append(affiliation)

    seen_names: set[str] = set()
    result: List[NameAffiliation] = []
    for affiliation in by_id:
        if affiliation.id is None:
            if affiliation.name in seen_names:
                continue
            seen_names.add(affiliation.name)
        result.append(affiliation)
    return result


def _present(value: Optional[str]) -> bool:
    return value is not None and bool(value.strip())


def derive_name(person_name: PersonName, *, orcid: str = "") -> Tuple[str, str, str]:
    """Return ``(given_name, family_name, display_name)``.

    Blank values count as absent. A single usable value becomes both the
    family and display name.
    """

    given, family = person_name.given_names, person_name.family_name
    if _present(given) and _present(family):
        return given, family, f"{family}, {given}"
    if _present(family):
        return "", family, family
    if _present(given):
        return "", given, given
    raise NormalizationError(f"cannot determine person name for {orcid or '<unknown>'}")


def normalize_record(record: Record, resolver: OrgResolver) -> NormalizedName:
    affiliations = deduplicate_affiliations(extract_affiliations(record, resolver))
    given_name, family_name, display_name = derive_name(record.person.name, orcid=record.orcid)
    return NormalizedName(
        given_name=given_name,
        family_name=family_name,
        name=display_name,
        identifiers=[NameIdentifier(scheme=ORCID_SCHEME, identifier=record.orcid)],
        affiliations=affiliations or None,
    )


def collect_org_ids(record: Record) -> List[ExtractedIdentifier]:
    """Return the distinct raw organization identifiers of *record*.

    Every employment counts, active or not.
    """

    found = {}
    for employment in record.iter_employments():
        org_identifier = employment.organization.identifier
        if org_identifier is None:
            continue
        key = ExtractedIdentifier(scheme=org_identifier.source, identifier=org_identifier.identifier)
        found.setdefault(key, None)
    return list(found)


__all__ = [
    "NormalizationError",
    "extract_affiliations",
    "deduplicate_affiliations",
    "derive_name",
    "normalize_record",
    "collect_org_ids",
]
