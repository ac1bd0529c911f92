"""Tests for record normalization and affiliation deduplication."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import employment_xml, record_xml
from orcid_toolkit.entities import NAME_SCHEMA, ExtractedIdentifier, NameAffiliation, PersonName
from orcid_toolkit.pipeline.normalization import (
    NormalizationError,
    OrgResolver,
    collect_org_ids,
    decode_record,
    deduplicate_affiliations,
    derive_name,
    normalize_record,
)


@pytest.fixture()
def resolver() -> OrgResolver:
    return OrgResolver.from_rows([("FUNDREF", "10.13039/501100001665", "01234abc")])


def test_sample_record_normalizes_to_expected_payload(alex_xml: str) -> None:
    name = normalize_record(decode_record(alex_xml), OrgResolver())

    assert name.to_payload() == {
        "$schema": NAME_SCHEMA,
        "given_name": "Alex",
        "family_name": "Ioannidis",
        "name": "Ioannidis, Alex",
        "identifiers": [{"scheme": "orcid", "identifier": "0000-0002-5082-6404"}],
        "affiliations": [
            {"id": "01ggx4157", "name": "European Organization for Nuclear Research"}
        ],
    }
    assert list(name.to_payload())[0] == "$schema"


def test_ended_employments_are_excluded(resolver: OrgResolver) -> None:
    record = decode_record(
        record_xml(
            employments=[
                employment_xml("Old Place", identifier="https://ror.org/0old", ended=True),
                employment_xml("New Place", identifier="https://ror.org/0new"),
            ]
        )
    )

    name = normalize_record(record, resolver)

    assert [(a.id, a.name) for a in name.affiliations] == [("0new", "New Place")]


def test_no_active_employment_omits_affiliations(resolver: OrgResolver) -> None:
    record = decode_record(
        record_xml(employments=[employment_xml("Old Place", ended=True)])
    )

    name = normalize_record(record, resolver)

    assert name.affiliations is None
    assert "affiliations" not in name.to_payload()


def test_same_canonical_id_collapses_to_first_seen(resolver: OrgResolver) -> None:
    record = decode_record(
        record_xml(
            employments=[
                employment_xml("CERN", identifier="https://ror.org/01ggx4157"),
                employment_xml("Conseil Europeen", identifier="01ggx4157"),
            ]
        )
    )

    name = normalize_record(record, resolver)

    assert [(a.id, a.name) for a in name.affiliations] == [("01ggx4157", "CERN")]


def test_fundref_mapping_resolves_canonical_id(resolver: OrgResolver) -> None:
    record = decode_record(
        record_xml(
            employments=[
                employment_xml(
                    "Funder",
                    identifier="http://dx.doi.org/10.13039/501100001665",
                    source="FUNDREF",
                )
            ]
        )
    )

    name = normalize_record(record, resolver)

    assert name.affiliations[0].id == "01234abc"


def test_unresolved_identifier_keeps_name_only(resolver: OrgResolver) -> None:
    record = decode_record(
        record_xml(employments=[employment_xml("Somewhere", identifier="123", source="GRID")])
    )

    name = normalize_record(record, resolver)

    assert name.to_payload()["affiliations"] == [{"name": "Somewhere"}]


def test_deduplicate_two_passes_preserve_order() -> None:
    affiliations = [
        NameAffiliation(id="a", name="Alpha"),
        NameAffiliation(id=None, name="Lab"),
        NameAffiliation(id="a", name="Alpha Again"),
        NameAffiliation(id="b", name="Lab"),
        NameAffiliation(id=None, name="Lab"),
        NameAffiliation(id=None, name="Other"),
    ]

    result = deduplicate_affiliations(affiliations)

    assert [(a.id, a.name) for a in result] == [
        ("a", "Alpha"),
        (None, "Lab"),
        ("b", "Lab"),
        (None, "Other"),
    ]


def test_deduplication_is_independent_per_record(resolver: OrgResolver) -> None:
    shared = employment_xml("Shared", identifier="https://ror.org/0shared")
    documents = [
        record_xml(f"0000-0000-0000-{index:04d}", employments=[shared, shared])
        for index in range(32)
    ]

    def transform(document: str):
        return normalize_record(decode_record(document), resolver)

    with ThreadPoolExecutor(max_workers=8) as pool:
        names = list(pool.map(transform, documents))

    assert all(len(name.affiliations) == 1 for name in names)
    assert {name.orcid for name in names} == {f"0000-0000-0000-{i:04d}" for i in range(32)}


@pytest.mark.parametrize(
    ("given", "family", "expected"),
    [
        ("Alex", "Ioannidis", ("Alex", "Ioannidis", "Ioannidis, Alex")),
        (None, "Curie", ("", "Curie", "Curie")),
        ("Plato", None, ("", "Plato", "Plato")),
        ("   ", "Curie", ("", "Curie", "Curie")),
        ("Plato", "", ("", "Plato", "Plato")),
    ],
)
def test_derive_name(given, family, expected) -> None:
    assert derive_name(PersonName(given_names=given, family_name=family)) == expected


@pytest.mark.parametrize(("given", "family"), [(None, None), ("  ", None), ("", "\t")])
def test_derive_name_requires_a_usable_value(given, family) -> None:
    with pytest.raises(NormalizationError):
        derive_name(PersonName(given_names=given, family_name=family), orcid="0000-0000-0000-0000")


def test_collect_org_ids_reports_raw_values_including_past() -> None:
    record = decode_record(
        record_xml(
            employments=[
                employment_xml("A", identifier="https://ror.org/0aaa"),
                employment_xml("B", identifier="http://dx.doi.org/10.13039/1", source="FUNDREF", ended=True),
                employment_xml("A again", identifier="https://ror.org/0aaa"),
                employment_xml("No id"),
            ]
        )
    )

    assert collect_org_ids(record) == [
        ExtractedIdentifier(scheme="ROR", identifier="https://ror.org/0aaa"),
        ExtractedIdentifier(scheme="FUNDREF", identifier="http://dx.doi.org/10.13039/1"),
    ]
