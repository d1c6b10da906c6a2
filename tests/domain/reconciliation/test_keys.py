from __future__ import annotations

from orgcatalog.domain.reconciliation import identity_keys, normalize_name
from tests.helpers.records import make_record


def test_normalize_name_lowercases_strips_punctuation_and_collapses_whitespace() -> None:
    assert normalize_name("  Dept. of   Health & Social Care ") == "dept of health social care"
    assert normalize_name("HM Courts & Tribunals Service") == "hm courts tribunals service"


def test_normalize_name_treats_dashes_and_slashes_as_separators() -> None:
    assert normalize_name("Health-Care/Social") == "health care social"


def test_normalize_name_returns_none_for_blank_or_punctuation_only() -> None:
    assert normalize_name(None) is None
    assert normalize_name("   ") is None
    assert normalize_name("...") is None


def test_normalize_name_applies_unicode_folding() -> None:
    assert normalize_name("ＭＥＴ Office") == "met office"
    assert normalize_name("Straße") == normalize_name("STRASSE")


def test_identity_keys_include_name_and_scoped_identifiers() -> None:
    record = make_record(
        "Met Office",
        identifiers={"ons_code": "001", "gov_uk_slug": "met-office"},
    )

    assert identity_keys(record) == (
        ("name", "met office"),
        ("identifier", "gov_uk_slug", "met-office"),
        ("identifier", "ons_code", "001"),
    )


def test_identity_keys_do_not_collide_across_schemes() -> None:
    left = make_record("Alpha", identifiers={"ons_code": "001"})
    right = make_record("Beta", identifiers={"gias_urn": "001"})

    assert set(identity_keys(left)).isdisjoint(identity_keys(right))


def test_identity_keys_drop_blank_identifier_values() -> None:
    record = make_record("Alpha", identifiers={"ons_code": "  ", "": "42"})

    assert identity_keys(record) == (("name", "alpha"),)


def test_identity_keys_normalize_scheme_case_and_value_whitespace() -> None:
    left = make_record("Alpha", identifiers={"ONS Code": " 001 "})
    right = make_record("Beta", identifiers={"ons code": "001"})

    assert set(identity_keys(left)) & set(identity_keys(right)) == {
        ("identifier", "ons code", "001")
    }


def test_identity_keys_are_deterministic() -> None:
    record = make_record("Alpha", identifiers={"b": "2", "a": "1"})

    assert identity_keys(record) == identity_keys(record)
