# tests/test_countries.py

"""
Tests for country code / name reconciliation.
"""

from core.countries import (
    codes_to_names,
    country_variants,
    expand_variants,
    is_covered,
    names_to_codes,
    to_code,
    to_name,
)


def test_expand_variants_name_adds_code():
    assert expand_variants(["Brazil"]) == {"Brazil", "BR"}


def test_expand_variants_code_adds_name():
    assert expand_variants(["IN"]) == {"IN", "India"}


def test_expand_variants_unmapped_passes_through():
    assert expand_variants(["Atlantis"]) == {"Atlantis"}


def test_expand_variants_skips_empty_entries():
    assert expand_variants(["", None, "Russia"]) == {"Russia", "RU"}
    assert expand_variants([]) == set()


def test_is_covered_across_forms():
    assert is_covered("BR", ["Brazil"])
    assert is_covered("Brazil", ["BR"])
    assert not is_covered("BR", ["Russia"])


def test_is_covered_missing_country_is_never_covered():
    assert not is_covered(None, ["Brazil"])
    assert not is_covered("", ["Brazil"])


def test_is_covered_with_no_assignment():
    assert not is_covered("BR", [])


def test_single_conversions():
    assert to_code("South Africa") == "ZA"
    assert to_name("AE") == "UAE"
    assert to_code("Narnia") == "Narnia"
    assert to_name("XX") == "XX"


def test_list_conversions_drop_blanks():
    assert names_to_codes(["India", "", "China"]) == ["IN", "CN"]
    assert codes_to_names(["RU", "ZZ"]) == ["Russia", "ZZ"]


def test_country_variants_single():
    assert country_variants("Egypt") == {"Egypt", "EG"}
