# core/countries.py

"""
Country code <-> country name reconciliation.

Country fields are stored either as a display name ("Brazil") or as a
two-letter code ("BR"). Any comparison between a principal's assigned
countries and a record's country field must go through expand_variants().
Unmapped identifiers pass through unchanged.
"""

from typing import Iterable, List, Optional, Set


COUNTRY_CODE_TO_NAME = {
    "BR": "Brazil",
    "RU": "Russia",
    "IN": "India",
    "CN": "China",
    "ZA": "South Africa",
    "EG": "Egypt",
    "ET": "Ethiopia",
    "IR": "Iran",
    "AE": "UAE",
    "US": "USA",
    "GB": "UK",
    "DE": "Germany",
    "FR": "France",
    "JP": "Japan",
    "CA": "Canada",
    "AU": "Australia",
}

COUNTRY_NAME_TO_CODE = {name: code for code, name in COUNTRY_CODE_TO_NAME.items()}


def to_code(country: str) -> str:
    return COUNTRY_NAME_TO_CODE.get(country, country)


def to_name(country: str) -> str:
    return COUNTRY_CODE_TO_NAME.get(country, country)


def names_to_codes(names: Iterable[str]) -> List[str]:
    return [to_code(n) for n in names if n]


def codes_to_names(codes: Iterable[str]) -> List[str]:
    return [to_name(c) for c in codes if c]


def country_variants(country: str) -> Set[str]:
    """Both forms of a single country, or just itself when unmapped."""
    if country in COUNTRY_NAME_TO_CODE:
        return {country, COUNTRY_NAME_TO_CODE[country]}
    if country in COUNTRY_CODE_TO_NAME:
        return {country, COUNTRY_CODE_TO_NAME[country]}
    return {country}


def expand_variants(countries: Iterable[str]) -> Set[str]:
    variants: Set[str] = set()
    for country in countries or ():
        if country:
            variants.update(country_variants(country))
    return variants


def is_covered(field_value: Optional[str], assigned: Iterable[str]) -> bool:
    """
    True iff the record's country field is one of the assigned countries
    (after variant expansion). A record with no country is never covered.
    """
    if not field_value:
        return False
    return field_value in expand_variants(assigned)
