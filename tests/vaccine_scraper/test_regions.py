"""Tests for the static region lookup."""

import pytest

from vaccine_scraper.regions import REGIONS, get_region, region_filename


@pytest.mark.parametrize(
    "country, region",
    [
        ("Kenya", "Africa"),
        ("kenya", "Africa"),
        ("Japan", "Asia"),
        ("France", "Europe"),
        ("Brazil", "Americas"),
        ("Fiji", "Oceania"),
        ("Papua New Guinea", "Oceania"),
        ("Guinea", "Africa"),
        ("Korea, South", "Asia"),
    ],
)
def test_get_region_exact_matches(country, region):
    assert get_region(country) == region


def test_get_region_substring_match():
    assert get_region("Congo (Democratic Republic)") == "Africa"


def test_get_region_defaults_to_other():
    assert get_region("Atlantis") == "Other"
    assert get_region("") == "Other"
    assert get_region(None) == "Other"


def test_regions_do_not_overlap():
    names = [name for countries in REGIONS.values() for name in countries]
    assert len(names) == len(set(names))


def test_region_filename():
    assert region_filename("Americas") == "chrome-data-americas.json"
    assert region_filename("Other") == "chrome-data-other.json"
