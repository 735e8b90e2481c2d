"""Static country-to-region lookup used to partition the output."""

from __future__ import annotations

from typing import Dict, Tuple

DEFAULT_REGION = "Other"

REGIONS: Dict[str, Tuple[str, ...]] = {
    "Africa": (
        "Algeria", "Angola", "Benin", "Botswana", "Burkina Faso", "Burundi", "Cameroon",
        "Cape Verde", "Central African Republic", "Chad", "Comoros", "Congo",
        "Democratic Republic of the Congo", "Djibouti", "Egypt", "Equatorial Guinea", "Eritrea",
        "Eswatini", "Ethiopia", "Gabon", "Gambia", "Ghana", "Guinea", "Guinea-Bissau", "Kenya",
        "Lesotho", "Liberia", "Libya", "Madagascar", "Malawi", "Mali", "Mauritania", "Mauritius",
        "Morocco", "Mozambique", "Namibia", "Niger", "Nigeria", "Rwanda", "Sao Tome and Principe",
        "Senegal", "Seychelles", "Sierra Leone", "Somalia", "South Africa", "South Sudan", "Sudan",
        "Tanzania", "Togo", "Tunisia", "Uganda", "Zambia", "Zimbabwe",
    ),
    "Asia": (
        "Afghanistan", "Bangladesh", "Bhutan", "Brunei", "Cambodia", "China", "India", "Indonesia",
        "Iran", "Iraq", "Japan", "Jordan", "Kazakhstan", "Korea, North", "Korea, South", "Kuwait",
        "Kyrgyzstan", "Laos", "Lebanon", "Malaysia", "Maldives", "Mongolia", "Myanmar", "Nepal",
        "Oman", "Pakistan", "Palestinian Territories", "Philippines", "Qatar", "Saudi Arabia",
        "Singapore", "Sri Lanka", "Syria", "Taiwan", "Tajikistan", "Thailand", "Turkey",
        "Turkmenistan", "United Arab Emirates", "Uzbekistan", "Vietnam", "Yemen",
    ),
    "Europe": (
        "Albania", "Andorra", "Austria", "Belarus", "Belgium", "Bosnia and Herzegovina", "Bulgaria",
        "Croatia", "Cyprus", "Czech Republic", "Denmark", "Estonia", "Finland", "France", "Georgia",
        "Germany", "Greece", "Hungary", "Iceland", "Ireland", "Israel", "Italy", "Kosovo", "Latvia",
        "Liechtenstein", "Lithuania", "Luxembourg", "Malta", "Moldova", "Monaco", "Montenegro",
        "Netherlands", "North Macedonia", "Norway", "Poland", "Portugal", "Romania", "Russia",
        "San Marino", "Serbia", "Slovakia", "Slovenia", "Spain", "Sweden", "Switzerland", "Ukraine",
        "United Kingdom",
    ),
    "Americas": (
        "Antigua and Barbuda", "Argentina", "Bahamas", "Barbados", "Belize", "Bolivia", "Brazil",
        "Canada", "Chile", "Colombia", "Costa Rica", "Cuba", "Dominica", "Dominican Republic",
        "Ecuador", "El Salvador", "Grenada", "Guatemala", "Guyana", "Haiti", "Honduras", "Jamaica",
        "Mexico", "Nicaragua", "Panama", "Paraguay", "Peru", "St Kitts and Nevis", "St Lucia",
        "St Vincent and the Grenadines", "Suriname", "Trinidad and Tobago", "USA", "Uruguay",
        "Venezuela",
    ),
    "Oceania": (
        "Australia", "Fiji", "Kiribati", "Marshall Islands", "Micronesia", "Nauru", "New Zealand",
        "Palau", "Papua New Guinea", "Samoa", "Solomon Islands", "Tonga", "Tuvalu", "Vanuatu",
    ),
}


def get_region(country_name: str) -> str:
    """Region for a country name, ``"Other"`` when no table entry matches.

    An exact name match anywhere in the table wins; otherwise the first
    region with an entry containing, or contained in, the name is used.
    """
    name = (country_name or "").strip()
    if not name:
        return DEFAULT_REGION

    lowered = name.lower()
    for region, countries in REGIONS.items():
        if any(country.lower() == lowered for country in countries):
            return region

    for region, countries in REGIONS.items():
        if any(name in country or country in name for country in countries):
            return region
    return DEFAULT_REGION


def region_filename(region: str) -> str:
    """Partition file name for a region."""
    return f"chrome-data-{region.lower()}.json"
