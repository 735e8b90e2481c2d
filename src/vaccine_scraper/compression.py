"""Compact record format for size-bounded client storage.

Display copies (``d``, ``p``) are truncated; the full ``description`` and
``prevention`` text travels alongside them so a consumer can expand an entry
without another download.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .models import AdditionalSection, CountryRecord, MalariaInfo, RiskEntry, VaccineEntry

VACCINE_DESCRIPTION_CHARS = 200
VACCINE_PREVENTION_CHARS = 100
VACCINE_RISK_FACTORS = 3
RISK_DESCRIPTION_CHARS = 150
RISK_PREVENTION_CHARS = 80


def _truncate(text: Optional[str], limit: int) -> Optional[str]:
    return text[:limit] if text else None


def compress_vaccine(entry: VaccineEntry) -> Dict[str, Any]:
    return {
        "n": entry.name,
        "d": _truncate(entry.description, VACCINE_DESCRIPTION_CHARS) or "",
        "p": _truncate(entry.prevention, VACCINE_PREVENTION_CHARS),
        "r": list(entry.risk_factors[:VACCINE_RISK_FACTORS]) if entry.risk_factors else None,
        "countrySpecific": entry.country_specific or None,
        "vaccination": entry.vaccination or None,
        "additionalSections": (
            [section.to_dict() for section in entry.additional_sections]
            if entry.additional_sections
            else None
        ),
        "description": entry.description or None,
        "prevention": entry.prevention or None,
    }


def compress_risk(entry: RiskEntry) -> Dict[str, Any]:
    return {
        "n": entry.name,
        "t": entry.type,
        "d": _truncate(entry.description, RISK_DESCRIPTION_CHARS) or "",
        "p": _truncate(entry.prevention, RISK_PREVENTION_CHARS),
        "description": entry.description or None,
        "prevention": entry.prevention or None,
    }


def compress_country_record(record: CountryRecord) -> Dict[str, Any]:
    """Compact form of a record; malaria data is kept verbatim."""
    return {
        "m": [compress_vaccine(entry) for entry in record.most_travellers],
        "s": [compress_vaccine(entry) for entry in record.some_travellers],
        "r": [compress_risk(entry) for entry in record.other_risks],
        "malaria": record.malaria.to_dict() if record.malaria else None,
        "u": record.last_updated,
        "l": record.source_url,
    }


def _full_text(item: Dict[str, Any], full_key: str, display_key: str) -> Optional[str]:
    value = item.get(full_key)
    if value is not None:
        return value
    return item.get(display_key)


def decompress_vaccine(item: Dict[str, Any]) -> VaccineEntry:
    sections = item.get("additionalSections")
    return VaccineEntry(
        name=item.get("n", ""),
        description=_full_text(item, "description", "d") or "",
        prevention=_full_text(item, "prevention", "p"),
        risk_factors=list(item["r"]) if item.get("r") else None,
        country_specific=item.get("countrySpecific"),
        vaccination=item.get("vaccination"),
        additional_sections=[AdditionalSection.from_dict(section) for section in sections] if sections else None,
    )


def decompress_risk(item: Dict[str, Any]) -> RiskEntry:
    return RiskEntry(
        name=item.get("n", ""),
        type=item.get("t") or "health_risk",
        description=_full_text(item, "description", "d") or "",
        prevention=_full_text(item, "prevention", "p"),
    )


def decompress_country_record(data: Dict[str, Any]) -> CountryRecord:
    """Rebuild a record from its compact form using the full-text fields.

    Risk factors beyond the stored three are not recoverable.
    """
    malaria = data.get("malaria")
    most: List[VaccineEntry] = [decompress_vaccine(item) for item in data.get("m") or []]
    some: List[VaccineEntry] = [decompress_vaccine(item) for item in data.get("s") or []]
    return CountryRecord(
        source_url=data.get("l", ""),
        last_updated=data.get("u", ""),
        most_travellers=most,
        some_travellers=some,
        other_risks=[decompress_risk(item) for item in data.get("r") or []],
        malaria=MalariaInfo.from_dict(malaria) if malaria else None,
    )
