"""Data models for the vaccine advisory scraper."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class CountryListing:
    """One country as enumerated by the directory page."""

    name: str
    url: str
    slug: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "url": self.url, "slug": self.slug}


@dataclass
class AdditionalSection:
    """A named sub-section that is not prevention, vaccination or country specific."""

    heading: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"heading": self.heading, "content": self.content}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AdditionalSection:
        return cls(heading=data.get("heading", ""), content=data.get("content", ""))


@dataclass
class VaccineEntry:
    """A vaccine recommendation extracted from a travellers section.

    ``name`` is a short cleaned label (2-30 characters) and ``description``
    never starts with the name repeated twice.
    """

    name: str
    description: str
    prevention: Optional[str] = None
    risk_factors: Optional[List[str]] = None
    country_specific: Optional[str] = None
    vaccination: Optional[str] = None
    additional_sections: Optional[List[AdditionalSection]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "prevention": self.prevention,
            "riskFactors": list(self.risk_factors) if self.risk_factors else None,
            "countrySpecific": self.country_specific,
            "vaccination": self.vaccination,
            "additionalSections": (
                [section.to_dict() for section in self.additional_sections]
                if self.additional_sections
                else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> VaccineEntry:
        sections = data.get("additionalSections")
        return cls(
            name=data.get("name", ""),
            description=data.get("description") or "",
            prevention=data.get("prevention"),
            risk_factors=list(data["riskFactors"]) if data.get("riskFactors") else None,
            country_specific=data.get("countrySpecific"),
            vaccination=data.get("vaccination"),
            additional_sections=(
                [AdditionalSection.from_dict(item) for item in sections] if sections else None
            ),
        )


@dataclass
class RiskEntry:
    """A health risk extracted from the "Other Risks" section."""

    name: str
    description: str
    prevention: Optional[str] = None
    type: str = "health_risk"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "prevention": self.prevention,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RiskEntry:
        return cls(
            name=data.get("name", ""),
            type=data.get("type") or "health_risk",
            description=data.get("description") or "",
            prevention=data.get("prevention"),
        )


@dataclass
class MalariaInfo:
    """Malaria sub-sections found on a country page."""

    source_url: str
    last_updated: str
    risk_areas: Optional[str] = None
    special_risk_groups: Optional[str] = None
    general_info: Optional[str] = None

    @property
    def has_content(self) -> bool:
        return bool(self.risk_areas or self.special_risk_groups or self.general_info)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "riskAreas": self.risk_areas,
            "specialRiskGroups": self.special_risk_groups,
            "generalInfo": self.general_info,
            "sourceUrl": self.source_url,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MalariaInfo:
        return cls(
            source_url=data.get("sourceUrl", ""),
            last_updated=data.get("lastUpdated", ""),
            risk_areas=data.get("riskAreas"),
            special_risk_groups=data.get("specialRiskGroups"),
            general_info=data.get("generalInfo"),
        )


@dataclass
class CountryRecord:
    """Normalized health advisory data for a single country.

    ``note`` and ``page_title`` are diagnostics that are only set when the
    page produced no structured data.
    """

    source_url: str
    last_updated: str
    most_travellers: List[VaccineEntry] = field(default_factory=list)
    some_travellers: List[VaccineEntry] = field(default_factory=list)
    other_risks: List[RiskEntry] = field(default_factory=list)
    malaria: Optional[MalariaInfo] = None
    note: Optional[str] = None
    page_title: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.most_travellers or self.some_travellers or self.other_risks or self.malaria)

    @property
    def entry_count(self) -> int:
        return len(self.most_travellers) + len(self.some_travellers) + len(self.other_risks)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "mostTravellers": [entry.to_dict() for entry in self.most_travellers],
            "someTravellers": [entry.to_dict() for entry in self.some_travellers],
            "otherRisks": [entry.to_dict() for entry in self.other_risks],
            "malaria": self.malaria.to_dict() if self.malaria else None,
            "lastUpdated": self.last_updated,
            "sourceUrl": self.source_url,
        }
        if self.note:
            data["note"] = self.note
        if self.page_title is not None:
            data["pageTitle"] = self.page_title
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CountryRecord:
        malaria = data.get("malaria")
        return cls(
            source_url=data.get("sourceUrl", ""),
            last_updated=data.get("lastUpdated", ""),
            most_travellers=[VaccineEntry.from_dict(item) for item in data.get("mostTravellers") or []],
            some_travellers=[VaccineEntry.from_dict(item) for item in data.get("someTravellers") or []],
            other_risks=[RiskEntry.from_dict(item) for item in data.get("otherRisks") or []],
            malaria=MalariaInfo.from_dict(malaria) if malaria else None,
            note=data.get("note"),
            page_title=data.get("pageTitle"),
        )


@dataclass
class RegionPartition:
    """One region's compressed country records, written as its own file."""

    region: str
    countries: Dict[str, Dict[str, Any]]
    metadata: Dict[str, Any]
    filename: str = ""
    size_bytes: int = 0
    oversized: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "region": self.region,
            "countries": self.countries,
            "metadata": self.metadata,
        }


class CountryStatus(str, Enum):
    """Per-country state in a batch run."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    SKIPPED = "skipped"
    ERRORED = "errored"


@dataclass
class ErrorLogEntry:
    """Structured failure detail for one country."""

    country: str
    error: str
    timestamp: str

    def to_dict(self) -> Dict[str, str]:
        return {"country": self.country, "error": self.error, "timestamp": self.timestamp}


@dataclass
class ScrapeProgress:
    """Checkpoint used to resume an interrupted batch run."""

    country_records: Dict[str, CountryRecord] = field(default_factory=dict)
    processed_count: int = 0
    request_count: int = 0
    region_assignments: Dict[str, List[str]] = field(default_factory=dict)
    last_saved: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "countryRecords": {name: record.to_dict() for name, record in self.country_records.items()},
            "processedCount": self.processed_count,
            "requestCount": self.request_count,
            "regionAssignments": {region: list(names) for region, names in self.region_assignments.items()},
            "lastSaved": self.last_saved,
            "countriesProcessed": len(self.country_records),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ScrapeProgress:
        records = data.get("countryRecords") or {}
        assignments = data.get("regionAssignments") or {}
        return cls(
            country_records={name: CountryRecord.from_dict(item) for name, item in records.items()},
            processed_count=int(data.get("processedCount", 0)),
            request_count=int(data.get("requestCount", 0)),
            region_assignments={region: list(names) for region, names in assignments.items()},
            last_saved=data.get("lastSaved"),
        )


@dataclass
class FetchStats:
    """Counters a caller can hand to the HTTP client."""

    http_requests: int = 0
    retry_attempts: int = 0
    server_waits: int = 0
