"""Travel vaccine advisory scraper package namespace."""

from importlib import import_module
from typing import Any

__all__ = [
    "ScraperConfig",
    "HTTPClient",
    "CountryRecordBuilder",
    "BatchOrchestrator",
    "PartitionWriter",
    "VaccineScraperRunner",
    "get_region",
]

_EXPORTS = {
    "ScraperConfig": "vaccine_scraper.config",
    "HTTPClient": "vaccine_scraper.http_client",
    "CountryRecordBuilder": "vaccine_scraper.record_builder",
    "BatchOrchestrator": "vaccine_scraper.orchestrator",
    "PartitionWriter": "vaccine_scraper.partition_writer",
    "VaccineScraperRunner": "vaccine_scraper.runner",
    "get_region": "vaccine_scraper.regions",
}


def __getattr__(name: str) -> Any:
    if name in _EXPORTS:
        module = import_module(_EXPORTS[name])
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(__all__)
