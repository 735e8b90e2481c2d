"""Error taxonomy for the scraping pipeline."""

from __future__ import annotations

from typing import Optional


class ScraperError(Exception):
    """Base class for all scraper errors."""


class NetworkError(ScraperError):
    """Transport-level failure (connection refused, DNS, reset, timeout)."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"Network error for {url}: {message}")
        self.url = url
        self.reason = message


class FetchTimeoutError(NetworkError):
    """Request exceeded the configured timeout."""

    def __init__(self, url: str, timeout_seconds: float) -> None:
        super().__init__(url, f"request timed out after {timeout_seconds:.1f}s")
        self.timeout_seconds = timeout_seconds


class HttpError(ScraperError):
    """Non-2xx response after all retries were exhausted."""

    def __init__(self, url: str, status: int, reason: Optional[str] = None) -> None:
        detail = f"HTTP {status}"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(f"{detail} for {url}")
        self.url = url
        self.status = status
        self.reason = reason


class ExtractionError(ScraperError):
    """A country page could not be fetched, so no record can be built."""

    def __init__(self, country: str, message: str) -> None:
        super().__init__(f"Failed to scrape {country}: {message}")
        self.country = country
        self.reason = message


class DirectoryError(ScraperError):
    """The country directory page was unavailable or listed no countries."""


class OutputDirectoryError(ScraperError):
    """The output directory could not be created."""
