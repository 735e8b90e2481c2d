"""Build one country's record from a single page fetch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bs4 import BeautifulSoup
from rapidfuzz import fuzz

from .config import ScraperConfig
from .exceptions import ExtractionError, ScraperError
from .extraction import (
    ExtractionContext,
    extract_malaria_info,
    extract_risk_section,
    extract_vaccine_section,
)
from .http_client import HTTPClient
from .logging_config import get_logger
from .models import CountryListing, CountryRecord, FetchStats
from .parser_utils import normalize_whitespace, parse_html, utc_now_iso
from .section_locator import find_section

logger = get_logger("record_builder")

VACCINE_SECTION_TITLE = "Vaccine Recommendations"
MOST_TRAVELLERS_TITLE = "Most travellers"
SOME_TRAVELLERS_TITLE = "Some travellers"

HEALTH_KEYWORDS = ("vaccine", "vaccination", "health", "disease", "risk")
TITLE_MATCH_THRESHOLD = 80

NO_HEALTH_CONTENT_NOTE = "No health content found on page"
NO_PARSEABLE_CONTENT_NOTE = "No parseable content found"


@dataclass
class PageSignals:
    """Evidence that a page without a vaccine section is still the right page."""

    page_title: str
    title_matches: bool
    has_health_content: bool

    @property
    def plausible(self) -> bool:
        return self.title_matches or self.has_health_content


def page_title(document: BeautifulSoup) -> str:
    title = document.find("title")
    return normalize_whitespace(title.get_text(" ")) if title is not None else ""


def assess_page(document: BeautifulSoup, country: str) -> PageSignals:
    title = page_title(document)
    score = fuzz.partial_ratio(country.lower(), title.lower()) if title else 0
    body = document.body or document
    text = body.get_text(" ").lower()
    return PageSignals(
        page_title=title,
        title_matches=score >= TITLE_MATCH_THRESHOLD,
        has_health_content=any(keyword in text for keyword in HEALTH_KEYWORDS),
    )


class CountryRecordBuilder:
    """Turns a country listing into a CountryRecord with one page fetch."""

    def __init__(self, http_client: HTTPClient, config: Optional[ScraperConfig] = None) -> None:
        self.http_client = http_client
        self.config = config or http_client.config

    async def build_record(
        self,
        listing: CountryListing,
        *,
        stats: Optional[FetchStats] = None,
    ) -> CountryRecord:
        """Fetch the country page and extract its record.

        Raises:
            ExtractionError: the page could not be fetched
        """
        logger.info("Fetching %s", listing.url)
        try:
            html = await self.http_client.fetch(listing.url, stats=stats)
        except ScraperError as exc:
            raise ExtractionError(listing.name, str(exc)) from exc
        return self.build_from_html(listing, html)

    def build_from_html(self, listing: CountryListing, html: str) -> CountryRecord:
        """Extract a record from page HTML without any I/O."""
        if len(html) < self.config.small_page_chars:
            logger.warning(
                "Small page size for %s (%s chars), might be an error page",
                listing.name,
                len(html),
            )

        document = parse_html(html)
        context = ExtractionContext(country=listing.name, source_url=listing.url)
        timestamp = utc_now_iso()

        signals: Optional[PageSignals] = None
        if find_section(document, VACCINE_SECTION_TITLE) is None:
            signals = assess_page(document, listing.name)
            logger.info(
                "No vaccine section for %s: title_match=%s health_content=%s",
                listing.name,
                signals.title_matches,
                signals.has_health_content,
            )
            if not signals.title_matches:
                logger.warning(
                    "Page title %r does not match %r, possible redirect",
                    signals.page_title,
                    listing.name,
                )
            if not signals.plausible:
                return CountryRecord(
                    source_url=listing.url,
                    last_updated=timestamp,
                    note=NO_HEALTH_CONTENT_NOTE,
                    page_title=signals.page_title,
                )

        record = CountryRecord(
            source_url=listing.url,
            last_updated=timestamp,
            most_travellers=extract_vaccine_section(document, MOST_TRAVELLERS_TITLE, context),
            some_travellers=extract_vaccine_section(document, SOME_TRAVELLERS_TITLE, context),
            other_risks=extract_risk_section(document, context),
            malaria=extract_malaria_info(document, context),
        )

        if record.is_empty:
            record.note = NO_PARSEABLE_CONTENT_NOTE
            record.page_title = signals.page_title if signals else page_title(document)
            logger.warning("No parseable content found for %s", listing.name)
        else:
            logger.info(
                "Found %s most, %s some, %s risks, %s for %s",
                len(record.most_travellers),
                len(record.some_travellers),
                len(record.other_risks),
                "malaria info" if record.malaria else "no malaria info",
                listing.name,
            )
        return record
