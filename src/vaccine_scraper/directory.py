"""Parse the country directory page into CountryListing objects."""

from __future__ import annotations

from typing import List, Optional, Tuple
from urllib.parse import urljoin

from .config import ScraperConfig
from .exceptions import DirectoryError, ScraperError
from .http_client import HTTPClient
from .logging_config import get_logger
from .models import CountryListing
from .parser_utils import generate_slug, normalize_whitespace, parse_html

logger = get_logger("directory")

DIRECTORY_SELECTORS: Tuple[str, ...] = (
    ".number_div a",
    ".country-list a",
    'a[href*="/country/"]',
)


def parse_country_directory(html: str, base_url: str) -> List[CountryListing]:
    """Extract country links from the directory page, in page order.

    The first selector that matches any anchors is used. Links without a
    name or href are skipped and a URL listed twice is kept once.
    """
    document = parse_html(html)

    anchors = []
    for selector in DIRECTORY_SELECTORS:
        anchors = document.select(selector)
        if anchors:
            logger.debug("Directory selector %r matched %s links", selector, len(anchors))
            break
        logger.warning("Directory selector %r matched nothing, trying next", selector)

    listings: List[CountryListing] = []
    seen_urls = set()
    for anchor in anchors:
        href = (anchor.get("href") or "").strip()
        name = normalize_whitespace(anchor.get_text(" "))
        if not href or not name:
            continue
        url = href if href.startswith("http") else urljoin(base_url.rstrip("/") + "/", href)
        if url in seen_urls:
            continue
        seen_urls.add(url)
        listings.append(CountryListing(name=name, url=url, slug=generate_slug(name)))
    return listings


async def fetch_country_directory(
    http_client: HTTPClient,
    config: Optional[ScraperConfig] = None,
) -> List[CountryListing]:
    """Fetch and parse the directory page.

    Raises:
        DirectoryError: the page could not be fetched or listed no countries
    """
    config = config or http_client.config
    try:
        html = await http_client.fetch(config.countries_url)
    except ScraperError as exc:
        raise DirectoryError(f"Failed to fetch country list: {exc}") from exc

    listings = parse_country_directory(html, config.base_url)
    if not listings:
        raise DirectoryError("No countries found. Website structure may have changed.")

    logger.info("Found %s countries", len(listings))
    return listings
