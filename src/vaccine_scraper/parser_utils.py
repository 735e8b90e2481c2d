"""Parsing utilities shared by the extractor, builder and writer."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import List, Optional, Union

from bs4 import BeautifulSoup
from dateutil import parser as date_parser
from dateutil import tz

_WHITESPACE_RE = re.compile(r"\s+")
_SLUG_RE = re.compile(r"[^a-z0-9]+")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")


def parse_html(html: Optional[str]) -> BeautifulSoup:
    """Parse an HTML document with the lxml backend."""
    return BeautifulSoup(html or "", "lxml")


def normalize_whitespace(text: Optional[str]) -> str:
    """Collapse runs of whitespace into single spaces and trim."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def generate_slug(text: str) -> str:
    """Generate a URL-friendly slug: lowercase, non-alphanumerics to dashes."""
    return _SLUG_RE.sub("-", text.lower()).strip("-")


def split_sentences(text: str, *, min_length: int = 10) -> List[str]:
    """Split text on sentence punctuation, dropping short fragments."""
    return [part.strip() for part in _SENTENCE_SPLIT_RE.split(text) if len(part.strip()) > min_length]


def normalize_timestamp(
    value: Optional[Union[str, datetime]],
    *,
    default_timezone: Union[str, tz.tzfile, None] = "UTC",
) -> Optional[str]:
    """Normalize timestamps to ISO8601 UTC format with Z suffix."""
    if value is None:
        return None

    if isinstance(value, datetime):
        dt = value
    else:
        dt = date_parser.parse(value)

    if dt.tzinfo is None:
        tzinfo = tz.gettz(default_timezone) if isinstance(default_timezone, str) else default_timezone
        if tzinfo is None:
            tzinfo = timezone.utc
        dt = dt.replace(tzinfo=tzinfo)

    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    iso = dt_utc.isoformat()
    if iso.endswith("+00:00"):
        iso = iso[:-6] + "Z"
    return iso


def utc_now_iso() -> str:
    """Current time as an ISO8601 UTC string with Z suffix."""
    return normalize_timestamp(datetime.now(timezone.utc)) or ""


def parse_retry_after(value: Optional[str], *, now: Optional[datetime] = None) -> Optional[float]:
    """Convert a Retry-After header to seconds.

    The header is either a number of seconds or an HTTP date. Returns None
    when the value cannot be interpreted.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None

    try:
        return max(0.0, float(value))
    except ValueError:
        pass

    try:
        target = date_parser.parse(value)
    except (ValueError, OverflowError):
        return None

    if target.tzinfo is None:
        target = target.replace(tzinfo=timezone.utc)
    current = now or datetime.now(timezone.utc)
    return max(0.0, (target - current).total_seconds())
