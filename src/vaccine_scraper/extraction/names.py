"""Name plausibility filters, name cleanup and description de-duplication."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence

from ..parser_utils import normalize_whitespace

VACCINE_KEYWORDS: Sequence[str] = (
    "hepatitis",
    "tetanus",
    "typhoid",
    "rabies",
    "measles",
    "mumps",
    "rubella",
    "dengue",
    "zika",
    "yellow fever",
    "japanese encephalitis",
    "tick-borne",
    "meningococcal",
    "pneumococcal",
    "influenza",
    "cholera",
    "polio",
    "diphtheria",
    "lyssavirus",
    "covid",
    "chikungunya",
    "tuberculosis",
    "mpox",
)

# Full-text scan order matters: "hepatitis a" must win over "hepatitis".
NAME_SCAN_KEYWORDS: Sequence[str] = (
    "hepatitis a",
    "hepatitis b",
    "tetanus",
    "typhoid",
    "rabies",
    "dengue",
    "zika",
    "yellow fever",
    "japanese encephalitis",
    "tick-borne encephalitis",
    "meningococcal",
    "pneumococcal",
    "influenza",
    "cholera",
    "polio",
    "diphtheria",
    "lyssavirus",
    "chikungunya",
)

RISK_KEYWORDS: Sequence[str] = (
    "infection",
    "disease",
    "virus",
    "bacteria",
    "parasite",
    "influenza",
    "dengue",
    "zika",
    "malaria",
    "schistosomiasis",
    "sexually transmitted",
    "insect",
    "tick",
    "mosquito",
    "bite",
    "air quality",
    "pollution",
    "heat",
    "cold",
    "water",
    "food",
    "hygiene",
    "safety",
    "accident",
    "injury",
    "altitude",
)

COMMON_WORDS = frozenset(
    {
        "prevention",
        "information",
        "details",
        "more",
        "click",
        "here",
        "about",
        "general",
        "country",
        "travel",
        "health",
        "advice",
        "overview",
        "summary",
        "travellers",
        "resources",
        "news",
        "close",
        "open",
        "show",
        "hide",
        "menu",
        "home",
        "back",
    }
)

PREVENTION_KEYWORDS: Sequence[str] = (
    "take care with",
    "avoid",
    "use",
    "clean",
    "seek medical",
    "prevention",
)

RISK_FACTOR_KEYWORDS: Sequence[str] = ("risk", "stay", "work", "travel")

VACCINE_NAME_LENGTH = (3, 50)
RISK_NAME_LENGTH = (3, 100)
CLEAN_NAME_LENGTH = (2, 30)

_VACCINATION_PATTERN = re.compile(r"^[a-z\s-]+\s*(vaccinations?|vaccines?)$", re.IGNORECASE)
_RISK_PATTERN = re.compile(r"^[a-z\s-]+(infection|disease|virus|risk)s?$", re.IGNORECASE)
_SINGLE_WORD_PATTERN = re.compile(r"^[a-z]{4,15}$", re.IGNORECASE)

_VACCINATION_SUFFIX_RE = re.compile(r"\s+vaccin(?:e|es|ation|ations)\s*$", re.IGNORECASE)
_COUNTRY_CLAUSE_RE = re.compile(r"\s+in\s+\w+.*$", re.IGNORECASE)
_LIST_MARKER_RE = re.compile(r"^\s*[\d.\-*•]+\s*")
_NAME_TERMINATOR_RE = re.compile(r":|\(|\s[-–—]\s|[–—]")
_PREVENTION_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(keyword) for keyword in PREVENTION_KEYWORDS) + r")\b",
    re.IGNORECASE,
)


def _looks_like_entry_name(
    text: Optional[str],
    keywords: Iterable[str],
    length_range: Sequence[int],
    patterns: Sequence[re.Pattern],
) -> bool:
    if not text:
        return False
    text = normalize_whitespace(text)
    min_length, max_length = length_range
    if len(text) < min_length or len(text) > max_length:
        return False

    lowered = text.lower()
    if any(keyword in lowered for keyword in keywords):
        return True
    if any(pattern.match(text) for pattern in patterns):
        return True
    return bool(_SINGLE_WORD_PATTERN.match(text)) and lowered not in COMMON_WORDS


def looks_like_vaccine_name(text: Optional[str]) -> bool:
    """Heuristic test for short text that names a vaccine or disease."""
    return _looks_like_entry_name(text, VACCINE_KEYWORDS, VACCINE_NAME_LENGTH, (_VACCINATION_PATTERN,))


def looks_like_health_risk(text: Optional[str]) -> bool:
    """Heuristic test for short text that names a health risk topic."""
    return _looks_like_entry_name(
        text,
        RISK_KEYWORDS,
        RISK_NAME_LENGTH,
        (_VACCINATION_PATTERN, _RISK_PATTERN),
    )


def _title_case(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split(" ") if word)


def clean_vaccine_name(name: Optional[str]) -> Optional[str]:
    """Reduce a heading or link text to a short display label.

    Returns None when the cleaned label is not between 2 and 30 characters.
    """
    if not name:
        return None

    cleaned = normalize_whitespace(name)
    cleaned = _COUNTRY_CLAUSE_RE.sub("", cleaned)
    cleaned = _VACCINATION_SUFFIX_RE.sub("", cleaned)
    cleaned = _LIST_MARKER_RE.sub("", cleaned)
    cleaned = _NAME_TERMINATOR_RE.split(cleaned, maxsplit=1)[0].strip()

    min_length, max_length = CLEAN_NAME_LENGTH
    if len(cleaned) < min_length or len(cleaned) > max_length:
        return None
    return _title_case(cleaned)


def dedupe_description(description: Optional[str], name: Optional[str]) -> str:
    """Remove the entry name that source pages repeat at the start of the body.

    A leading "name name" collapses to a single "name"; otherwise a single
    leading "name " is stripped. Later occurrences are left alone.
    """
    text = normalize_whitespace(description)
    if not text or not name:
        return text

    doubled = f"{name} {name}".lower()
    if text.lower().startswith(doubled):
        while text.lower().startswith(doubled):
            text = text[len(name) + 1 :]
        return text

    prefix = f"{name} ".lower()
    if text.lower().startswith(prefix):
        return text[len(prefix) :].strip()
    return text


def extract_prevention_advice(text: Optional[str]) -> Optional[str]:
    """First sentence that reads like prevention advice."""
    if not text:
        return None
    for sentence in text.split("."):
        sentence = sentence.strip()
        if sentence and _PREVENTION_RE.search(sentence):
            return sentence
    return None


def extract_risk_factors(items: Iterable[str]) -> List[str]:
    """List items that describe who is at risk."""
    factors = []
    for item in items:
        lowered = item.lower()
        if any(keyword in lowered for keyword in RISK_FACTOR_KEYWORDS):
            factors.append(item)
    return factors


def find_keyword_name(text: str) -> Optional[str]:
    """Name the first known vaccine keyword that occurs in ``text``."""
    lowered = text.lower()
    for keyword in NAME_SCAN_KEYWORDS:
        if keyword in lowered:
            return clean_vaccine_name(keyword)
    return None
