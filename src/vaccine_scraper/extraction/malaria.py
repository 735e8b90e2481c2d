"""Malaria sub-sections read from an already parsed country page."""

from __future__ import annotations

from typing import List, Optional

from bs4 import Tag

from ..logging_config import get_logger
from ..models import MalariaInfo
from ..parser_utils import normalize_whitespace, utc_now_iso
from ..section_locator import extract_section_content, find_section, is_heading, node_text
from .strategies import ExtractionContext

logger = get_logger("extraction.malaria")

MALARIA_TITLE = "Malaria"
RISK_AREAS_TITLE = "Risk areas"
SPECIAL_RISK_GROUPS_TITLE = "Special risk groups"
MIN_CONTENT_CHARS = 20


def _meaningful(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    text = text.strip()
    return text if len(text) >= MIN_CONTENT_CHARS else None


def _subsection_content(document: Tag, title: str) -> Optional[str]:
    heading = find_section(document, title)
    if heading is None:
        return None
    return _meaningful(extract_section_content(heading))


def _lead_text(section: Tag) -> Optional[str]:
    """Text directly under the section start, before its first sub-heading."""
    if is_heading(section):
        nodes = section.find_next_siblings()
    else:
        nodes = section.find_all(recursive=False)
        # The container's own title heading comes first
        while nodes and is_heading(nodes[0]):
            nodes = nodes[1:]

    lines: List[str] = []
    for node in nodes:
        if is_heading(node) or node.find(["h1", "h2", "h3", "h4", "h5", "h6"]) is not None:
            break
        text = node_text(node)
        if text:
            lines.append(text)
    return _meaningful(normalize_whitespace(" ".join(lines)))


def extract_malaria_info(document: Tag, context: ExtractionContext) -> Optional[MalariaInfo]:
    """Malaria details for the page, or None when the page has none."""
    section = find_section(document, MALARIA_TITLE)
    if section is None:
        logger.debug("No malaria section for %s", context.country)
        return None

    info = MalariaInfo(
        source_url=f"{context.source_url}#Malaria",
        last_updated=utc_now_iso(),
        risk_areas=_subsection_content(document, RISK_AREAS_TITLE),
        special_risk_groups=_subsection_content(document, SPECIAL_RISK_GROUPS_TITLE),
        general_info=_lead_text(section),
    )
    if not info.has_content:
        logger.debug("Malaria section for %s has no usable content", context.country)
        return None
    return info
