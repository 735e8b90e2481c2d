"""Vaccine recommendations for the "Most travellers" and "Some travellers" sections."""

from __future__ import annotations

from typing import List

from bs4 import Tag

from ..logging_config import get_logger
from ..models import VaccineEntry
from ..section_locator import locate_section_scope
from .strategies import STRATEGIES, EntryKind, ExtractionContext, dedupe_by_name, first_non_empty

logger = get_logger("extraction.vaccines")


def extract_vaccine_section(
    document: Tag,
    section_title: str,
    context: ExtractionContext,
) -> List[VaccineEntry]:
    """Extract the vaccine entries listed under ``section_title``.

    An absent section yields an empty list.
    """
    scope = locate_section_scope(document, section_title)
    if scope is None:
        logger.debug("No '%s' section for %s", section_title, context.country)
        return []

    tag, entries = first_non_empty(STRATEGIES, scope, EntryKind.VACCINE, context)
    if tag is None:
        logger.info("'%s' section for %s has no recognizable entries", section_title, context.country)
        return []
    return [entry for entry in dedupe_by_name(entries) if isinstance(entry, VaccineEntry)]
