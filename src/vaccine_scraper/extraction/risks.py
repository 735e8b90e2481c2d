"""Health risk topics from the "Other Risks" section."""

from __future__ import annotations

from typing import List

from bs4 import Tag

from ..logging_config import get_logger
from ..models import RiskEntry
from ..section_locator import locate_section_scope
from .strategies import STRATEGIES, EntryKind, ExtractionContext, dedupe_by_name, first_non_empty

logger = get_logger("extraction.risks")

OTHER_RISKS_TITLE = "Other Risks"


def extract_risk_section(document: Tag, context: ExtractionContext) -> List[RiskEntry]:
    scope = locate_section_scope(document, OTHER_RISKS_TITLE)
    if scope is None:
        logger.debug("No '%s' section for %s", OTHER_RISKS_TITLE, context.country)
        return []

    _, entries = first_non_empty(STRATEGIES, scope, EntryKind.RISK, context)
    return [entry for entry in dedupe_by_name(entries) if isinstance(entry, RiskEntry)]
