"""Ordered extraction strategies combined by a first-non-empty rule.

Each strategy is a plain function ``(scope, kind, context) -> list`` that
returns an empty list when it finds nothing. ``first_non_empty`` runs them in
order and keeps the first non-empty result.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple, Union

from bs4 import Tag

from ..logging_config import get_logger
from ..models import RiskEntry, VaccineEntry
from ..parser_utils import normalize_whitespace, split_sentences
from ..section_locator import SectionScope, is_heading, is_major_section, node_text
from .accordion import (
    extract_full_accordion_content,
    get_all_text_content,
    is_accordion_element,
    resolve_controlled_panel,
)
from .names import (
    clean_vaccine_name,
    dedupe_description,
    extract_prevention_advice,
    extract_risk_factors,
    find_keyword_name,
    looks_like_health_risk,
    looks_like_vaccine_name,
)

logger = get_logger("extraction")

Entry = Union[VaccineEntry, RiskEntry]

ACCORDION_SELECTORS: Tuple[str, ...] = (
    ".accordion-item",
    ".collapsible",
    ".expandable",
    "[data-toggle]",
    ".dropdown-toggle",
    "[aria-expanded]",
    "button[aria-controls]",
    ".accordion-button",
    'a[href="#"]',
    "a[data-target]",
)
CLICKABLE_SELECTORS: Tuple[str, ...] = (
    "a",
    "button",
    "[onclick]",
    "[tabindex]",
    ".clickable",
    ".interactive",
    ".vaccine-link",
)
LIST_ITEM_SELECTOR = "ul li, ol li, dl dt, dl dd"
TITLE_SELECTOR = "button, a, summary, .clickable, .vaccine-name, h3, h4, h5, strong"

VACCINE_DESCRIPTION_SENTENCES = 3
RISK_DESCRIPTION_SENTENCES = 4


class EntryKind(str, Enum):
    """What a section lists."""

    VACCINE = "vaccine"
    RISK = "risk"

    def looks_like_name(self, text: Optional[str]) -> bool:
        if self is EntryKind.VACCINE:
            return looks_like_vaccine_name(text)
        return looks_like_health_risk(text)


@dataclass(frozen=True)
class ExtractionContext:
    """Per-country facts the extractor needs, passed explicitly."""

    country: str
    source_url: str


Strategy = Callable[[SectionScope, EntryKind, ExtractionContext], List[Entry]]


def _first_line(node: Tag) -> str:
    for line in node.get_text("\n").split("\n"):
        line = normalize_whitespace(line)
        if line:
            return line
    return ""


def entry_name(node: Tag, kind: EntryKind) -> Tuple[Optional[str], Optional[Tag]]:
    """Name an entry and return the node its name came from, if any."""
    candidates = [node] if node.name in ("button", "a", "summary", "h3", "h4", "h5") else []
    candidates.extend(node.select(TITLE_SELECTOR))
    for candidate in candidates:
        text = node_text(candidate)
        if kind.looks_like_name(text):
            name = clean_vaccine_name(text)
            if name:
                return name, candidate

    first_line = clean_vaccine_name(_first_line(node))
    if first_line and kind.looks_like_name(first_line):
        return first_line, None

    if kind is EntryKind.VACCINE:
        return find_keyword_name(node_text(node)), None
    return None, None


def _list_items(roots: Sequence[Tag]) -> List[str]:
    items: List[str] = []
    for root in roots:
        found = [root] if root.name == "li" else root.select("li")
        items.extend(text for text in (node_text(item) for item in found) if text)
    return items


def _lead_sentences(text: str, count: int) -> str:
    return ". ".join(split_sentences(text)[:count]).strip()


def build_entry(
    roots: Sequence[Tag],
    kind: EntryKind,
    context: ExtractionContext,
    *,
    name: str,
    title_node: Optional[Tag] = None,
    structured: bool = False,
) -> Entry:
    """Build one entry from the nodes that hold its text.

    ``structured`` reads the nodes as collapsible content with sub-sections;
    otherwise the description is the first few sentences of the flat text.
    """
    risk_factors = extract_risk_factors(_list_items(roots))

    if structured:
        content = extract_full_accordion_content(roots, context.country, title_node, name)
        description = dedupe_description(content.description, name)
        if not description and content.additional_sections:
            description = dedupe_description(content.additional_sections[0].content, name)
        prevention = content.prevention or extract_prevention_advice(description)
        if kind is EntryKind.RISK:
            return RiskEntry(
                name=name,
                description=description or f"Health risk information for {name}",
                prevention=prevention,
            )
        return VaccineEntry(
            name=name,
            description=description or f"Information about {name}",
            prevention=prevention,
            risk_factors=risk_factors or None,
            country_specific=content.country_specific,
            vaccination=content.vaccination,
            additional_sections=content.additional_sections or None,
        )

    full_text = normalize_whitespace(" ".join(get_all_text_content(root) for root in roots))
    prevention = extract_prevention_advice(full_text)
    if kind is EntryKind.RISK:
        description = dedupe_description(_lead_sentences(full_text, RISK_DESCRIPTION_SENTENCES), name)
        return RiskEntry(
            name=name,
            description=description or f"Health risk information for {name}",
            prevention=prevention,
        )
    description = dedupe_description(_lead_sentences(full_text, VACCINE_DESCRIPTION_SENTENCES), name)
    return VaccineEntry(
        name=name,
        description=description or f"Information about {name}",
        prevention=prevention,
        risk_factors=risk_factors or None,
    )


def _related(first: Tag, second: Tag) -> bool:
    return any(parent is first for parent in second.parents) or any(
        parent is second for parent in first.parents
    )


def entry_from_element(
    node: Tag,
    scope: SectionScope,
    kind: EntryKind,
    context: ExtractionContext,
) -> Optional[Entry]:
    """Build an entry from a candidate element and any panel it controls."""
    name, title_node = entry_name(node, kind)
    if not name:
        return None

    roots = [node]
    panel = resolve_controlled_panel(node, scope.document)
    if panel is not None and not _related(node, panel):
        roots.append(panel)

    structured = panel is not None or is_accordion_element(node)
    return build_entry(roots, kind, context, name=name, title_node=title_node, structured=structured)


def entry_from_heading(heading: Tag, kind: EntryKind, context: ExtractionContext) -> Optional[Entry]:
    """Build an entry from a heading and the siblings up to the next heading."""
    name = clean_vaccine_name(node_text(heading))
    if not name:
        return None

    roots = [heading]
    for sibling in heading.find_next_siblings():
        if is_heading(sibling):
            break
        roots.append(sibling)

    if len(roots) == 1:
        return None
    return build_entry(roots, kind, context, name=name, title_node=heading, structured=True)


def _entries_for_selectors(
    selectors: Sequence[str],
    scope: SectionScope,
    kind: EntryKind,
    context: ExtractionContext,
    *,
    require_name_text: bool,
) -> List[Entry]:
    for selector in selectors:
        entries: List[Entry] = []
        for node in scope.select(selector):
            if require_name_text and not kind.looks_like_name(node_text(node)):
                continue
            entry = entry_from_element(node, scope, kind, context)
            if entry is not None:
                entries.append(entry)
        if entries:
            return entries
    return []


def accordion_strategy(scope: SectionScope, kind: EntryKind, context: ExtractionContext) -> List[Entry]:
    """One entry per collapsible element; the first productive selector wins."""
    return _entries_for_selectors(ACCORDION_SELECTORS, scope, kind, context, require_name_text=False)


def clickable_strategy(scope: SectionScope, kind: EntryKind, context: ExtractionContext) -> List[Entry]:
    """Links and buttons whose text reads like an entry name."""
    return _entries_for_selectors(CLICKABLE_SELECTORS, scope, kind, context, require_name_text=True)


def list_item_strategy(scope: SectionScope, kind: EntryKind, context: ExtractionContext) -> List[Entry]:
    entries: List[Entry] = []
    for item in scope.select(LIST_ITEM_SELECTOR):
        if not kind.looks_like_name(node_text(item)):
            continue
        entry = entry_from_element(item, scope, kind, context)
        if entry is not None:
            entries.append(entry)
    return entries


def heading_cascade_strategy(
    scope: SectionScope,
    kind: EntryKind,
    context: ExtractionContext,
) -> List[Entry]:
    """Subordinate headings up to the next major section, one entry each."""
    entries: List[Entry] = []
    for heading in scope.subordinate_headings():
        text = node_text(heading)
        if is_major_section(text) or not kind.looks_like_name(text):
            continue
        entry = entry_from_heading(heading, kind, context)
        if entry is not None:
            entries.append(entry)
    return entries


def link_strategy(scope: SectionScope, kind: EntryKind, context: ExtractionContext) -> List[Entry]:
    entries: List[Entry] = []
    for link in scope.select("a[href]"):
        href = str(link.get("href", "")).lower()
        if not kind.looks_like_name(node_text(link)) and not (kind is EntryKind.VACCINE and "vaccine" in href):
            continue
        entry = entry_from_element(link, scope, kind, context)
        if entry is not None:
            entries.append(entry)
    return entries


STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
    ("accordion", accordion_strategy),
    ("clickable", clickable_strategy),
    ("list-item", list_item_strategy),
    ("heading-cascade", heading_cascade_strategy),
    ("link", link_strategy),
)


def first_non_empty(
    strategies: Sequence[Tuple[str, Strategy]],
    scope: SectionScope,
    kind: EntryKind,
    context: ExtractionContext,
) -> Tuple[Optional[str], List[Entry]]:
    """Run ``strategies`` in order; return the first tag and non-empty result."""
    for tag, strategy in strategies:
        entries = strategy(scope, kind, context)
        if entries:
            logger.debug(
                "%s strategy found %s %s entries for %s",
                tag,
                len(entries),
                kind.value,
                context.country,
            )
            return tag, entries
    return None, []


def dedupe_by_name(entries: Sequence[Entry]) -> List[Entry]:
    """Keep the first entry for each name."""
    seen = set()
    unique: List[Entry] = []
    for entry in entries:
        key = entry.name.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(entry)
    return unique
