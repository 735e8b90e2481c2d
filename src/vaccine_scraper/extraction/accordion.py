"""Read collapsible content blocks in full, including text hidden until expanded.

Source pages render most vaccine details inside accordions whose panels are
hidden with inline styles or ARIA attributes. The markup is still present in
the fetched HTML, so everything here reads the whole subtree regardless of
visibility.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from bs4 import Comment, NavigableString, Tag

from ..models import AdditionalSection
from ..parser_utils import normalize_whitespace
from ..section_locator import is_heading, node_text

ACCORDION_CLASS_HINTS: Tuple[str, ...] = (
    "accordion",
    "collapsible",
    "expandable",
    "dropdown",
    "toggle",
    "clickable",
    "interactive",
)
ACCORDION_ATTRIBUTES: Tuple[str, ...] = (
    "aria-expanded",
    "aria-controls",
    "data-toggle",
    "data-bs-toggle",
    "data-target",
    "data-bs-target",
)
CLICKABLE_DESCENDANTS = 'button, a[href="#"], [onclick], [tabindex], summary'
HIDDEN_DESCENDANTS = (
    '[style*="display: none"], [style*="display:none"], [style*="hidden"], '
    '[aria-hidden="true"], [hidden], .hidden, .collapsed, .collapse'
)

_SKIPPED_TAGS = frozenset({"script", "style", "noscript", "template"})

_COUNTRY_SPECIFIC_FALLBACKS = (
    re.compile(r"there is a.*?risk.*?in this country[^.]*\.", re.IGNORECASE),
    re.compile(r"this country has.*?risk[^.]*\.", re.IGNORECASE),
    re.compile(r"risk.*?in this country[^.]*\.", re.IGNORECASE),
)
_PREVENTION_FALLBACKS = (
    re.compile(r"travellers?\s+should[^.]*\.", re.IGNORECASE),
    re.compile(r"prevention[^.]*\.", re.IGNORECASE),
    re.compile(r"avoid[^.]*mosquito[^.]*\.", re.IGNORECASE),
)
_VACCINATION_FALLBACKS = (
    re.compile(r"vaccination[^.]*considered[^.]*\.", re.IGNORECASE),
    re.compile(r"vaccine.*?may be[^.]*\.", re.IGNORECASE),
)
_SENTENCE_BREAK_RE = re.compile(r"\.\s+")
VACCINATION_EXCERPT_CHARS = 500
VACCINATION_EXCERPT_SENTENCES = 3


@dataclass
class AccordionContent:
    """Text of one collapsible block split into description and named parts."""

    description: str = ""
    country_specific: Optional[str] = None
    prevention: Optional[str] = None
    vaccination: Optional[str] = None
    additional_sections: List[AdditionalSection] = field(default_factory=list)


def _class_string(node: Tag) -> str:
    classes = node.get("class") or []
    if isinstance(classes, str):
        return classes.lower()
    return " ".join(classes).lower()


def is_accordion_element(node: Optional[Tag]) -> bool:
    """True if ``node`` shows expand/collapse markup signals."""
    if not isinstance(node, Tag):
        return False
    if node.name == "details":
        return True

    class_string = _class_string(node)
    if any(hint in class_string for hint in ACCORDION_CLASS_HINTS):
        return True
    if any(node.has_attr(attribute) for attribute in ACCORDION_ATTRIBUTES):
        return True
    if node.select_one(CLICKABLE_DESCENDANTS) is not None:
        return True
    return node.select_one(HIDDEN_DESCENDANTS) is not None


def resolve_controlled_panel(node: Tag, document: Tag) -> Optional[Tag]:
    """Find the panel a toggle control expands, if it names one."""
    targets = [node.get("aria-controls"), node.get("data-target"), node.get("data-bs-target")]
    href = node.get("href")
    if isinstance(href, str) and href.startswith("#") and len(href) > 1:
        targets.append(href)

    for target in targets:
        if not isinstance(target, str) or not target.strip():
            continue
        panel_id = target.strip().split()[0].lstrip("#")
        if not panel_id:
            continue
        panel = document.find(id=panel_id)
        if isinstance(panel, Tag) and panel is not node:
            return panel
    return None


def _is_text(node: object) -> bool:
    if not isinstance(node, NavigableString) or isinstance(node, Comment):
        return False
    # Other NavigableString subclasses (CData, Doctype, ...) are not page text
    if type(node) is not NavigableString:
        return False
    return node.parent is None or node.parent.name not in _SKIPPED_TAGS


def get_all_text_content(node: Tag) -> str:
    """All text under ``node``, hidden or not, with whitespace collapsed."""
    return normalize_whitespace(" ".join(str(text) for text in node.descendants if _is_text(text)))


def _within(node: object, ancestor: Optional[Tag], stop: Tag) -> bool:
    if ancestor is None:
        return False
    parent = getattr(node, "parent", None)
    while parent is not None:
        if parent is ancestor:
            return True
        if parent is stop:
            return False
        parent = parent.parent
    return False


def _within_heading(node: object, stop: Tag) -> bool:
    parent = getattr(node, "parent", None)
    while parent is not None and parent is not stop:
        if is_heading(parent):
            return True
        parent = parent.parent
    return False


def parse_content_by_headers(
    roots: Sequence[Tag],
    title_node: Optional[Tag] = None,
    name: Optional[str] = None,
) -> Tuple[str, List[Tuple[str, str]]]:
    """Split the text under ``roots`` at every sub-heading.

    Returns the text before the first sub-heading and a list of
    ``(heading, content)`` pairs. The title node of the entry is not treated
    as a sub-heading; its text is replaced by ``name`` so the description
    reads "<name> <body>".
    """
    description_parts: List[str] = []
    sections: List[Tuple[str, List[str]]] = []
    current = description_parts

    for root in roots:
        if root is title_node:
            if name:
                current.append(name)
            continue
        if is_heading(root):
            parts: List[str] = []
            sections.append((node_text(root), parts))
            current = parts
            continue

        for node in root.descendants:
            if isinstance(node, Tag):
                if node is title_node:
                    if name:
                        current.append(name)
                elif is_heading(node) and not _within(node, title_node, root):
                    parts = []
                    sections.append((node_text(node), parts))
                    current = parts
                continue
            if not _is_text(node):
                continue
            if _within(node, title_node, root) or _within_heading(node, root):
                continue
            text = normalize_whitespace(str(node))
            if text:
                current.append(text)

    description = normalize_whitespace(" ".join(description_parts))
    return description, [
        (heading, normalize_whitespace(" ".join(parts))) for heading, parts in sections if heading
    ]


def _country_heading_pattern(country: str) -> re.Pattern:
    return re.compile(r"\bin\s+(?:the\s+)?" + re.escape(country.strip()) + r"\b", re.IGNORECASE)


def _first_match(text: str, patterns: Sequence[re.Pattern]) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return normalize_whitespace(match.group(0))
    return None


def country_specific_fallback(text: str, country: Optional[str]) -> Optional[str]:
    if not country:
        return None
    return _first_match(text, _COUNTRY_SPECIFIC_FALLBACKS)


def prevention_fallback(text: str) -> Optional[str]:
    return _first_match(text, _PREVENTION_FALLBACKS)


def vaccination_fallback(text: str) -> Optional[str]:
    """Up to three sentences starting at the first vaccination statement."""
    for pattern in _VACCINATION_FALLBACKS:
        match = pattern.search(text)
        if not match:
            continue
        excerpt = text[match.start() : match.start() + VACCINATION_EXCERPT_CHARS]
        sentences = _SENTENCE_BREAK_RE.split(excerpt)[:VACCINATION_EXCERPT_SENTENCES]
        return normalize_whitespace(". ".join(sentences).rstrip(".") + ".")
    return None


def extract_full_accordion_content(
    roots: Sequence[Tag],
    country: Optional[str] = None,
    title_node: Optional[Tag] = None,
    name: Optional[str] = None,
) -> AccordionContent:
    """Read collapsible content and classify its sub-sections.

    Sub-headings mentioning "in <country>" become ``country_specific``, ones
    mentioning prevention or vaccination fill those fields and everything
    else is kept as an additional section. Fields still empty afterwards are
    filled by pattern matching over the flat text.
    """
    content = AccordionContent()
    description, sections = parse_content_by_headers(roots, title_node, name)
    content.description = description

    country_pattern = _country_heading_pattern(country) if country else None
    for heading, text in sections:
        lowered = heading.lower()
        if country_pattern is not None and country_pattern.search(heading):
            if content.country_specific is None:
                content.country_specific = normalize_whitespace(f"{heading} {text}")
        elif "prevention" in lowered:
            if content.prevention is None and text:
                content.prevention = text
        elif "vaccination" in lowered:
            if content.vaccination is None and text:
                content.vaccination = text
        elif text:
            content.additional_sections.append(AdditionalSection(heading=heading, content=text))

    flat_text = normalize_whitespace(" ".join(get_all_text_content(root) for root in roots))
    if content.country_specific is None:
        content.country_specific = country_specific_fallback(flat_text, country)
    if content.prevention is None:
        content.prevention = prevention_fallback(flat_text)
    if content.vaccination is None:
        content.vaccination = vaccination_fallback(flat_text)
    return content
