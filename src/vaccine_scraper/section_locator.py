"""Locate named content sections in advisory pages with a heuristic cascade.

Country pages are not structurally consistent: the same section may be an
element with an id, a heading of any level, or a heading nested in a
container. ``find_section`` tries id matches before heading text matches and
returns ``None`` for an absent section so callers can degrade gracefully.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from bs4 import Tag

from .parser_utils import normalize_whitespace

HEADING_TAGS: Tuple[str, ...] = ("h1", "h2", "h3", "h4", "h5")
ALL_HEADING_TAGS: Tuple[str, ...] = ("h1", "h2", "h3", "h4", "h5", "h6")
CONTAINER_TAGS: Tuple[str, ...] = ("div", "section", "article")

MAJOR_SECTIONS: Tuple[str, ...] = (
    "Most travellers",
    "Some travellers",
    "Other Risks",
    "Certificate requirements",
    "Malaria",
    "Health risks",
    "General Information",
    "Resources",
    "News",
    "Outbreaks",
    "All travellers",
    "Vaccine Recommendations",
)
_MAJOR_SECTIONS_LOWER = {title.lower() for title in MAJOR_SECTIONS}

SECTION_IDS: Dict[str, Tuple[str, ...]] = {
    "vaccine recommendations": (
        "Vaccine_Recommendations",
        "vaccine_recommendations",
        "vaccines",
        "Vaccines",
        "vaccine",
    ),
    "most travellers": ("Most_travellers", "most-travellers"),
    "some travellers": ("Some_travellers", "some-travellers"),
    "other risks": ("Other_Risks", "other-risks"),
    "malaria": ("Malaria",),
}


def node_text(node: Tag) -> str:
    """Whitespace-normalized text of a node, including hidden descendants."""
    return normalize_whitespace(node.get_text(" "))


def heading_level(node: Tag) -> Optional[int]:
    if isinstance(node, Tag) and node.name in ALL_HEADING_TAGS:
        return int(node.name[1])
    return None


def is_heading(node: object) -> bool:
    return isinstance(node, Tag) and node.name in ALL_HEADING_TAGS


def is_major_section(text: Optional[str]) -> bool:
    """True if ``text`` is one of the top-level advisory section titles."""
    if not text:
        return False
    return normalize_whitespace(text).lower() in _MAJOR_SECTIONS_LOWER


def is_major_heading(node: object) -> bool:
    """True if ``node`` is a heading carrying a major section title.

    Heading level plays no part: pages use any level for both section titles
    and the entries listed under them.
    """
    return is_heading(node) and is_major_section(node_text(node))


def ends_subsection(node: object, subsection: Tag) -> bool:
    """True if ``node`` ends a minor sub-section such as "Risk areas"."""
    if not is_heading(node):
        return False
    if is_major_heading(node):
        return True
    own_level = heading_level(subsection)
    return own_level is not None and heading_level(node) <= own_level


def known_section_ids(title_or_id: str) -> Tuple[str, ...]:
    """Element ids known to mark the given section concept."""
    key = normalize_whitespace(title_or_id).lower()
    known = SECTION_IDS.get(key)
    if known:
        return known
    return (normalize_whitespace(title_or_id).replace(" ", "_"),)


def _resolve_heading(node: Tag) -> Tag:
    # Anchors such as <h2><span id="Malaria">Malaria</span></h2> mark the heading
    if is_heading(node):
        return node
    parent_heading = node.find_parent(list(ALL_HEADING_TAGS))
    return parent_heading or node


def find_section(document: Tag, title_or_id: str) -> Optional[Tag]:
    """Find the node that starts a named section, or None when absent."""
    ids = known_section_ids(title_or_id)

    for section_id in ids:
        node = document.find(id=section_id)
        if isinstance(node, Tag):
            return _resolve_heading(node)

    lowered_ids = [section_id.lower() for section_id in ids]
    for node in document.find_all(id=True):
        node_id = str(node.get("id", "")).lower()
        if any(section_id in node_id for section_id in lowered_ids):
            return _resolve_heading(node)

    title = normalize_whitespace(title_or_id)
    headings = document.find_all(list(HEADING_TAGS))
    for heading in headings:
        if node_text(heading) == title:
            return heading

    needle = title.lower()
    for heading in headings:
        if needle in node_text(heading).lower():
            return heading

    return None


def find_section_container(section: Tag) -> Tag:
    """Find the block container holding the content of ``section``."""
    if section.name in CONTAINER_TAGS:
        return section

    for sibling in section.find_next_siblings():
        if is_major_heading(sibling):
            break
        if sibling.name in CONTAINER_TAGS:
            return sibling

    return section.parent if isinstance(section.parent, Tag) else section


def find_section_boundary(section: Tag) -> Optional[Tag]:
    """First node after ``section`` in document order that ends it."""
    if not is_heading(section):
        return None
    for node in section.find_all_next(list(ALL_HEADING_TAGS)):
        if is_major_heading(node):
            return node
    return None


@dataclass
class SectionScope:
    """The located heading of a section and the nodes that belong to it."""

    document: Tag
    heading: Tag
    container: Tag
    boundary: Optional[Tag] = None
    members: Set[int] = field(default_factory=set)

    def contains(self, node: Tag) -> bool:
        return id(node) in self.members

    def select(self, selector: str) -> List[Tag]:
        """CSS-select inside the container, keeping only section members."""
        return [node for node in self.container.select(selector) if self.contains(node)]

    def subordinate_headings(self, tags: Sequence[str] = ("h2", "h3", "h4", "h5")) -> List[Tag]:
        """Headings after the section heading up to the next major section."""
        if self.heading is self.container:
            candidates: Iterable[Tag] = self.container.find_all(list(tags))
        else:
            candidates = self.heading.find_all_next(list(tags))

        headings: List[Tag] = []
        for node in candidates:
            if node is self.boundary or is_major_section(node_text(node)):
                break
            if self.contains(node):
                headings.append(node)
        return headings


def locate_section_scope(document: Tag, title_or_id: str) -> Optional[SectionScope]:
    """Locate a section and compute the nodes that belong to it."""
    section = find_section(document, title_or_id)
    if section is None:
        return None

    container = find_section_container(section)
    if container is section:
        members = {id(node) for node in section.find_all(True)}
        return SectionScope(document=document, heading=section, container=container, members=members)

    boundary = find_section_boundary(section)
    members: Set[int] = set()
    for node in section.find_all_next(True):
        if node is boundary:
            break
        members.add(id(node))
    return SectionScope(
        document=document,
        heading=section,
        container=container,
        boundary=boundary,
        members=members,
    )


def extract_section_content(section_heading: Optional[Tag]) -> Optional[str]:
    """Collect sibling text after a heading until the next heading of the same
    or a higher level, or the next major section."""
    if section_heading is None:
        return None

    lines: List[str] = []
    for sibling in section_heading.find_next_siblings():
        if ends_subsection(sibling, section_heading):
            break
        text = node_text(sibling)
        if text:
            lines.append(text)
    return "\n".join(lines).strip()
