"""Tests for section location heuristics."""

from vaccine_scraper.parser_utils import parse_html
from vaccine_scraper.section_locator import (
    ends_subsection,
    extract_section_content,
    find_section,
    find_section_container,
    is_major_heading,
    is_major_section,
    locate_section_scope,
    node_text,
)


def test_find_section_prefers_known_ids():
    document = parse_html(
        """
        <h2>Most travellers</h2>
        <h3 id="Most_travellers">Most travellers (anchor)</h3>
        """
    )
    section = find_section(document, "Most travellers")
    assert section.name == "h3"


def test_find_section_resolves_anchor_to_enclosing_heading():
    document = parse_html('<h2><span id="Malaria">Malaria</span></h2><p>Text</p>')
    section = find_section(document, "Malaria")
    assert section.name == "h2"


def test_find_section_matches_partial_id():
    document = parse_html('<div id="section-other-risks-2024"><h2>Other risks</h2></div>')
    section = find_section(document, "Other Risks")
    assert section.name == "div"


def test_find_section_by_heading_text():
    document = parse_html("<h4>Some travellers</h4><h4>Some travellers to rural areas</h4>")
    assert node_text(find_section(document, "Some travellers")) == "Some travellers"

    document = parse_html("<h4>Advice for some travellers</h4>")
    assert node_text(find_section(document, "Some travellers")) == "Advice for some travellers"


def test_find_section_returns_none_when_absent():
    document = parse_html("<h2>Resources</h2><p>Links</p>")
    assert find_section(document, "Malaria") is None


def test_is_major_heading_rules():
    document = parse_html("<h2>Anything</h2><h4>Malaria</h4><h4>Rabies</h4><h3>Tetanus</h3><p>x</p>")
    h2, major_h4, minor_h4 = document.find("h2"), *document.find_all("h4")
    h3 = document.find("h3")

    assert not is_major_heading(h2)
    assert is_major_heading(major_h4)
    assert not is_major_heading(minor_h4)
    assert not is_major_heading(document.find("p"))
    assert is_major_section("  other   risks ")

    assert ends_subsection(minor_h4, minor_h4)
    assert ends_subsection(h3, minor_h4)
    assert ends_subsection(major_h4, h3)
    assert not ends_subsection(minor_h4, h3)


def test_find_section_container_prefers_following_block():
    document = parse_html(
        "<body><h3>Most travellers</h3><p>Intro</p><div class='list'>x</div><h3>Some travellers</h3></body>"
    )
    heading = document.find("h3")
    assert find_section_container(heading)["class"] == ["list"]


def test_locate_section_scope_stops_at_next_major_heading():
    document = parse_html(
        """
        <body>
          <h3>Most travellers</h3>
          <div class="block"><a href="#">Hepatitis A</a><h4>Detail</h4></div>
          <h3>Some travellers</h3>
          <div class="block"><a href="#">Rabies</a></div>
        </body>
        """
    )
    scope = locate_section_scope(document, "Most travellers")

    assert node_text(scope.boundary) == "Some travellers"
    assert [node_text(link) for link in scope.select("a")] == ["Hepatitis A"]
    assert [node_text(heading) for heading in scope.subordinate_headings()] == ["Detail"]


def test_locate_section_scope_absent_section():
    assert locate_section_scope(parse_html("<p>Nothing</p>"), "Other Risks") is None


def test_extract_section_content_collects_until_next_heading():
    document = parse_html(
        """
        <body>
          <h3>Risk areas</h3>
          <p>High risk below 2,500m.</p>
          <ul><li>Coast</li><li>Lake Victoria</li></ul>
          <h3>Special risk groups</h3>
          <p>Pregnant women.</p>
        </body>
        """
    )
    content = extract_section_content(document.find("h3"))
    assert content == "High risk below 2,500m.\nCoast Lake Victoria"
    assert extract_section_content(None) is None


def test_locate_section_scope_ignores_heading_level_of_entries():
    document = parse_html(
        """
        <body>
          <h3>Most travellers</h3>
          <h3>Hepatitis A</h3>
          <p>Spread through contaminated food and water.</p>
          <h2>Tetanus</h2>
          <p>Caused by bacteria found in soil.</p>
          <h4>Some travellers</h4>
          <h3>Rabies</h3>
        </body>
        """
    )
    scope = locate_section_scope(document, "Most travellers")

    assert node_text(scope.boundary) == "Some travellers"
    assert [node_text(heading) for heading in scope.subordinate_headings()] == ["Hepatitis A", "Tetanus"]
