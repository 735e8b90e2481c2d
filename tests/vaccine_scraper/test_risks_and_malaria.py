"""Tests for other-risk and malaria extraction."""

from pathlib import Path

import pytest

from vaccine_scraper.extraction import ExtractionContext, extract_malaria_info, extract_risk_section
from vaccine_scraper.parser_utils import parse_html

PAGES_DIR = Path(__file__).parent.parent / "data" / "pages"
KENYA = ExtractionContext(country="Kenya", source_url="https://travelhealthpro.org.uk/country/117/kenya")


@pytest.fixture
def kenya_document():
    return parse_html((PAGES_DIR / "kenya.html").read_text(encoding="utf-8"))


def test_other_risks_from_sub_headings(kenya_document):
    risks = extract_risk_section(kenya_document, KENYA)

    assert [risk.name for risk in risks] == ["Altitude Sickness", "Insect Bites"]
    assert all(risk.type == "health_risk" for risk in risks)

    altitude, insects = risks
    assert altitude.description.startswith("Travel to high altitude can cause altitude illness")
    assert insects.prevention == "Use insect repellent on exposed skin"


def test_other_risks_accordion_with_clickable_titles():
    document = parse_html(
        """
        <h2 id="Other_Risks">Other Risks</h2>
        <div class="risk-list">
          <div class="collapsible">
            <a href="#">Air quality</a>
            <div class="hidden"><p>Air pollution is high in cities. Avoid outdoor exercise on smoggy days.</p></div>
          </div>
        </div>
        """
    )
    context = ExtractionContext(country="India", source_url="https://example.org/country/india")

    risks = extract_risk_section(document, context)

    assert len(risks) == 1
    assert risks[0].name == "Air Quality"
    assert risks[0].description.startswith("Air pollution is high in cities")
    assert risks[0].prevention == "Avoid outdoor exercise on smoggy days"


def test_other_risks_absent():
    context = ExtractionContext(country="Iceland", source_url="https://example.org/country/iceland")
    assert extract_risk_section(parse_html("<h2>Malaria</h2>"), context) == []


def test_malaria_sub_sections(kenya_document):
    malaria = extract_malaria_info(kenya_document, KENYA)

    assert malaria.risk_areas == "High risk in all areas below 2,500m including the coast."
    assert malaria.special_risk_groups == "Pregnant women and young children are at increased risk."
    assert malaria.general_info == "Malaria is present in parts of Kenya throughout the year."
    assert malaria.source_url == "https://travelhealthpro.org.uk/country/117/kenya#Malaria"
    assert malaria.last_updated.endswith("Z")


def test_malaria_inside_container():
    document = parse_html(
        """
        <div id="malaria-section">
          <h2>Malaria</h2>
          <p>Malaria risk is low but present in the Amazon basin.</p>
          <h3>Risk areas</h3>
          <p>States of Acre, Amapa, Amazonas and Rondonia.</p>
        </div>
        """
    )
    context = ExtractionContext(country="Brazil", source_url="https://example.org/country/brazil")

    malaria = extract_malaria_info(document, context)

    assert malaria.general_info == "Malaria risk is low but present in the Amazon basin."
    assert malaria.risk_areas == "States of Acre, Amapa, Amazonas and Rondonia."
    assert malaria.special_risk_groups is None


def test_no_malaria_section_returns_none():
    document = parse_html("<h2>Other Risks</h2><p>Sunburn is common.</p>")
    context = ExtractionContext(country="Iceland", source_url="https://example.org/country/iceland")
    assert extract_malaria_info(document, context) is None


def test_malaria_section_without_content_returns_none():
    document = parse_html("<h2>Malaria</h2><p>None.</p><h2>Resources</h2>")
    context = ExtractionContext(country="Malta", source_url="https://example.org/country/malta")
    assert extract_malaria_info(document, context) is None
