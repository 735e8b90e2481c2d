"""Tests for the batch orchestrator."""

import json

import pytest

from vaccine_scraper.config import ScraperConfig
from vaccine_scraper.exceptions import ExtractionError
from vaccine_scraper.models import CountryListing, CountryRecord, CountryStatus, ScrapeProgress, VaccineEntry
from vaccine_scraper.orchestrator import BatchOrchestrator, calculate_eta
from vaccine_scraper.progress import ProgressStore


def listing(name):
    slug = name.lower().replace(" ", "-")
    return CountryListing(name=name, url=f"https://travelhealthpro.org.uk/country/1/{slug}", slug=slug)


def record_for(item):
    return CountryRecord(
        source_url=item.url,
        last_updated="2024-03-01T08:00:00Z",
        most_travellers=[VaccineEntry(name="Tetanus", description=f"Tetanus advice for {item.name}.")],
    )


class FakeBuilder:
    """Record builder stand-in that fails for selected countries."""

    def __init__(self, config, failures=None):
        self.config = config
        self.failures = failures or {}
        self.calls = []

    async def build_record(self, item, *, stats=None):
        self.calls.append(item.name)
        if item.name in self.failures:
            raise self.failures[item.name]
        return record_for(item)


class CountingStore(ProgressStore):
    def __init__(self, output_dir):
        super().__init__(output_dir)
        self.saves = 0

    def save(self, progress):
        self.saves += 1
        return super().save(progress)


@pytest.fixture
def sleeps(monkeypatch):
    recorded = []

    async def fake_sleep(delay):
        recorded.append(delay)

    monkeypatch.setattr("vaccine_scraper.orchestrator.asyncio.sleep", fake_sleep)
    return recorded


@pytest.fixture
def config(tmp_path):
    return ScraperConfig(
        output_dir=tmp_path,
        delay_seconds=2.0,
        random_delay_max_seconds=0.0,
        error_delay_seconds=4.0,
    )


@pytest.mark.asyncio
async def test_resume_skips_countries_already_saved(config, tmp_path, sleeps):
    store = ProgressStore(tmp_path)
    saved = ScrapeProgress(
        country_records={name: record_for(listing(name)) for name in ("Kenya", "Brazil")},
        processed_count=2,
        request_count=2,
    )
    store.save(saved)

    builder = FakeBuilder(config)
    orchestrator = BatchOrchestrator(builder, config, store)
    result = await orchestrator.run([listing("Kenya"), listing("Brazil"), listing("France")])

    assert builder.calls == ["France"]
    assert result.statuses == {
        "Kenya": CountryStatus.SKIPPED,
        "Brazil": CountryStatus.SKIPPED,
        "France": CountryStatus.DONE,
    }
    assert set(result.records) == {"Kenya", "Brazil", "France"}
    assert result.progress.request_count == 3
    assert result.requests_made == 1
    assert result.progress.region_assignments == {
        "Africa": ["Kenya"],
        "Americas": ["Brazil"],
        "Europe": ["France"],
    }
    assert sleeps == []


@pytest.mark.asyncio
async def test_no_resume_scrapes_everything(config, tmp_path, sleeps):
    store = ProgressStore(tmp_path)
    store.save(ScrapeProgress(country_records={"Kenya": record_for(listing("Kenya"))}))

    builder = FakeBuilder(config)
    result = await BatchOrchestrator(builder, config, store, resume=False).run(
        [listing("Kenya"), listing("Brazil")]
    )

    assert builder.calls == ["Kenya", "Brazil"]
    assert result.count(CountryStatus.DONE) == 2


@pytest.mark.asyncio
async def test_request_ceiling_leaves_remaining_countries_pending(tmp_path, sleeps):
    config = ScraperConfig(output_dir=tmp_path, max_requests=3, random_delay_max_seconds=0.0)
    store = ProgressStore(tmp_path)
    names = ["Kenya", "Brazil", "France", "Peru", "Japan"]

    builder = FakeBuilder(config)
    result = await BatchOrchestrator(builder, config, store).run([listing(name) for name in names])

    assert result.halted
    assert result.names_with(CountryStatus.DONE) == ["Kenya", "Brazil", "France"]
    assert result.names_with(CountryStatus.PENDING) == ["Peru", "Japan"]
    assert len(sleeps) == 2

    saved = json.loads(store.path.read_text(encoding="utf-8"))
    assert saved["countriesProcessed"] == 3
    assert sorted(saved["countryRecords"]) == ["Brazil", "France", "Kenya"]
    assert saved["requestCount"] == 3


@pytest.mark.asyncio
async def test_errors_are_isolated_per_country(config, sleeps):
    failures = {
        "Brazil": ExtractionError("Brazil", "HTTP 500: Internal Server Error"),
        "France": RuntimeError("boom"),
    }
    builder = FakeBuilder(config, failures)
    names = ["Kenya", "Brazil", "France", "Peru"]

    result = await BatchOrchestrator(builder, config).run([listing(name) for name in names])

    assert builder.calls == names
    assert result.names_with(CountryStatus.DONE) == ["Kenya", "Peru"]
    assert result.names_with(CountryStatus.ERRORED) == ["Brazil", "France"]
    assert [(entry.country, entry.error) for entry in result.errors] == [
        ("Brazil", "Failed to scrape Brazil: HTTP 500: Internal Server Error"),
        ("France", "Failed to scrape France: boom"),
    ]
    assert set(result.records) == {"Kenya", "Peru"}
    assert set(result.country_mappings) == {"kenya", "peru"}
    assert sleeps == [2.0, 4.0, 4.0]


@pytest.mark.asyncio
async def test_progress_saved_every_interval(tmp_path, sleeps):
    config = ScraperConfig(output_dir=tmp_path, progress_save_interval=2, random_delay_max_seconds=0.0)
    store = CountingStore(tmp_path)

    await BatchOrchestrator(FakeBuilder(config), config, store).run(
        [listing(name) for name in ("Kenya", "Brazil", "France")]
    )

    # One checkpoint after two countries plus the final save
    assert store.saves == 2


@pytest.mark.asyncio
async def test_country_mappings_cover_slug_and_lowercase_name(config, sleeps):
    result = await BatchOrchestrator(FakeBuilder(config), config).run([listing("South Africa")])

    assert result.country_mappings == {"south-africa": "South Africa", "south africa": "South Africa"}


def test_calculate_eta():
    assert calculate_eta(0, 0, 10) == "calculating..."
    assert calculate_eta(120.0, 2, 60) == "1h 0m"
    assert calculate_eta(30.0, 3, 5) == "0h 0m"
