"""Tests for checkpoint persistence."""

import json

from vaccine_scraper.models import CountryRecord, MalariaInfo, ScrapeProgress, VaccineEntry
from vaccine_scraper.progress import ProgressStore, write_json_atomic


def sample_progress():
    record = CountryRecord(
        source_url="https://travelhealthpro.org.uk/country/117/kenya",
        last_updated="2024-03-01T08:00:00Z",
        most_travellers=[VaccineEntry(name="Hepatitis A", description="Recommended.", prevention="Wash hands")],
        malaria=MalariaInfo(
            source_url="https://travelhealthpro.org.uk/country/117/kenya#Malaria",
            last_updated="2024-03-01T08:00:00Z",
            risk_areas="Below 2,500m and on the coast.",
        ),
    )
    return ScrapeProgress(
        country_records={"Kenya": record},
        processed_count=1,
        request_count=4,
        region_assignments={"Africa": ["Kenya"]},
    )


def test_save_and_load_round_trip(tmp_path):
    store = ProgressStore(tmp_path)
    store.save(sample_progress())

    loaded = store.load()

    assert loaded.country_records == sample_progress().country_records
    assert loaded.request_count == 4
    assert loaded.region_assignments == {"Africa": ["Kenya"]}
    assert loaded.last_saved is not None


def test_saved_file_uses_camel_case_keys(tmp_path):
    store = ProgressStore(tmp_path)
    path = store.save(sample_progress())

    data = json.loads(path.read_text(encoding="utf-8"))

    assert path.name == "scraping-progress.json"
    assert set(data) == {
        "countryRecords",
        "processedCount",
        "requestCount",
        "regionAssignments",
        "lastSaved",
        "countriesProcessed",
    }
    assert data["countryRecords"]["Kenya"]["mostTravellers"][0]["name"] == "Hepatitis A"


def test_missing_file_starts_fresh(tmp_path):
    progress = ProgressStore(tmp_path).load()
    assert progress.country_records == {}
    assert progress.request_count == 0


def test_corrupt_file_is_backed_up(tmp_path):
    store = ProgressStore(tmp_path)
    store.path.write_text('{"countryRecords": {"Kenya": ', encoding="utf-8")

    progress = store.load()

    assert progress.country_records == {}
    assert not store.path.exists()
    backups = list(tmp_path.glob("scraping-progress.json.backup.*"))
    assert len(backups) == 1
    assert backups[0].read_text(encoding="utf-8").startswith('{"countryRecords"')


def test_non_object_file_is_backed_up(tmp_path):
    store = ProgressStore(tmp_path)
    store.path.write_text("[1, 2, 3]", encoding="utf-8")

    assert store.load().country_records == {}
    assert len(list(tmp_path.glob("scraping-progress.json.backup.*"))) == 1


def test_write_json_atomic_leaves_no_temp_files(tmp_path):
    target = tmp_path / "nested" / "data.json"

    size = write_json_atomic(target, {"name": "Côte d'Ivoire"}, compact=True)

    assert target.read_text(encoding="utf-8") == '{"name":"Côte d\'Ivoire"}'
    assert size == len(target.read_bytes())
    assert [path.name for path in target.parent.iterdir()] == ["data.json"]
