"""Tests for partitioned output writing."""

import json

import pytest

from vaccine_scraper.config import ScraperConfig
from vaccine_scraper.exceptions import OutputDirectoryError
from vaccine_scraper.models import CountryRecord, ErrorLogEntry, RiskEntry, VaccineEntry
from vaccine_scraper.partition_writer import PartitionWriter, ensure_output_dir, normalize_assignments


def make_records(*names):
    return {
        name: CountryRecord(
            source_url=f"https://travelhealthpro.org.uk/country/{name.lower()}",
            last_updated="2024-03-01T08:00:00Z",
            most_travellers=[VaccineEntry(name="Tetanus", description="Keep boosters up to date.")],
            other_risks=[RiskEntry(name="Insect Bites", description="Mosquitoes spread dengue.")],
        )
        for name in names
    }


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


def test_normalize_assignments_gives_each_record_one_region():
    records = make_records("Kenya", "Brazil", "Atlantis")
    assignments = {"Africa": ["Kenya", "Gone"], "Europe": ["Kenya"]}

    normalized = normalize_assignments(records, assignments)

    assert normalized == {"Africa": ["Kenya"], "Americas": ["Brazil"], "Other": ["Atlantis"]}


def test_partitions_are_disjoint_and_cover_all_records(tmp_path):
    records = make_records("Kenya", "Nigeria", "Brazil", "France", "Atlantis")
    writer = PartitionWriter(tmp_path, ScraperConfig(output_dir=tmp_path))

    partitions = writer.write_partitions(records, {"Africa": ["Kenya", "Nigeria"]})

    seen = []
    for partition in partitions:
        data = read_json(tmp_path / partition.filename)
        assert data["region"] == partition.region
        assert data["metadata"]["countryCount"] == len(data["countries"])
        assert data["metadata"]["version"] == "1.0.0"
        seen.extend(data["countries"])

    assert sorted(seen) == sorted(records)
    assert len(seen) == len(set(seen))
    assert not any(partition.oversized for partition in partitions)


def test_partition_files_are_compact(tmp_path):
    writer = PartitionWriter(tmp_path)
    writer.write_partitions(make_records("Kenya"), {})

    text = (tmp_path / "chrome-data-africa.json").read_text(encoding="utf-8")

    assert "\n" not in text
    assert '"countries":{"Kenya":{"m":[' in text


def test_oversized_partition_is_flagged_but_written(tmp_path):
    writer = PartitionWriter(tmp_path, ScraperConfig(output_dir=tmp_path, partition_warning_bytes=100))

    partitions = writer.write_partitions(make_records("Kenya"), {})

    assert partitions[0].oversized
    assert partitions[0].size_bytes > 100
    assert "Kenya" in read_json(tmp_path / "chrome-data-africa.json")["countries"]


def test_index_lists_every_partition(tmp_path):
    writer = PartitionWriter(tmp_path)
    writer.write_partitions(make_records("Kenya", "Japan"), {})

    index = read_json(tmp_path / "chrome-index.json")

    assert index["regions"] == ["Africa", "Asia"]
    assert index["dataFiles"] == ["chrome-data-africa.json", "chrome-data-asia.json"]
    assert index["totalCountries"] == 2
    assert index["version"] == "1.0.0"
    assert index["lastUpdated"].endswith("Z")


def test_write_all_produces_companion_files(tmp_path):
    records = make_records("Kenya", "Brazil")
    mappings = {"kenya": "Kenya", "brazil": "Brazil"}
    errors = [ErrorLogEntry(country="Peru", error="Failed to scrape Peru: HTTP 500", timestamp="2024-03-01T08:00:00Z")]

    PartitionWriter(tmp_path).write_all(records, {}, mappings, errors)

    full = read_json(tmp_path / "countries-db.json")
    assert set(full) == {"Kenya", "Brazil"}
    assert full["Kenya"]["mostTravellers"][0]["name"] == "Tetanus"

    assert read_json(tmp_path / "country-mappings.json") == mappings

    last_update = read_json(tmp_path / "last-update.json")
    assert last_update["countriesCount"] == 2
    assert sorted(last_update["regions"]) == ["Africa", "Americas"]
    assert last_update["totalSize"] > 0

    assert read_json(tmp_path / "error-log.json") == [
        {"country": "Peru", "error": "Failed to scrape Peru: HTTP 500", "timestamp": "2024-03-01T08:00:00Z"}
    ]


def test_error_log_written_even_without_errors(tmp_path):
    PartitionWriter(tmp_path).write_all(make_records("Kenya"), {}, {}, [])
    assert read_json(tmp_path / "error-log.json") == []


def test_ensure_output_dir_failure(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(OutputDirectoryError):
        ensure_output_dir(blocker / "data")
