"""Write the data set as region partitions plus index and companion files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from .compression import compress_country_record
from .config import ScraperConfig
from .exceptions import OutputDirectoryError
from .logging_config import get_logger
from .models import CountryRecord, ErrorLogEntry, RegionPartition
from .parser_utils import utc_now_iso
from .progress import write_json_atomic
from .regions import get_region, region_filename

logger = get_logger("partition_writer")

INDEX_FILENAME = "chrome-index.json"
FULL_DUMP_FILENAME = "countries-db.json"
MAPPINGS_FILENAME = "country-mappings.json"
LAST_UPDATE_FILENAME = "last-update.json"
ERROR_LOG_FILENAME = "error-log.json"


def ensure_output_dir(output_dir: Path) -> Path:
    """Create the output directory.

    Raises:
        OutputDirectoryError: the directory could not be created
    """
    path = Path(output_dir)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputDirectoryError(f"Failed to create output directory {path}: {exc}") from exc
    logger.info(f"Output directory ready: {path}")
    return path


def normalize_assignments(
    records: Mapping[str, CountryRecord],
    region_assignments: Mapping[str, Sequence[str]],
) -> Dict[str, List[str]]:
    """Give every record exactly one region.

    Names without a record are dropped, a name listed under several regions
    keeps its first one and records with no assignment get ``get_region``.
    """
    assigned: Dict[str, str] = {}
    normalized: Dict[str, List[str]] = {}

    for region, names in region_assignments.items():
        for name in names:
            if name not in records or name in assigned:
                continue
            assigned[name] = region
            normalized.setdefault(region, []).append(name)

    for name in records:
        if name not in assigned:
            region = get_region(name)
            assigned[name] = region
            normalized.setdefault(region, []).append(name)

    return normalized


class PartitionWriter:
    """Serializes batch output into the published file set."""

    def __init__(self, output_dir: Path, config: Optional[ScraperConfig] = None) -> None:
        self.output_dir = Path(output_dir)
        self.config = config or ScraperConfig(output_dir=self.output_dir)

    def write_partitions(
        self,
        records: Mapping[str, CountryRecord],
        region_assignments: Mapping[str, Sequence[str]],
    ) -> List[RegionPartition]:
        """Write one compact JSON file per region and the master index.

        A partition larger than ``partition_warning_bytes`` is flagged and
        logged but still written whole.
        """
        timestamp = utc_now_iso()
        partitions: List[RegionPartition] = []

        for region, names in normalize_assignments(records, region_assignments).items():
            countries = {name: compress_country_record(records[name]) for name in names}
            partition = RegionPartition(
                region=region,
                countries=countries,
                metadata={
                    "lastUpdated": timestamp,
                    "countryCount": len(countries),
                    "version": self.config.data_version,
                },
                filename=region_filename(region),
            )
            partition.size_bytes = write_json_atomic(
                self.output_dir / partition.filename, partition.to_dict(), compact=True
            )
            logger.info(f"Partition {partition.filename} ({partition.size_bytes / 1024:.1f}KB)")

            if partition.size_bytes > self.config.partition_warning_bytes:
                partition.oversized = True
                logger.warning(
                    f"PartitionOverflow: {partition.filename} is {partition.size_bytes} bytes, "
                    f"over the {self.config.partition_warning_bytes} byte threshold; "
                    "consider splitting the region further"
                )
            partitions.append(partition)

        self.write_index(partitions, total_countries=len(records), timestamp=timestamp)
        return partitions

    def write_index(
        self,
        partitions: Sequence[RegionPartition],
        *,
        total_countries: int,
        timestamp: Optional[str] = None,
    ) -> Path:
        index = {
            "regions": [partition.region for partition in partitions],
            "totalCountries": total_countries,
            "dataFiles": [partition.filename for partition in partitions],
            "lastUpdated": timestamp or utc_now_iso(),
            "version": self.config.data_version,
        }
        path = self.output_dir / INDEX_FILENAME
        write_json_atomic(path, index)
        return path

    def write_full_dump(self, records: Mapping[str, CountryRecord]) -> Path:
        path = self.output_dir / FULL_DUMP_FILENAME
        write_json_atomic(path, {name: record.to_dict() for name, record in records.items()})
        return path

    def write_mappings(self, mappings: Mapping[str, str]) -> Path:
        path = self.output_dir / MAPPINGS_FILENAME
        write_json_atomic(path, dict(mappings))
        return path

    def write_last_update(
        self,
        records: Mapping[str, CountryRecord],
        partitions: Sequence[RegionPartition],
    ) -> Path:
        full = {name: record.to_dict() for name, record in records.items()}
        metadata = {
            "timestamp": utc_now_iso(),
            "countriesCount": len(records),
            "version": self.config.data_version,
            "regions": [partition.region for partition in partitions],
            "totalSize": len(json.dumps(full, ensure_ascii=False).encode("utf-8")),
        }
        path = self.output_dir / LAST_UPDATE_FILENAME
        write_json_atomic(path, metadata)
        return path

    def write_error_log(self, errors: Sequence[ErrorLogEntry]) -> Path:
        path = self.output_dir / ERROR_LOG_FILENAME
        write_json_atomic(path, [entry.to_dict() for entry in errors])
        if errors:
            logger.info(f"Error log saved: {path} ({len(errors)} entries)")
        return path

    def write_all(
        self,
        records: Mapping[str, CountryRecord],
        region_assignments: Mapping[str, Sequence[str]],
        mappings: Mapping[str, str],
        errors: Sequence[ErrorLogEntry],
    ) -> List[RegionPartition]:
        """Write every output file for a finished run."""
        self.write_full_dump(records)
        self.write_mappings(mappings)
        partitions = self.write_partitions(records, region_assignments)
        self.write_last_update(records, partitions)
        self.write_error_log(errors)
        return partitions
