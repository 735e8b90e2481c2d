"""Vaccine scraper pipeline runner.

Fetches the country directory, runs the batch orchestrator over it and
writes the partitioned output set. ``--limit N`` runs a bounded smoke test
over the first N countries without resuming or saving progress.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader

from .config import ScraperConfig
from .directory import fetch_country_directory
from .exceptions import DirectoryError, OutputDirectoryError
from .http_client import HTTPClient
from .logging_config import get_logger, setup_logging
from .models import CountryStatus
from .orchestrator import BatchOrchestrator, BatchResult
from .parser_utils import utc_now_iso
from .partition_writer import PartitionWriter, ensure_output_dir
from .progress import ProgressStore
from .record_builder import CountryRecordBuilder

logger = get_logger("runner")

TEMPLATE_DIR = Path(__file__).parent / "templates"
SUMMARY_TEMPLATE = "run_summary.txt.j2"


@dataclass
class RunSummary:
    """Summary of a scraper run."""

    started_at: str
    completed_at: str = ""
    output_dir: str = ""
    smoke_test: bool = False
    total_countries: int = 0
    done: int = 0
    skipped: int = 0
    pending: int = 0
    records_total: int = 0
    empty_records: int = 0
    most_travellers_total: int = 0
    some_travellers_total: int = 0
    other_risks_total: int = 0
    halted: bool = False
    partitions: List[str] = field(default_factory=list)
    oversized_partitions: List[str] = field(default_factory=list)
    failed_countries: Dict[str, str] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    @property
    def errored(self) -> int:
        return len(self.failed_countries)

    @property
    def success_rate(self) -> float:
        if not self.total_countries:
            return 0.0
        return self.records_total / self.total_countries * 100

    @property
    def entries_total(self) -> int:
        return self.most_travellers_total + self.some_travellers_total + self.other_risks_total

    def exit_code(self) -> int:
        """Return appropriate exit code based on run status."""
        if self.errors:
            return 1
        if self.failed_countries:
            return 2
        return 0

    def absorb(self, result: BatchResult) -> None:
        self.total_countries = len(result.statuses)
        self.done = result.count(CountryStatus.DONE)
        self.skipped = result.count(CountryStatus.SKIPPED)
        self.pending = result.count(CountryStatus.PENDING)
        self.halted = result.halted
        self.failed_countries = {entry.country: entry.error for entry in result.errors}

        records = [result.records[name] for name in result.statuses if name in result.records]
        self.records_total = len(records)
        self.empty_records = sum(1 for record in records if record.is_empty)
        self.most_travellers_total = sum(len(record.most_travellers) for record in records)
        self.some_travellers_total = sum(len(record.some_travellers) for record in records)
        self.other_risks_total = sum(len(record.other_risks) for record in records)

    def to_dict(self) -> Dict[str, Any]:
        """Convert summary to dictionary for JSON serialization."""
        return {
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "output_dir": self.output_dir,
            "smoke_test": self.smoke_test,
            "total_countries": self.total_countries,
            "done": self.done,
            "skipped": self.skipped,
            "pending": self.pending,
            "errored": self.errored,
            "records_total": self.records_total,
            "empty_records": self.empty_records,
            "success_rate": round(self.success_rate, 1),
            "most_travellers_total": self.most_travellers_total,
            "some_travellers_total": self.some_travellers_total,
            "other_risks_total": self.other_risks_total,
            "halted": self.halted,
            "partitions": self.partitions,
            "oversized_partitions": self.oversized_partitions,
            "failed_countries": self.failed_countries,
            "errors": self.errors,
            "exit_code": self.exit_code(),
        }


def render_summary(summary: RunSummary, template_dir: Optional[Path] = None) -> str:
    """Render the human-readable run report."""
    env = Environment(
        loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    return env.get_template(SUMMARY_TEMPLATE).render(summary=summary)


class VaccineScraperRunner:
    """Wires the fetcher, builder, orchestrator and writer together."""

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        *,
        http_client: Optional[HTTPClient] = None,
        smoke_limit: Optional[int] = None,
        resume: bool = True,
    ) -> None:
        self.config = config or ScraperConfig()
        self.http_client = http_client or HTTPClient(self.config)
        self.smoke_limit = smoke_limit
        self.resume = resume and smoke_limit is None

    async def run_async(self) -> RunSummary:
        summary = RunSummary(
            started_at=utc_now_iso(),
            output_dir=str(self.config.output_dir),
            smoke_test=self.smoke_limit is not None,
        )

        try:
            output_dir = ensure_output_dir(self.config.output_dir)
        except OutputDirectoryError as exc:
            logger.error(str(exc))
            summary.errors.append(str(exc))
            summary.completed_at = utc_now_iso()
            return summary

        try:
            logger.info("Step 1: Fetching country list...")
            listings = await fetch_country_directory(self.http_client, self.config)
        except DirectoryError as exc:
            logger.error(str(exc))
            summary.errors.append(str(exc))
            summary.completed_at = utc_now_iso()
            return summary

        if self.smoke_limit is not None:
            listings = listings[: self.smoke_limit]
            logger.info(f"Smoke test: limited to {len(listings)} countries")

        logger.info(f"Step 2: Scraping vaccine data for {len(listings)} countries...")
        store = None if self.smoke_limit is not None else ProgressStore(output_dir)
        builder = CountryRecordBuilder(self.http_client, self.config)
        orchestrator = BatchOrchestrator(builder, self.config, store, resume=self.resume)
        result = await orchestrator.run(listings)
        summary.absorb(result)

        logger.info("Step 3: Saving data...")
        writer = PartitionWriter(output_dir, self.config)
        partitions = writer.write_all(
            result.records,
            result.progress.region_assignments,
            result.country_mappings,
            result.errors,
        )
        summary.partitions = [partition.filename for partition in partitions]
        summary.oversized_partitions = [partition.filename for partition in partitions if partition.oversized]

        summary.completed_at = utc_now_iso()
        logger.info(f"Run completed: {summary.exit_code()} exit code")
        return summary

    def run(self) -> RunSummary:
        return asyncio.run(self.run_async())


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for the vaccine scraper."""
    parser = argparse.ArgumentParser(
        description="Travel vaccine advisory scraper - builds the region-partitioned data set"
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to scraper settings YAML (default: config/scraper.yaml)",
    )

    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Output directory for data files",
    )

    parser.add_argument(
        "--limit",
        type=int,
        help="Smoke test: scrape only the first N countries, without resume or progress saves",
    )

    parser.add_argument(
        "--max-requests",
        type=int,
        help="Stop after this many page fetches in this run",
    )

    parser.add_argument(
        "--no-resume",
        action="store_true",
        help="Ignore saved progress and scrape every country again",
    )

    parser.add_argument(
        "--log-dir",
        type=Path,
        default=Path("logs"),
        help="Directory for log files (default: logs/)",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Output summary as JSON",
    )

    args = parser.parse_args(argv)

    if args.limit is not None and args.limit < 1:
        parser.error("--limit must be at least 1")

    setup_logging(log_dir=args.log_dir, level=logging.DEBUG if args.verbose else logging.INFO)

    config = ScraperConfig.from_yaml(args.config).with_overrides(
        output_dir=args.output,
        max_requests=args.max_requests,
    )
    runner = VaccineScraperRunner(config, smoke_limit=args.limit, resume=not args.no_resume)
    summary = runner.run()

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print(render_summary(summary))

    return summary.exit_code()


if __name__ == "__main__":
    raise SystemExit(main())
