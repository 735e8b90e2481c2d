"""Sequential, rate-limited, resumable batch run over all countries."""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .config import ScraperConfig
from .exceptions import ScraperError
from .logging_config import get_logger
from .models import CountryListing, CountryRecord, CountryStatus, ErrorLogEntry, FetchStats, ScrapeProgress
from .parser_utils import utc_now_iso
from .progress import ProgressStore
from .record_builder import CountryRecordBuilder
from .regions import get_region

logger = get_logger("orchestrator")


@dataclass
class BatchResult:
    """Everything a batch run accumulated."""

    progress: ScrapeProgress
    statuses: Dict[str, CountryStatus] = field(default_factory=dict)
    errors: List[ErrorLogEntry] = field(default_factory=list)
    country_mappings: Dict[str, str] = field(default_factory=dict)
    requests_made: int = 0
    halted: bool = False
    stats: FetchStats = field(default_factory=FetchStats)

    @property
    def records(self) -> Dict[str, CountryRecord]:
        return self.progress.country_records

    def names_with(self, status: CountryStatus) -> List[str]:
        return [name for name, current in self.statuses.items() if current is status]

    def count(self, status: CountryStatus) -> int:
        return len(self.names_with(status))


def calculate_eta(elapsed_seconds: float, attempted: int, remaining: int) -> str:
    """Estimate the time left from the average time per attempted country."""
    if attempted <= 0:
        return "calculating..."
    eta_seconds = remaining * (elapsed_seconds / attempted)
    hours = int(eta_seconds // 3600)
    minutes = int((eta_seconds % 3600) // 60)
    return f"{hours}h {minutes}m"


def add_country_mapping(mappings: Dict[str, str], listing: CountryListing) -> None:
    mappings[listing.slug] = listing.name
    mappings[listing.name.lower()] = listing.name


class BatchOrchestrator:
    """Runs the record builder over a country list one country at a time.

    Each country moves from PENDING to IN_PROGRESS and then to DONE or
    ERRORED. Countries already present in the loaded progress are SKIPPED
    without a fetch. Countries not reached before the request ceiling stay
    PENDING for the next run.
    """

    def __init__(
        self,
        builder: CountryRecordBuilder,
        config: Optional[ScraperConfig] = None,
        progress_store: Optional[ProgressStore] = None,
        *,
        resume: bool = True,
    ) -> None:
        self.builder = builder
        self.config = config or builder.config
        self.progress_store = progress_store
        self.resume = resume

    async def run(self, listings: Sequence[CountryListing]) -> BatchResult:
        progress = self._load_progress()
        result = BatchResult(
            progress=progress,
            statuses={listing.name: CountryStatus.PENDING for listing in listings},
        )

        total = len(listings)
        logger.info(
            f"Scraping {total} countries; rate limit {self.config.delay_seconds}s "
            f"+ random {self.config.random_delay_max_seconds}s; "
            f"progress saved every {self.config.progress_save_interval} countries"
        )

        started = time.monotonic()
        finished = 0
        attempted = 0
        unsaved = 0

        for index, listing in enumerate(listings):
            name = listing.name
            if name in progress.country_records:
                result.statuses[name] = CountryStatus.SKIPPED
                self._assign_region(progress, name)
                add_country_mapping(result.country_mappings, listing)
                finished += 1
                continue

            if result.requests_made >= self.config.max_requests:
                logger.warning(
                    f"Request limit reached ({self.config.max_requests}). "
                    f"Stopping with {total - finished} countries pending."
                )
                result.halted = True
                break

            result.statuses[name] = CountryStatus.IN_PROGRESS
            logger.info(f"[{finished + 1}/{total}] Processing: {name}")
            result.requests_made += 1
            progress.request_count += 1
            attempted += 1

            failed = False
            try:
                record = await self.builder.build_record(listing, stats=result.stats)
            except ScraperError as exc:
                failed = True
                self._record_error(result, name, str(exc))
                logger.error(str(exc))
            except Exception as exc:
                failed = True
                self._record_error(result, name, f"Failed to scrape {name}: {exc}")
                logger.exception(f"Unexpected error while scraping {name}")
            else:
                progress.country_records[name] = record
                progress.processed_count += 1
                self._assign_region(progress, name)
                add_country_mapping(result.country_mappings, listing)
                result.statuses[name] = CountryStatus.DONE
                unsaved += 1

            finished += 1
            if not failed:
                percent = finished / total * 100
                remaining = self._pending_after(listings, index, progress)
                eta = calculate_eta(time.monotonic() - started, attempted, remaining)
                logger.info(f"{name} - {percent:.1f}% complete (ETA: {eta})")

            if self.progress_store is not None and unsaved >= self.config.progress_save_interval:
                self.progress_store.save(progress)
                unsaved = 0

            if self._should_pause(listings, index, progress, result):
                await self._pause(after_error=failed)

        logger.info(
            f"Scraping summary: {result.count(CountryStatus.DONE)} done, "
            f"{result.count(CountryStatus.ERRORED)} errors, "
            f"{result.count(CountryStatus.SKIPPED)} skipped, "
            f"{result.count(CountryStatus.PENDING)} pending"
        )

        if self.progress_store is not None:
            self.progress_store.save(progress)
        return result

    def _load_progress(self) -> ScrapeProgress:
        if self.progress_store is None or not self.resume:
            return ScrapeProgress()
        return self.progress_store.load()

    @staticmethod
    def _assign_region(progress: ScrapeProgress, name: str) -> None:
        for names in progress.region_assignments.values():
            if name in names:
                return
        progress.region_assignments.setdefault(get_region(name), []).append(name)

    @staticmethod
    def _record_error(result: BatchResult, name: str, message: str) -> None:
        result.statuses[name] = CountryStatus.ERRORED
        result.errors.append(ErrorLogEntry(country=name, error=message, timestamp=utc_now_iso()))

    @staticmethod
    def _pending_after(listings: Sequence[CountryListing], index: int, progress: ScrapeProgress) -> int:
        return sum(1 for listing in listings[index + 1 :] if listing.name not in progress.country_records)

    def _should_pause(
        self,
        listings: Sequence[CountryListing],
        index: int,
        progress: ScrapeProgress,
        result: BatchResult,
    ) -> bool:
        if result.requests_made >= self.config.max_requests:
            return False
        return self._pending_after(listings, index, progress) > 0

    async def _pause(self, *, after_error: bool) -> None:
        if after_error:
            delay = self.config.error_delay_seconds
        else:
            delay = self.config.delay_seconds + random.uniform(0, self.config.random_delay_max_seconds)
        await asyncio.sleep(delay)
