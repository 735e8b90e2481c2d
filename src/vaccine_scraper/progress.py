"""Checkpoint storage for resumable batch runs."""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from .logging_config import get_logger
from .models import ScrapeProgress
from .parser_utils import utc_now_iso

logger = get_logger("progress")

PROGRESS_FILENAME = "scraping-progress.json"


def write_json_atomic(path: Path, data: Any, *, compact: bool = False) -> int:
    """Write JSON to ``path`` so readers only ever see a complete file.

    The payload goes to a temporary file in the same directory which then
    replaces ``path``. Returns the number of bytes written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if compact:
        payload = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    else:
        payload = json.dumps(data, ensure_ascii=False, indent=2)
    encoded = payload.encode("utf-8")

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(encoded)
            handle.flush()
            os.fsync(handle.fileno())
        Path(tmp_name).replace(path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return len(encoded)


class ProgressStore:
    """Loads and saves the ScrapeProgress checkpoint of one output directory."""

    def __init__(self, output_dir: Path, filename: str = PROGRESS_FILENAME) -> None:
        self.path = Path(output_dir) / filename

    def load(self) -> ScrapeProgress:
        """Load saved progress, starting fresh when there is none.

        A file that cannot be read or parsed is renamed to
        ``<name>.backup.<timestamp>`` and an empty progress is returned.
        """
        if not self.path.exists():
            logger.info("No previous progress found, starting fresh")
            return ScrapeProgress()

        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
            if not isinstance(data, dict):
                raise ValueError("progress file does not hold a JSON object")
            progress = ScrapeProgress.from_dict(data)
        except (OSError, ValueError, TypeError, KeyError, AttributeError) as exc:
            logger.error("Failed to load progress from %s: %s", self.path, exc)
            self._backup_corrupt_file()
            return ScrapeProgress()

        if progress.country_records:
            logger.info("Resuming from %s previously processed countries", len(progress.country_records))
        return progress

    def save(self, progress: ScrapeProgress) -> Path:
        progress.last_saved = utc_now_iso()
        write_json_atomic(self.path, progress.to_dict())
        logger.info("Progress saved (%s countries)", len(progress.country_records))
        return self.path

    def _backup_corrupt_file(self) -> Optional[Path]:
        backup = self.path.with_name(f"{self.path.name}.backup.{datetime.now().strftime('%Y%m%d%H%M%S')}")
        try:
            self.path.replace(backup)
        except OSError as exc:
            logger.warning("Could not back up corrupt progress file %s: %s", self.path, exc)
            return None
        logger.info("Corrupt progress file backed up to %s", backup)
        return backup
