"""Configuration loader for the vaccine scraper."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = Path("config/scraper.yaml")
OUTPUT_DIR_ENV = "VACCINE_SCRAPER_OUTPUT_DIR"


@dataclass
class ScraperConfig:
    """Settings shared by the fetcher, orchestrator and partition writer."""

    base_url: str = "https://travelhealthpro.org.uk"
    countries_url: str = "https://travelhealthpro.org.uk/countries"
    output_dir: Path = Path("data")
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    # Fetcher
    timeout_seconds: float = 15.0
    max_retries: int = 3
    retry_base_delay: float = 1.0
    retry_exponential_base: float = 2.0
    retry_max_delay: float = 30.0
    respect_retry_after: bool = True
    rate_limit_fallback_seconds: float = 5.0
    retry_after_max_seconds: float = 120.0

    # Orchestrator
    delay_seconds: float = 2.0
    random_delay_max_seconds: float = 1.0
    error_delay_seconds: float = 4.0
    progress_save_interval: int = 10
    max_requests: int = 1000

    # Output
    partition_warning_bytes: int = 800_000
    data_version: str = "1.0.0"
    small_page_chars: int = 50_000

    def __post_init__(self) -> None:
        self.output_dir = Path(self.output_dir)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ScraperConfig:
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def from_yaml(cls, config_path: Optional[Path | str] = None) -> ScraperConfig:
        """Load settings from the ``settings`` mapping of a YAML file.

        A missing file yields the defaults. ``VACCINE_SCRAPER_OUTPUT_DIR``
        overrides the output directory from the file.
        """
        path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        if not path.is_absolute():
            path = Path.cwd() / path

        data: Dict[str, Any] = {}
        if path.exists():
            with open(path, "r", encoding="utf-8") as handle:
                loaded = yaml.safe_load(handle) or {}
            data = dict(loaded.get("settings") or {})

        env_output = os.environ.get(OUTPUT_DIR_ENV)
        if env_output:
            data["output_dir"] = env_output

        return cls.from_dict(data)

    def with_overrides(self, **overrides: Any) -> ScraperConfig:
        """Return a copy with the non-None overrides applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)
