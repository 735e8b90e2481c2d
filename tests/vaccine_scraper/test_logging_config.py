"""Tests for the package logging setup."""

import logging

import pytest

from vaccine_scraper.logging_config import get_logger, resolve_level, setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger("vaccine_scraper")
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


def test_setup_logging_writes_module_records_to_file(tmp_path, package_logger):
    setup_logging(log_dir=tmp_path / "logs", level="debug", console=False)

    get_logger("orchestrator").info("Scraping Kenya")
    for handler in package_logger.handlers:
        handler.flush()

    text = (tmp_path / "logs" / "vaccine_scraper.log").read_text(encoding="utf-8")
    assert "vaccine_scraper.orchestrator - INFO - Scraping Kenya" in text
    assert package_logger.level == logging.DEBUG


def test_setup_logging_replaces_previous_handlers(tmp_path, package_logger):
    setup_logging(log_dir=tmp_path, console=True)
    setup_logging(log_dir=tmp_path, console=False)

    assert len(package_logger.handlers) == 1
    assert not package_logger.propagate


def test_resolve_level():
    assert resolve_level(logging.WARNING) == logging.WARNING
    assert resolve_level("info") == logging.INFO
    with pytest.raises(ValueError):
        resolve_level("chatty")
