"""Logging for scraper runs: one log file per output tree plus stdout."""

import logging
import sys
from pathlib import Path
from typing import Optional, Union


PACKAGE_LOGGER = "vaccine_scraper"
LOG_FILE_NAME = "vaccine_scraper.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def resolve_level(level: Union[int, str]) -> int:
    """Accept ``logging.DEBUG`` as well as names such as ``"debug"``."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def setup_logging(
    log_dir: Union[str, Path] = "logs",
    level: Union[int, str] = logging.INFO,
    console: bool = True,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Route all ``vaccine_scraper.*`` loggers to a file under ``log_dir``.

    Calling it again replaces the handlers of the previous call.
    """
    level = resolve_level(level)
    path = Path(log_dir) / (log_file or LOG_FILE_NAME)
    path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_handler(logging.FileHandler(path, encoding="utf-8"), level, formatter))
    if console:
        logger.addHandler(_handler(logging.StreamHandler(sys.stdout), level, formatter))
    logger.propagate = False

    logger.debug("Writing log to %s", path)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Module logger below the package logger, e.g. ``vaccine_scraper.runner``."""
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
