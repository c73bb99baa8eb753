# src/config/logging_config.py

"""Logging for price_alert runs.

Every ``add`` / ``check`` / ``list`` invocation writes its own log under
``Settings.LOGS_DIR`` (``run_YYYYMMDD_HHMMSS.log``).  The store, extractor,
checker and CLI log through ``price_alert.*`` children, so one file holds
the whole story of a checking pass: retries, throttling and alerts.

The terminal is reserved for rich output, so the stderr handler only
passes warnings.  Set ``DEBUG_SCRAPER`` to see selector hits and retry
chatter live.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

_ROOT_LOGGER = "price_alert"

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)
_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _run_log_path() -> Path:
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return logs_dir / f"run_{stamp}.log"


def _file_handler(log_file: Path) -> logging.Handler:
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(
        logging.DEBUG if Settings.DEBUG_SCRAPER else logging.WARNING
    )
    handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )
    return handler


def setup_logging() -> Path:
    """Attach the run-log and stderr handlers to ``price_alert``.

    Safe to call more than once: later calls leave the handlers alone and
    return the log file already in use.
    """
    root_logger = logging.getLogger(_ROOT_LOGGER)
    root_logger.setLevel(logging.DEBUG)

    for existing in root_logger.handlers:
        if isinstance(existing, logging.FileHandler):
            return Path(existing.baseFilename)

    log_file = _run_log_path()
    root_logger.addHandler(_file_handler(log_file))
    root_logger.addHandler(_console_handler())
    root_logger.info("Run log: %s", log_file)
    return log_file
