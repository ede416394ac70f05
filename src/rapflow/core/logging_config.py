"""Logging for RapFlow: console output plus a rotating log file in the app data folder."""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGGER_NAME = "rapflow"
LOG_FILENAME = "rapflow.log"
LOG_MAX_BYTES = 1_000_000
LOG_BACKUPS = 3

VERBOSE_FORMAT = "%(asctime)s [%(threadName)s] %(name)s %(levelname)s: %(message)s"
TERSE_FORMAT = "%(levelname)s: %(message)s"

# requests' connection pool logs every retry at INFO
QUIET_LOGGERS = ("urllib3",)


def default_log_file(app_data_dir: str | Path) -> Path:
    return Path(app_data_dir) / "logs" / LOG_FILENAME


def setup_logging(
    level: str = "INFO", log_file: Optional[Path] = None, verbose: bool = False
) -> logging.Logger:
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(VERBOSE_FORMAT if verbose else TERSE_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        # the file always gets timestamps, even when the console is terse
        file_handler = RotatingFileHandler(
            log_file, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
        )
        file_handler.setFormatter(logging.Formatter(VERBOSE_FORMAT))
        logger.addHandler(file_handler)

    return logger
