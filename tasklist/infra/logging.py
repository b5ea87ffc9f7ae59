from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from tasklist.config import SETTINGS, PROJECT_ROOT, Settings

APP_LOGGER = "tasklist"
STORAGE_LOGGER = "tasklist.infra"
LOG_FILE = "tasklist.log"
STORAGE_LOG_FILE = "storage.log"


def setup_logging(settings: Settings = SETTINGS, base_dir: Path = PROJECT_ROOT) -> Path:
    log_dir = base_dir / settings.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(log_file, maxBytes=2_000_000, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    # third-party loggers (Qt, SQLAlchemy) stay at WARNING; LOG_LEVEL applies to our own
    logging.basicConfig(
        level=logging.WARNING,
        handlers=[file_handler, console_handler],
        force=True,
    )
    logging.getLogger(APP_LOGGER).setLevel(settings.log_level.upper())

    # storage warnings (dropped records, unreadable payloads) also go to their own file
    storage_handler = RotatingFileHandler(
        log_dir / STORAGE_LOG_FILE, maxBytes=1_000_000, backupCount=2, encoding="utf-8"
    )
    storage_handler.setLevel(logging.WARNING)
    storage_handler.setFormatter(formatter)
    storage_logger = logging.getLogger(STORAGE_LOGGER)
    for handler in list(storage_logger.handlers):
        storage_logger.removeHandler(handler)
        handler.close()
    storage_logger.addHandler(storage_handler)

    return log_file
