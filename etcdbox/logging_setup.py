"""Process-wide logging configuration.

Console records go to stderr so they never mix with rendered tree output on
stdout; the debug log file lives in the platform log directory.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from platformdirs import user_log_dir

from .config import APP_NAME

LOGGER_NAME = APP_NAME
LOG_FILENAME = "etcdbox.log"
DEFAULT_LOG_PATH = Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME
LOG_MAX_BYTES = 2 * 1024 * 1024
LOG_BACKUP_COUNT = 3

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
ISO8601_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_INITIALIZED_ATTR = "_etcdbox_logging_inited"


def init_logging(level: str = "WARNING", log_file: Path | None = DEFAULT_LOG_PATH) -> logging.Logger:
    """Idempotently attach console and (optional) rotating file handlers.

    The console honors ``level``; the file always records DEBUG and above.
    """
    package_logger = logging.getLogger(LOGGER_NAME)
    if getattr(package_logger, _INITIALIZED_ATTR, False):
        return package_logger

    console_level = getattr(logging, (level or "WARNING").upper(), logging.WARNING)
    package_logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(TEXT_FORMAT, datefmt=ISO8601_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(formatter)
    package_logger.addHandler(console)

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=LOG_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        except OSError as exc:
            package_logger.warning("logging.file_unavailable path=%s err=%s", log_file, exc)
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            package_logger.addHandler(file_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    setattr(package_logger, _INITIALIZED_ATTR, True)
    package_logger.debug("logging.initialized level=%s file=%s", logging.getLevelName(console_level), log_file)
    return package_logger


__all__ = [
    "DEFAULT_LOG_PATH",
    "init_logging",
]
