"""Logging setup helpers."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "metaimage"
LOG_FILENAME = f"{LOGGER_NAME}.log"
LOG_FORMAT = "%(asctime)s %(process)08x %(thread)08x %(levelname).1s %(module)s %(message)s"
CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
MAX_BYTES = 2 * 1024 * 1024
BACKUP_COUNT = 5


def configure_logging(
    log_path: Path | None = None,
    level: str = "INFO",
    mirror_to_console: bool = True,
) -> logging.Logger:
    """Configure the package logger.

    Every module logs through ``logging.getLogger(__name__)``, so configuring the
    ``metaimage`` root covers the loader, discovery and the CLI alike. Calling this
    again replaces previously installed handlers.
    """

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = False

    numeric_level = _normalize_level(level)
    logger.setLevel(numeric_level)

    file_path = _resolve_log_path(log_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        file_path,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)

    if mirror_to_console:
        # stdout carries generated module text, keep diagnostics on stderr
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setLevel(numeric_level)
        stream_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(stream_handler)

    return logger


def log_file_path(logger: logging.Logger) -> Path | None:
    """Return the file the logger writes to, if a file handler is installed."""

    for handler in logger.handlers:
        filename = getattr(handler, "baseFilename", None)
        if filename:
            return Path(filename)
    return None


def _normalize_level(level: str) -> int:
    """Convert log level strings to logging constants."""

    candidate = level.strip().upper()
    if candidate == "WARN":
        candidate = "WARNING"
    numeric = getattr(logging, candidate, None)
    if not isinstance(numeric, int):
        raise ValueError(f"Unsupported log level: {level!r}")
    return numeric


def _resolve_log_path(log_path: Path | None) -> Path:
    """Resolve the effective log file path."""

    if log_path is None:
        return Path.cwd() / LOG_FILENAME

    candidate = log_path if log_path.is_absolute() else Path.cwd() / log_path
    if candidate.is_dir() or candidate.suffix == "":
        return candidate / LOG_FILENAME
    return candidate
