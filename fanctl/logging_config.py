"""Logging configuration helpers."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_MAX_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 5

_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def configure_logging(
    level: str = "info", *, log_path: Path | None = None, console: bool = True
) -> None:
    """Configure root logging handlers.

    Parameters
    ----------
    level:
        Log level name, e.g. "info".
    log_path:
        Optional path of the combined rotating log file. An ``error.log`` is
        written next to it with ERROR records only.
    console:
        When true, log to stderr as well. Stdout is left alone because the MCP
        stdio transport owns it.
    """

    logging.captureWarnings(True)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    root.setLevel(_LEVELS.get(level.lower(), logging.INFO))
    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        combined = RotatingFileHandler(
            log_path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8"
        )
        combined.setFormatter(formatter)
        root.addHandler(combined)

        errors = RotatingFileHandler(
            log_path.parent / "error.log",
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        errors.setLevel(logging.ERROR)
        errors.setFormatter(formatter)
        root.addHandler(errors)

    logging.getLogger("mcp").setLevel(logging.WARNING)
