"""
Logging setup for Lead Sync.

Console output goes to stderr so ``lead-sync run --json`` keeps stdout
clean for the report. Three console styles are supported:

- ``rich``: colored output through ``RichHandler``
- ``json``: one object per line, for log shipping from ``lead-sync serve``
- ``simple``: plain timestamped lines

An optional rotating log file can be added next to any of them.
"""

from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from lead_sync.config import LoggingConfig


console = Console(stderr=True)

logger = logging.getLogger("lead_sync")

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
SIMPLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Attributes present on every LogRecord; anything else came in via extra=
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}


class JsonFormatter(logging.Formatter):
    """Renders a record and its ``extra=`` fields as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and key not in payload
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _console_handler(format_style: str) -> logging.Handler:
    if format_style == "rich":
        handler: logging.Handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        return handler

    handler = logging.StreamHandler(sys.stderr)
    if format_style == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(SIMPLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(log_file: Path | str, max_file_size_mb: int, backup_count: int) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=max_file_size_mb * 1024 * 1024,
        backupCount=backup_count,
    )
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Path | str | None = None,
    format_style: str = "rich",
    max_file_size_mb: int = 10,
    backup_count: int = 3,
) -> None:
    """
    (Re)configure the ``lead_sync`` logger.

    Args:
        level: Log level name; unknown names fall back to INFO
        log_file: Optional rotating log file
        format_style: "rich", "json" or "simple"
        max_file_size_mb: Size at which the log file rotates
        backup_count: Rotated files to keep
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers = [_console_handler(format_style)]
    if log_file:
        handlers.append(_file_handler(log_file, max_file_size_mb, backup_count))

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setLevel(log_level)
        logger.addHandler(handler)

    logger.setLevel(log_level)
    logger.propagate = False


def setup_logging_from_config(config: LoggingConfig, level: str | None = None) -> None:
    """Configure logging from the settings section, optionally forcing a level."""
    setup_logging(
        level=level or config.level,
        log_file=config.file,
        format_style=config.format,
        max_file_size_mb=config.max_file_size_mb,
        backup_count=config.backup_count,
    )


def get_logger(name: str = "lead_sync") -> logging.Logger:
    return logging.getLogger(name)
