# src/logging/logger.py — v1
"""Logger factory with JSON and text formatters.

Every record is stamped with the session context (docs root, operation,
document path) from logging.context. Console output goes to stderr so the
CLI can keep stdout for JSON results.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import IO, Any

from docindex.logging.context import get_context

ROOT_LOGGER_NAME = "docindex"

# Third-party loggers that are noisy below WARNING.
QUIET_LOGGERS: tuple[str, ...] = ("watchfiles",)


def _record_time(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, timezone.utc)


class JsonFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, context."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": _record_time(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_context().as_dict()
        if context:
            payload["context"] = context

        # logger.info(..., extra={"data": {...}})
        data = getattr(record, "data", None)
        if data:
            payload["data"] = data

        if record.exc_info and record.exc_info[1] is not None:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """``time [LEVEL] logger [operation] (path) — message`` for terminals."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        head = f"{_record_time(record):%Y-%m-%d %H:%M:%S} [{record.levelname:8s}] {record.name}"
        if ctx.operation:
            head += f" [{ctx.operation}]"
        if ctx.document_path:
            head += f" ({ctx.document_path})"
        line = f"{head} — {record.getMessage()}"
        if record.exc_info and record.exc_info[1] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def get_logger(name: str) -> logging.Logger:
    """Child of the ``docindex`` logger; handlers come from setup_logging()."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 30,
    stream: IO[str] | None = None,
    quiet: Iterable[str] = QUIET_LOGGERS,
) -> None:
    """(Re)configure the ``docindex`` logger. Safe to call repeatedly.

    Args:
        level: DEBUG, INFO, WARNING or ERROR.
        log_format: "json" or "text".
        log_file: Optional rotating log file next to the console output.
        rotation: File size that triggers rotation, e.g. "10MB".
        retention: Rotated files to keep.
        stream: Console stream, stderr when omitted.
        quiet: Third-party loggers capped at WARNING.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    formatter: logging.Formatter = (
        JsonFormatter() if log_format == "json" else TextFormatter()
    )
    console = logging.StreamHandler(stream or sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        from docindex.logging.handlers import create_rotating_handler

        file_handler = create_rotating_handler(log_file, rotation, retention)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logging_from_settings(
    settings: Any,
    *,
    level: str | None = None,
    log_format: str | None = None,
) -> None:
    """Apply the ``log_*`` fields of a Settings instance.

    ``level`` and ``log_format`` override the configured values (the CLI
    forces text output and derives the level from ``--verbose``).
    """
    setup_logging(
        level=level or settings.log_level,
        log_format=log_format or settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
