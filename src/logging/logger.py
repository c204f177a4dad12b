# src/logging/logger.py - v3
"""Log formatters that tag each line with the current lookup context."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

from s3_local_index.logging.context import LogContext, get_context
from s3_local_index.logging.handlers import create_rotating_handler

ROOT_LOGGER = "s3_local_index"


def _created_at(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


def _context_tags(ctx: LogContext) -> str:
    """' [operation] (partition)' for whichever of the two is set."""
    tags = ""
    if ctx.operation:
        tags += f" [{ctx.operation}]"
    if ctx.partition:
        tags += f" ({ctx.partition})"
    return tags


class JsonFormatter(logging.Formatter):
    """One JSON object per line, context nested under "context"."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": _created_at(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_context().as_dict()
        if context:
            entry["context"] = context
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        stamp = _created_at(record).strftime("%Y-%m-%d %H:%M:%S")
        line = (
            f"{stamp} [{record.levelname:8s}] {record.name}"
            f"{_context_tags(get_context())} - {record.getMessage()}"
        )
        if record.exc_info and record.exc_info[1] is not None:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


_FORMATTERS: dict[str, type[logging.Formatter]] = {
    "json": JsonFormatter,
    "text": TextFormatter,
}


def get_logger(name: str) -> logging.Logger:
    """Child of the package logger, e.g. get_logger("cli")."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 30,
) -> None:
    """(Re)configure the package logger: stderr plus an optional rotating file.

    Unknown formats fall back to text. Calling it again replaces the
    handlers installed by the previous call.
    """
    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(create_rotating_handler(log_file, rotation, retention))

    formatter = _FORMATTERS.get(log_format, TextFormatter)()
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
