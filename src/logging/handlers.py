# src/logging/handlers.py - v2
"""Size-based rotation for the optional log file."""

from __future__ import annotations

import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

_SIZE_RE = re.compile(r"(\d+)\s*([KMG])B", re.IGNORECASE)
_UNIT_SHIFT = {"K": 10, "M": 20, "G": 30}


def _parse_size(size_str: str) -> int:
    """'10MB' -> 10485760. Units are KB, MB or GB in any case."""
    match = _SIZE_RE.fullmatch(size_str.strip())
    if match is None:
        raise ValueError(f"Invalid log rotation size {size_str!r}, expected e.g. '10MB'")
    count, unit = match.groups()
    return int(count) << _UNIT_SHIFT[unit.upper()]


def create_rotating_handler(
    log_file: str,
    rotation: str = "10MB",
    retention: int = 30,
) -> RotatingFileHandler:
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=_parse_size(rotation),
        backupCount=retention,
        encoding="utf-8",
    )
