# src/logging/context.py - v2
"""Contextual logging support: attach operation, path and partition to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per stream-wrapper query.
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)
_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "path", default=None
)
_partition: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "partition", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    operation: str | None = None
    path: str | None = None
    partition: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        operation=_operation.get(),
        path=_path.get(),
        partition=_partition.get(),
    )


def set_query_context(operation: str, path: str | None = None) -> None:
    """Set query-level context (called once per proxied operation)."""
    _operation.set(operation)
    _path.set(path)
    _partition.set(None)


def set_partition_context(partition: str | None) -> None:
    """Attach the partition token once the path has been parsed."""
    _partition.set(partition)


def clear_context() -> None:
    """Reset all context variables."""
    _operation.set(None)
    _path.set(None)
    _partition.set(None)
