# src/cache/base_cache.py - v1
"""Abstract cache interface shared by every cache layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class BaseCache(ABC):
    """Key/value cache layer. A ``ttl`` of 0 means no expiration."""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on miss."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl: int = 0) -> bool:
        """Store a value. Returns False if the layer could not store it."""

    @abstractmethod
    def has(self, key: str) -> bool:
        """Whether a live (non-expired) entry exists."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove an entry."""

    @abstractmethod
    def clear(self) -> bool:
        """Remove every entry this layer owns."""
