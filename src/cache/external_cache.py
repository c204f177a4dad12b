# src/cache/external_cache.py - v1
"""Cache layer backed by a distributed key/value cache service.

The service is scoped to one group; ExternalCache adapts it to BaseCache and
absorbs service failures so the layer degrades to a miss instead of raising.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from s3_local_index.cache.base_cache import BaseCache
from s3_local_index.cache.exceptions import CacheLayerError

logger = logging.getLogger(__name__)


class BaseCacheService(ABC):
    """Primitives a distributed cache service must expose."""

    @abstractmethod
    def get(self, key: str, group: str) -> Any | None:
        """Value for key in group, or None when absent."""

    @abstractmethod
    def set(self, key: str, value: Any, group: str, ttl: int = 0) -> bool:
        """Store value; ``ttl`` 0 means the service default (no expiry)."""

    @abstractmethod
    def delete(self, key: str, group: str) -> bool:
        """Delete key from group."""

    @abstractmethod
    def flush_group(self, group: str) -> bool:
        """Drop every key in one group.

        Raises:
            NotImplementedError: If the service cannot flush by group.
        """

    @abstractmethod
    def flush(self) -> bool:
        """Drop every key the service holds, across all groups."""


class ExternalCache(BaseCache):
    """BaseCache adapter over a BaseCacheService, scoped to one group."""

    def __init__(self, service: BaseCacheService, group: str = "s3_local_index") -> None:
        self._service = service
        self._group = group

    @property
    def group(self) -> str:
        return self._group

    def get(self, key: str) -> Any | None:
        try:
            return self._service.get(key, self._group)
        except CacheLayerError as e:
            logger.warning("External cache get failed for %s: %s", key, e)
            return None

    def set(self, key: str, value: Any, ttl: int = 0) -> bool:
        try:
            return bool(self._service.set(key, value, self._group, max(ttl, 0)))
        except CacheLayerError as e:
            logger.warning("External cache set failed for %s: %s", key, e)
            return False

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> bool:
        try:
            return bool(self._service.delete(key, self._group))
        except CacheLayerError as e:
            logger.warning("External cache delete failed for %s: %s", key, e)
            return False

    def clear(self) -> bool:
        try:
            if self._service.flush_group(self._group):
                return True
        except (NotImplementedError, CacheLayerError) as e:
            logger.info("Group flush unavailable for %s: %s", self._group, e)

        # Costly: drops every key in the service, not just this group.
        logger.warning(
            "Falling back to full cache service flush to clear group %s",
            self._group,
        )
        try:
            return bool(self._service.flush())
        except CacheLayerError as e:
            logger.warning("External cache flush failed: %s", e)
            return False
