# src/cache/memory_cache.py - v1
"""In-process cache layer with lazy TTL expiry and optional LRU bound.

Instances are owned by whoever constructs them (see api.facade); nothing
here is module-global. All access goes through a re-entrant lock so one
instance can be shared by several request handlers in the same process.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable

from s3_local_index.cache.base_cache import BaseCache
from s3_local_index.cache.models import CacheEntry

logger = logging.getLogger(__name__)


class InMemoryCache(BaseCache):
    """Process-lifetime key/value cache.

    Args:
        capacity: Maximum number of entries, 0 for unbounded. When full, the
            least recently used entry is evicted; among entries last used at
            the same moment, the one inserted first goes.
        clock: Monotonic seconds source, injectable for tests.
    """

    def __init__(
        self,
        capacity: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 0:
            raise ValueError("capacity must be >= 0")
        self._capacity = capacity
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.RLock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return None
            self._entries.move_to_end(key)
            return entry.value

    def set(self, key: str, value: Any, ttl: int = 0) -> bool:
        with self._lock:
            if (
                self._capacity
                and key not in self._entries
                and len(self._entries) >= self._capacity
            ):
                self._evict()

            expires_at = self._clock() + ttl if ttl > 0 else None
            self._entries[key] = CacheEntry(key=key, value=value, expires_at=expires_at)
            self._entries.move_to_end(key)
            return True

    def has(self, key: str) -> bool:
        with self._lock:
            return self._live_entry(key) is not None

    def delete(self, key: str) -> bool:
        with self._lock:
            self._entries.pop(key, None)
            return True

    def clear(self) -> bool:
        with self._lock:
            self._entries.clear()
            return True

    def _live_entry(self, key: str) -> CacheEntry | None:
        """Entry for key, evicting it first if it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return entry

    def _evict(self) -> None:
        oldest_key, _ = self._entries.popitem(last=False)
        logger.debug("Evicted least recently used cache entry %s", oldest_key)
