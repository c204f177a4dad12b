# src/cache/redis_service.py - v2
"""Redis-backed cache service for the external cache layer.

Requires 'redis' package: pip install redis.
Suitable for multi-process / multi-host deployments sharing one index.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from s3_local_index.cache.exceptions import CacheLayerError
from s3_local_index.cache.external_cache import BaseCacheService

logger = logging.getLogger(__name__)


class RedisCacheService(BaseCacheService):
    """Group-scoped JSON values stored under ``{namespace}:{group}:{key}``."""

    def __init__(self, redis_url: str, namespace: str = "s3li") -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = redis.Redis.from_url(redis_url, decode_responses=True)
        self._error = redis.RedisError
        self._namespace = namespace

    def _key(self, key: str, group: str) -> str:
        return f"{self._namespace}:{group}:{key}"

    def get(self, key: str, group: str) -> Any | None:
        try:
            data = self._client.get(self._key(key, group))
        except self._error as e:
            raise CacheLayerError(f"redis GET failed: {e}") from e
        if data is None:
            return None
        try:
            return json.loads(data)
        except json.JSONDecodeError as e:
            logger.warning("Failed to deserialize cache value %s: %s", key, e)
            return None

    def set(self, key: str, value: Any, group: str, ttl: int = 0) -> bool:
        try:
            result = self._client.set(
                self._key(key, group), json.dumps(value), ex=ttl or None
            )
        except self._error as e:
            raise CacheLayerError(f"redis SET failed: {e}") from e
        return bool(result)

    def delete(self, key: str, group: str) -> bool:
        try:
            self._client.delete(self._key(key, group))
        except self._error as e:
            raise CacheLayerError(f"redis DEL failed: {e}") from e
        return True

    def flush_group(self, group: str) -> bool:
        pattern = f"{self._namespace}:{group}:*"
        try:
            keys = list(self._client.scan_iter(match=pattern))
            if keys:
                self._client.delete(*keys)
        except self._error as e:
            raise CacheLayerError(f"redis group flush failed: {e}") from e
        logger.debug("Flushed %d keys from cache group %s", len(keys), group)
        return True

    def flush(self) -> bool:
        try:
            return bool(self._client.flushdb())
        except self._error as e:
            raise CacheLayerError(f"redis FLUSHDB failed: {e}") from e

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
