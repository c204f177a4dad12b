# src/cache/cache_factory.py - v3
"""Factory for the layered index cache."""

from __future__ import annotations

from s3_local_index.cache.base_cache import BaseCache
from s3_local_index.cache.composite_cache import CompositeCache
from s3_local_index.cache.external_cache import BaseCacheService, ExternalCache
from s3_local_index.cache.memory_cache import InMemoryCache
from s3_local_index.config.settings import Settings


def create_cache(
    settings: Settings | None = None,
    service: BaseCacheService | None = None,
) -> CompositeCache:
    """Build the configured cache stack.

    The in-process layer always comes first. An external layer follows when
    a service is passed in or settings enable the redis-backed one.

    Args:
        settings: Application settings. Defaults to a memory-only stack.
        service: Pre-built cache service, overriding the settings' redis URL.

    Returns:
        CompositeCache over the configured layers.
    """
    capacity = 0 if settings is None else settings.memory_cache_capacity
    group = "s3_local_index" if settings is None else settings.cache_group

    layers: list[BaseCache] = [InMemoryCache(capacity=capacity)]

    if service is None and settings is not None and settings.external_cache_enabled:
        from s3_local_index.cache.redis_service import RedisCacheService

        if not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when EXTERNAL_CACHE_ENABLED=true"
            )
        service = RedisCacheService(
            redis_url=settings.cache_redis_url,
            namespace=settings.cache_namespace,
        )

    if service is not None:
        layers.append(ExternalCache(service, group=group))

    return CompositeCache(layers)
