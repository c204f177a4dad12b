# src/cache/composite_cache.py - v1
"""Read-through composition of ordered cache layers.

Layers are probed front to back on read; a hit in a later layer is copied
into the earlier layers that lack it. Writes go to every layer and succeed
if any layer accepted them, so one unavailable layer never fails the whole.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from s3_local_index.cache.base_cache import BaseCache
from s3_local_index.cache.exceptions import CacheLayerError

logger = logging.getLogger(__name__)


class CompositeCache(BaseCache):
    """BaseCache over an ordered, non-empty list of layers (fastest first)."""

    def __init__(self, layers: Sequence[BaseCache]) -> None:
        if not layers:
            raise ValueError("CompositeCache requires at least one layer")
        self._layers: list[BaseCache] = list(layers)

    @property
    def layers(self) -> list[BaseCache]:
        return list(self._layers)

    def get(self, key: str) -> Any | None:
        for position, layer in enumerate(self._layers):
            try:
                value = layer.get(key)
            except CacheLayerError as e:
                logger.warning("Cache layer %s failed on get: %s", _name(layer), e)
                continue
            if value is not None:
                self._backfill(key, value, self._layers[:position])
                return value
        return None

    def set(self, key: str, value: Any, ttl: int = 0) -> bool:
        return self._apply_all("set", lambda layer: layer.set(key, value, ttl))

    def has(self, key: str) -> bool:
        for layer in self._layers:
            try:
                if layer.has(key):
                    return True
            except CacheLayerError as e:
                logger.warning("Cache layer %s failed on has: %s", _name(layer), e)
        return False

    def delete(self, key: str) -> bool:
        return self._apply_all("delete", lambda layer: layer.delete(key))

    def clear(self) -> bool:
        return self._apply_all("clear", lambda layer: layer.clear())

    def _apply_all(self, operation: str, call: Callable[[BaseCache], bool]) -> bool:
        """Run call on every layer; True if at least one layer succeeded."""
        success = False
        for layer in self._layers:
            try:
                if call(layer):
                    success = True
                else:
                    logger.debug("Cache layer %s rejected %s", _name(layer), operation)
            except CacheLayerError as e:
                logger.warning(
                    "Cache layer %s failed on %s: %s", _name(layer), operation, e
                )
        return success

    @staticmethod
    def _backfill(key: str, value: Any, earlier: Sequence[BaseCache]) -> None:
        # Layers fill front to back, so the first one holding the key ends the walk.
        for layer in earlier:
            try:
                if layer.has(key):
                    break
                layer.set(key, value)
            except CacheLayerError as e:
                logger.warning("Cache backfill into %s failed: %s", _name(layer), e)


def _name(layer: BaseCache) -> str:
    return type(layer).__name__
