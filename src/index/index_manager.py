# src/index/index_manager.py - v2
"""Read, mutate and persist partition indexes.

The layered cache is the fast path and the IndexStore the durable one. Every
mutation rewrites the partition file and refreshes the cache before
returning, so read-after-write within one process is consistent.
"""

from __future__ import annotations

import logging

from s3_local_index.cache.base_cache import BaseCache
from s3_local_index.core.models import PartitionKey
from s3_local_index.index.exceptions import (
    IndexCorruptError,
    IndexNotFoundError,
    IndexWriteError,
    InvalidPathError,
)
from s3_local_index.index.index_store import IndexStore
from s3_local_index.logging.context import set_partition_context
from s3_local_index.parser.path_parser import PathParser

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 3600


class IndexManager:
    """Owns every mutation of partition indexes."""

    def __init__(
        self,
        cache: BaseCache,
        store: IndexStore,
        parser: PathParser,
        ttl: int = DEFAULT_CACHE_TTL,
    ) -> None:
        self._cache = cache
        self._store = store
        self._parser = parser
        self._ttl = ttl

    @property
    def parser(self) -> PathParser:
        return self._parser

    def read(self, path: str) -> list[str]:
        """Entries of the partition ``path`` belongs to.

        Raises:
            InvalidPathError: If the path maps onto no partition.
            IndexNotFoundError: If the partition has no index file.
            IndexCorruptError: If the index file cannot be parsed.
        """
        partition = self._partition_for(path)

        cached = self._cache.get(partition.cache_key)
        if cached is not None:
            return list(cached)

        if not self._store.exists(partition):
            logger.info("Index missing for partition %s", partition)
            raise IndexNotFoundError(path, str(self._store.file_path(partition)))

        try:
            entries = self._store.load(partition)
        except IndexCorruptError as e:
            e.path = path
            logger.warning("Index corrupt, needs rebuild: %s", e)
            raise

        self._cache.set(partition.cache_key, entries, self._ttl)
        return list(entries)

    def write(self, path: str) -> bool:
        """Append the normalized path to its partition.

        Duplicates are not filtered; a repeated upload appends again.

        Raises:
            InvalidPathError, IndexNotFoundError, IndexCorruptError: From read().
            IndexWriteError: If the partition file cannot be written.
        """
        entries = self.read(path)
        entries.append(self._parser.normalize(path))
        self._persist(self._partition_for(path), entries, path)
        return True

    def delete(self, path: str) -> bool:
        """Remove every occurrence of the normalized path from its partition.

        Returns True even when nothing matched.

        Raises:
            InvalidPathError, IndexNotFoundError, IndexCorruptError: From read().
            IndexWriteError: If the partition file cannot be written.
        """
        normalized = self._parser.normalize(path)
        entries = [entry for entry in self.read(path) if entry != normalized]
        self._persist(self._partition_for(path), entries, path)
        return True

    def list(self, prefix: str) -> list[str]:
        """Indexed keys below a directory-like prefix, first occurrence order.

        Raises:
            InvalidPathError, IndexNotFoundError, IndexCorruptError: From read().
        """
        directory = self._parser.normalize(prefix).rstrip("/") + "/"
        seen: dict[str, None] = {}
        for entry in self.read(directory):
            if entry.startswith(directory):
                seen.setdefault(entry, None)
        return list(seen)

    def flush(self, path: str) -> PartitionKey | None:
        """Evict a path's partition from the cache. None if unparseable."""
        partition = self._parser.parse(path)
        if partition is None:
            return None
        self._cache.delete(partition.cache_key)
        logger.info("Flushed cached index for partition %s", partition)
        return partition

    def _partition_for(self, path: str) -> PartitionKey:
        partition = self._parser.parse(path)
        if partition is None:
            raise InvalidPathError(path)
        set_partition_context(partition.token)
        return partition

    def _persist(self, partition: PartitionKey, entries: list[str], path: str) -> None:
        try:
            self._store.save(partition, entries)
        except OSError as e:
            raise IndexWriteError(str(self._store.file_path(partition)), path) from e
        self._cache.set(partition.cache_key, entries, self._ttl)
