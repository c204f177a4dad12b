# src/index/builder.py - v1
"""Build partition index files from a full or partial remote listing.

Backs the ``create`` and ``rebuild`` CLI commands. Progress is reported
through log lines only.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Protocol

from pydantic import BaseModel, Field

from s3_local_index.cache.base_cache import BaseCache
from s3_local_index.core.models import PartitionKey
from s3_local_index.index.index_store import IndexStore
from s3_local_index.parser.path_parser import DEFAULT_TENANT_ID, PathParser
from s3_local_index.rebuild.rebuild_tracker import RebuildTracker

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 1000


class ObjectLister(Protocol):
    """Anything that can enumerate object keys under a prefix."""

    def iter_keys(self, prefix: str = "") -> Iterator[str]: ...


class BuildReport(BaseModel):
    """Outcome of a create or rebuild run."""

    objects_seen: int = 0
    partitions_written: int = 0
    skipped: int = 0
    failed: list[str] = Field(default_factory=list)


class IndexBuilder:
    """Writes partition files from the authoritative listing."""

    def __init__(
        self,
        lister: ObjectLister,
        store: IndexStore,
        cache: BaseCache,
        tracker: RebuildTracker,
        parser: PathParser,
    ) -> None:
        self._lister = lister
        self._store = store
        self._cache = cache
        self._tracker = tracker
        self._parser = parser

    def create(self) -> BuildReport:
        """Index every object in the store, replacing all partition files."""
        self._cache.clear()
        logger.info("Cache cleared, listing all objects")

        report = BuildReport()
        partitions: dict[PartitionKey, list[str]] = {}

        for key in self._lister.iter_keys():
            report.objects_seen += 1
            if report.objects_seen % PROGRESS_EVERY == 0:
                logger.info("Indexed %d objects...", report.objects_seen)

            partition = self._parser.parse(key)
            if partition is None:
                report.skipped += 1
                continue
            partitions.setdefault(partition, []).append(self._parser.normalize(key))

        for partition, keys in partitions.items():
            self._store.save(partition, keys)
            report.partitions_written += 1
            logger.info(
                "Written index for partition %s [file: %s] [items: %d]",
                partition, self._store.file_path(partition), len(keys),
            )

        logger.info(
            "Index created: %d objects, %d partitions, %d without partition",
            report.objects_seen, report.partitions_written, report.skipped,
        )
        return report

    def rebuild_partition(self, partition: PartitionKey) -> int:
        """Re-list one partition, save it and drop it from the rebuild queue.

        Returns:
            Number of keys written.

        Raises:
            OSError: If the partition file cannot be written.
        """
        self._cache.delete(partition.cache_key)

        keys = [
            self._parser.normalize(key)
            for key in self._lister.iter_keys(self._listing_prefix(partition))
            if self._parser.parse(key) == partition
        ]
        self._store.save(partition, keys)
        self._tracker.remove(partition.tenant_id, partition.year, partition.month)
        logger.info("Rebuilt index for partition %s, count: %d", partition, len(keys))
        return len(keys)

    def rebuild_queued(self) -> BuildReport:
        """Rebuild every queued partition; one failure does not stop the run."""
        report = BuildReport()
        tokens = self._tracker.list()
        logger.info("Rebuilding %d queued partitions...", len(tokens))

        for token in tokens:
            try:
                partition = PartitionKey.from_token(token)
            except ValueError:
                logger.warning("Invalid rebuild item format: %s", token)
                report.skipped += 1
                continue

            try:
                report.objects_seen += self.rebuild_partition(partition)
            except Exception as e:
                logger.warning("Failed to rebuild %s: %s", token, e)
                report.failed.append(token)
                continue
            report.partitions_written += 1

        return report

    @staticmethod
    def _listing_prefix(partition: PartitionKey) -> str:
        if partition.tenant_id == DEFAULT_TENANT_ID:
            return f"uploads/{partition.year}/{partition.month}/"
        # Network id is not part of the key, so every network has to be listed.
        return "uploads/networks/"
