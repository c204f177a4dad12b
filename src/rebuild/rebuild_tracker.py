# src/rebuild/rebuild_tracker.py - v2
"""Durable queue of partitions waiting for an index rebuild.

The queue is a JSON array of ``{tenant}-{year}-{month}`` tokens in a single
file. Every call is a read-modify-write with no locking; one operator at a
time is assumed.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from s3_local_index.core.models import PartitionKey
from s3_local_index.parser.path_parser import PathParser

logger = logging.getLogger(__name__)

REBUILD_LIST_FILE = "rebuild-list.json"


class RebuildTracker:
    """Ordered, duplicate-free set of partition tokens backed by one file."""

    def __init__(self, list_file: Path | str, parser: PathParser | None = None) -> None:
        self._file = Path(list_file).expanduser()
        self._parser = parser or PathParser()

    @property
    def list_file(self) -> Path:
        return self._file

    def add_partition(self, tenant_id: str, year: str, month: str) -> bool:
        token = PartitionKey.create(tenant_id, year, month).token
        tokens = self.list()
        if token not in tokens:
            tokens.append(token)
            logger.info("Queued partition %s for rebuild", token)
        return self._save(tokens)

    def add_for_path(self, path: str) -> bool:
        """Queue the partition of a path. False if the path has none."""
        partition = self._parser.parse(path)
        if partition is None:
            return False
        return self.add_partition(partition.tenant_id, partition.year, partition.month)

    def list(self) -> list[str]:
        """Queued tokens in insertion order. A missing or unreadable file is empty."""
        if not self._file.exists():
            return []
        try:
            data = json.loads(self._file.read_bytes().decode("utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Unreadable rebuild list %s: %s", self._file, e)
            return []
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, str)]

    def remove(self, tenant_id: str, year: str, month: str) -> bool:
        token = PartitionKey.create(tenant_id, year, month).token
        tokens = [item for item in self.list() if item != token]
        return self._save(tokens)

    def clear(self) -> bool:
        try:
            self._file.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not clear rebuild list %s: %s", self._file, e)
            return False
        return True

    def _save(self, tokens: list[str]) -> bool:
        try:
            self._file.parent.mkdir(parents=True, exist_ok=True)
            self._file.write_text(json.dumps(tokens, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not write rebuild list %s: %s", self._file, e)
            return False
        return True
