# src/index/index_store.py - v2
"""File-backed storage of partition indexes.

Each partition is one UTF-8 JSON array of normalized paths at
``{base_dir}/index-{tenant}-{year}-{month}.json``. Writes replace the file
through a sibling temp file. There is no locking: concurrent writers to the
same partition can lose updates.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path

from s3_local_index.core.models import PartitionKey
from s3_local_index.index.exceptions import IndexCorruptError

logger = logging.getLogger(__name__)

_INDEX_FILE_RE = re.compile(r"^index-(\d+)-(\d{4})-(\d{2})\.json$")


class IndexStore:
    """Reads and writes partition index files under one directory."""

    def __init__(self, base_dir: Path | str) -> None:
        self._root = Path(base_dir).expanduser()

    @property
    def base_dir(self) -> Path:
        return self._root

    def file_path(self, partition: PartitionKey) -> Path:
        return self._root / partition.file_name

    def exists(self, partition: PartitionKey) -> bool:
        return self.file_path(partition).is_file()

    def load(self, partition: PartitionKey) -> list[str]:
        """Read a partition.

        Raises:
            FileNotFoundError: If the partition has no index file.
            IndexCorruptError: If the file is not a JSON array of strings.
        """
        path = self.file_path(partition)
        raw = path.read_bytes()
        try:
            data = json.loads(raw.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise IndexCorruptError(str(path), "not valid UTF-8") from e
        except json.JSONDecodeError as e:
            raise IndexCorruptError(str(path), f"invalid JSON ({e.msg})") from e

        if not isinstance(data, list):
            raise IndexCorruptError(str(path), "top-level value is not an array")
        if not all(isinstance(item, str) for item in data):
            raise IndexCorruptError(str(path), "array holds non-string entries")
        return data

    def save(self, partition: PartitionKey, entries: list[str]) -> bool:
        """Persist a partition, replacing any previous file.

        Raises:
            OSError: If the directory or file cannot be written.
        """
        path = self.file_path(partition)
        self._root.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{partition.file_name}.", suffix=".tmp", dir=self._root
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(list(entries), fh, indent=2)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug("Wrote %d entries to %s", len(entries), path)
        return True

    def delete(self, partition: PartitionKey) -> bool:
        """Remove a partition file. Returns False if there was none."""
        path = self.file_path(partition)
        if not path.exists():
            return False
        path.unlink()
        return True

    def partitions(self) -> list[PartitionKey]:
        """Partitions that currently have an index file, sorted by name."""
        if not self._root.is_dir():
            return []
        found: list[PartitionKey] = []
        for path in sorted(self._root.glob("index-*.json")):
            match = _INDEX_FILE_RE.match(path.name)
            if match:
                found.append(PartitionKey.create(*match.groups()))
        return found
