# src/parser/path_parser.py - v1
"""Map storage paths onto index partitions.

Accepted shapes (leading slash and ``scheme://`` prefix optional)::

    uploads/2023/01/photo.jpg
    bucket/uploads/2023/01/photo.jpg
    uploads/networks/2/sites/7/2024/06/a.png

A path whose ``uploads`` root is not followed by a ``YYYY/MM/`` pair does not
belong to any partition and parses to None.
"""

from __future__ import annotations

import posixpath
import re

from s3_local_index.core.models import PartitionKey

DEFAULT_TENANT_ID = "1"

_PROTOCOL_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")
_PARTITION_RE = re.compile(
    r"(?:^|/)uploads/(?:networks/(\d+)/sites/(\d+)/)?(\d{4})/(\d{1,2})/"
)


class PathParser:
    """Derives partition keys and normalized index entries from paths."""

    def __init__(self, protocol: str = "s3") -> None:
        self._protocol = protocol

    @property
    def protocol(self) -> str:
        return self._protocol

    def parse(self, path: str) -> PartitionKey | None:
        """Return the partition a path belongs to, or None if it has none."""
        match = _PARTITION_RE.search(self.normalize(path))
        if match is None:
            return None
        network_id, tenant_id, year, month = match.groups()
        return PartitionKey.create(
            tenant_id=tenant_id or DEFAULT_TENANT_ID,
            year=year,
            month=month,
            network_id=network_id,
        )

    def normalize(self, path: str) -> str:
        """Strip any ``scheme://`` prefix and leading slashes."""
        return _PROTOCOL_RE.sub("", path, count=1).lstrip("/")

    def normalize_with_protocol(self, path: str) -> str:
        """Normalized path re-qualified with the configured protocol."""
        return f"{self._protocol}://{self.normalize(path)}"

    def partition_key(self, details: PartitionKey | dict[str, str]) -> str:
        """Cache identifier for a partition.

        Accepts a PartitionKey or a mapping with ``tenant_id``, ``year`` and
        ``month``; the month is zero-padded either way.
        """
        if isinstance(details, PartitionKey):
            return details.cache_key
        try:
            key = PartitionKey.create(
                details["tenant_id"], details["year"], details["month"]
            )
        except KeyError as e:
            raise ValueError(f"Partition details missing {e.args[0]!r}") from e
        return key.cache_key

    @staticmethod
    def looks_like_file(path: str) -> bool:
        """Guess whether a path names a leaf object (has an extension)."""
        if path.endswith("/"):
            return False
        return "." in posixpath.basename(path)
