# src/stream/s3_backend.py - v2
"""S3-compatible authoritative backend (AWS S3, MinIO, ...).

Requires 'boto3' package: pip install boto3.
Paths take the form ``{protocol}://{key}``; the bucket is fixed per backend.
"""

from __future__ import annotations

import io
import logging
import stat as stat_module
from collections.abc import Iterator

from s3_local_index.core.models import StatFlags, StatRecord
from s3_local_index.parser.path_parser import PathParser
from s3_local_index.stream.base_backend import BaseStreamBackend

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}
_WRITE_MODES = ("w", "a", "x", "c")


class S3StreamBackend(BaseStreamBackend):
    """Stream operations against one S3 bucket."""

    def __init__(
        self,
        bucket: str,
        region: str | None = None,
        endpoint_url: str | None = None,
        protocol: str = "s3",
    ) -> None:
        """Initialize the backend.

        Args:
            bucket: S3 bucket name.
            region: AWS region (optional, uses boto3 default if not set).
            endpoint_url: Custom endpoint for MinIO/compatible storage.
            protocol: Scheme stripped from incoming paths.
        """
        try:
            import boto3
        except ImportError as e:
            raise ImportError(
                "boto3 package required for S3 backend: pip install boto3"
            ) from e

        kwargs: dict = {}
        if region:
            kwargs["region_name"] = region
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url

        self._s3 = boto3.client("s3", **kwargs)
        self._bucket = bucket
        self._parser = PathParser(protocol)
        self._reset_stream()
        self._dir_entries: list[str] = []
        self._dir_position = 0

    @property
    def bucket(self) -> str:
        return self._bucket

    def _key(self, path: str) -> str:
        return self._parser.normalize(path)

    def _is_not_found(self, error: Exception) -> bool:
        code = str(getattr(error, "response", {}).get("Error", {}).get("Code", ""))
        return code in _NOT_FOUND_CODES

    def _reset_stream(self) -> None:
        self._stream_key: str | None = None
        self._buffer = io.BytesIO()
        self._writable = False
        self._dirty = False

    # --- Stat ---

    def url_stat(self, path: str, flags: StatFlags = StatFlags.NONE) -> StatRecord | None:
        key = self._key(path)
        try:
            head = self._s3.head_object(Bucket=self._bucket, Key=key)
        except self._s3.exceptions.ClientError as e:
            if not self._is_not_found(e):
                raise
            return self._stat_prefix(key)

        modified = int(head["LastModified"].timestamp()) if head.get("LastModified") else 0
        size = int(head.get("ContentLength", 0))
        return StatRecord(
            mode=stat_module.S_IFREG | 0o644,
            size=size,
            atime=modified,
            mtime=modified,
            ctime=modified,
            blksize=4096,
            blocks=-(-size // 512),
        )

    def _stat_prefix(self, key: str) -> StatRecord | None:
        """Object stores have no directories; a non-empty prefix counts as one."""
        prefix = key.rstrip("/") + "/"
        response = self._s3.list_objects_v2(Bucket=self._bucket, Prefix=prefix, MaxKeys=1)
        if not response.get("KeyCount") and not response.get("Contents"):
            return None
        return StatRecord(mode=stat_module.S_IFDIR | 0o755, size=0)

    # --- File streams ---

    def stream_open(self, path: str, mode: str) -> bool:
        self._reset_stream()
        key = self._key(path)

        if not (mode.startswith(_WRITE_MODES) or "+" in mode):
            body = self._fetch(key)
            if body is None:
                return False
            self._buffer = io.BytesIO(body)
            self._stream_key = key
            return True

        self._writable = True
        if mode.startswith(("w", "x")):
            if mode.startswith("x") and self.url_stat(path) is not None:
                return False
            self._stream_key = key
            self._dirty = True
            return True

        # r+, a and c keep the existing object
        existing = self._fetch(key)
        if existing is None:
            if mode.startswith("r"):
                return False
            self._dirty = True
        else:
            self._buffer.write(existing)
            if not mode.startswith("a"):
                self._buffer.seek(0)
        self._stream_key = key
        return True

    def _fetch(self, key: str) -> bytes | None:
        try:
            response = self._s3.get_object(Bucket=self._bucket, Key=key)
        except self._s3.exceptions.ClientError as e:
            if self._is_not_found(e):
                return None
            raise
        return response["Body"].read()

    def stream_read(self, count: int) -> bytes:
        return self._buffer.read(count)

    def stream_write(self, data: bytes) -> int:
        if not self._writable:
            return 0
        self._dirty = True
        return self._buffer.write(data)

    def stream_eof(self) -> bool:
        return self._buffer.tell() >= len(self._buffer.getbuffer())

    def stream_flush(self) -> bool:
        if not self._writable or self._stream_key is None:
            return False
        body = self._buffer.getvalue()
        self._s3.put_object(Bucket=self._bucket, Key=self._stream_key, Body=body)
        self._dirty = False
        logger.debug("S3 write: s3://%s/%s (%d bytes)", self._bucket, self._stream_key, len(body))
        return True

    def stream_close(self) -> None:
        if self._dirty:
            self.stream_flush()
        self._reset_stream()

    # --- Namespace operations ---

    def unlink(self, path: str) -> bool:
        self._s3.delete_object(Bucket=self._bucket, Key=self._key(path))
        return True

    def rename(self, src: str, dst: str) -> bool:
        src_key, dst_key = self._key(src), self._key(dst)
        self._s3.copy_object(
            Bucket=self._bucket,
            CopySource={"Bucket": self._bucket, "Key": src_key},
            Key=dst_key,
        )
        self._s3.delete_object(Bucket=self._bucket, Key=src_key)
        return True

    def mkdir(self, path: str, mode: int = 0o777, recursive: bool = False) -> bool:
        return True

    def rmdir(self, path: str) -> bool:
        return True

    # --- Directory listing ---

    def dir_opendir(self, path: str) -> bool:
        prefix = self._key(path).rstrip("/")
        prefix = f"{prefix}/" if prefix else ""
        entries: list[str] = []
        paginator = self._s3.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix, Delimiter="/"):
            for obj in page.get("Contents", []):
                name = obj["Key"][len(prefix):]
                if name:
                    entries.append(name)
            for cp in page.get("CommonPrefixes", []):
                name = cp["Prefix"][len(prefix):].rstrip("/")
                if name:
                    entries.append(name)
        self._dir_entries = entries
        self._dir_position = 0
        return True

    def dir_readdir(self) -> str | None:
        if self._dir_position >= len(self._dir_entries):
            return None
        entry = self._dir_entries[self._dir_position]
        self._dir_position += 1
        return entry

    def dir_closedir(self) -> None:
        self._dir_entries = []
        self._dir_position = 0

    # --- Bulk listing ---

    def iter_keys(self, prefix: str = "") -> Iterator[str]:
        """Every object key under prefix, across all listing pages."""
        paginator = self._s3.get_paginator("list_objects_v2")
        kwargs = {"Bucket": self._bucket}
        if prefix:
            kwargs["Prefix"] = prefix
        for page in paginator.paginate(**kwargs):
            for obj in page.get("Contents", []):
                yield obj["Key"]
