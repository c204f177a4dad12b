# tests/conftest.py - v2
"""Shared test fixtures for unit and integration tests.

Provides a fake clock, an in-memory cache service, a recording stream
backend and tmp_path-backed index components. No external services: redis
and S3 are replaced by fakes or mocks.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from s3_local_index.cache.composite_cache import CompositeCache
from s3_local_index.cache.exceptions import CacheLayerError
from s3_local_index.cache.external_cache import BaseCacheService
from s3_local_index.cache.memory_cache import InMemoryCache
from s3_local_index.core.models import PartitionKey, StatFlags, StatRecord
from s3_local_index.index.index_manager import IndexManager
from s3_local_index.index.index_store import IndexStore
from s3_local_index.logging.context import clear_context
from s3_local_index.parser.path_parser import PathParser
from s3_local_index.rebuild.rebuild_tracker import RebuildTracker
from s3_local_index.stream.base_backend import BaseStreamBackend


# === FAKES ===


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCacheService(BaseCacheService):
    """Dict-backed cache service with switchable failure modes."""

    def __init__(self, supports_group_flush: bool = True) -> None:
        self.groups: dict[str, dict[str, Any]] = {}
        self.ttls: dict[tuple[str, str], int] = {}
        self.supports_group_flush = supports_group_flush
        self.failing = False
        self.full_flushes = 0

    def _check(self) -> None:
        if self.failing:
            raise CacheLayerError("service unavailable")

    def get(self, key: str, group: str) -> Any | None:
        self._check()
        return self.groups.get(group, {}).get(key)

    def set(self, key: str, value: Any, group: str, ttl: int = 0) -> bool:
        self._check()
        self.groups.setdefault(group, {})[key] = value
        self.ttls[(group, key)] = ttl
        return True

    def delete(self, key: str, group: str) -> bool:
        self._check()
        self.groups.get(group, {}).pop(key, None)
        return True

    def flush_group(self, group: str) -> bool:
        self._check()
        if not self.supports_group_flush:
            raise NotImplementedError("group flush not supported")
        self.groups.pop(group, None)
        return True

    def flush(self) -> bool:
        self._check()
        self.full_flushes += 1
        self.groups.clear()
        return True


class FakeBackend(BaseStreamBackend):
    """Authoritative backend double that records every call.

    ``objects`` maps object keys (no protocol) to their bytes.
    """

    def __init__(self, objects: dict[str, bytes] | None = None, protocol: str = "s3") -> None:
        self.objects: dict[str, bytes] = dict(objects or {})
        self.calls: list[tuple] = []
        self._parser = PathParser(protocol)
        self._open_key: str | None = None
        self._buffer = b""
        self._position = 0
        self._dir: list[str] = []
        self.fail_unlink = False

    def _key(self, path: str) -> str:
        return self._parser.normalize(path)

    def url_stat(self, path: str, flags: StatFlags = StatFlags.NONE) -> StatRecord | None:
        self.calls.append(("url_stat", path, flags))
        key = self._key(path)
        if key in self.objects:
            return StatRecord(mode=0o100644, size=len(self.objects[key]))
        return None

    def stream_open(self, path: str, mode: str) -> bool:
        self.calls.append(("stream_open", path, mode))
        key = self._key(path)
        if mode.startswith("r"):
            if key not in self.objects:
                return False
            self._buffer = self.objects[key]
        else:
            self._buffer = b""
        self._open_key = key
        self._position = 0
        return True

    def stream_read(self, count: int) -> bytes:
        chunk = self._buffer[self._position:self._position + count]
        self._position += len(chunk)
        return chunk

    def stream_write(self, data: bytes) -> int:
        self._buffer += data
        return len(data)

    def stream_eof(self) -> bool:
        return self._position >= len(self._buffer)

    def stream_flush(self) -> bool:
        self.calls.append(("stream_flush",))
        if self._open_key is None:
            return False
        self.objects[self._open_key] = self._buffer
        return True

    def stream_close(self) -> None:
        self.calls.append(("stream_close",))
        self._open_key = None

    def unlink(self, path: str) -> bool:
        self.calls.append(("unlink", path))
        if self.fail_unlink:
            return False
        return self.objects.pop(self._key(path), None) is not None

    def rename(self, src: str, dst: str) -> bool:
        self.calls.append(("rename", src, dst))
        self.objects[self._key(dst)] = self.objects.pop(self._key(src))
        return True

    def mkdir(self, path: str, mode: int = 0o777, recursive: bool = False) -> bool:
        self.calls.append(("mkdir", path))
        return True

    def rmdir(self, path: str) -> bool:
        self.calls.append(("rmdir", path))
        return True

    def dir_opendir(self, path: str) -> bool:
        self.calls.append(("dir_opendir", path))
        prefix = self._key(path).rstrip("/") + "/"
        self._dir = sorted(k[len(prefix):] for k in self.objects if k.startswith(prefix))
        return True

    def dir_readdir(self) -> str | None:
        return self._dir.pop(0) if self._dir else None

    def dir_closedir(self) -> None:
        self._dir = []

    def iter_keys(self, prefix: str = ""):
        for key in sorted(self.objects):
            if key.startswith(prefix):
                yield key

    def stat_calls(self) -> list[tuple]:
        return [c for c in self.calls if c[0] == "url_stat"]


# === FIXTURES ===


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_service() -> FakeCacheService:
    return FakeCacheService()


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def parser() -> PathParser:
    return PathParser()


@pytest.fixture
def index_dir(tmp_path: Path) -> Path:
    return tmp_path / "index"


@pytest.fixture
def store(index_dir: Path) -> IndexStore:
    return IndexStore(index_dir)


@pytest.fixture
def memory_cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def cache(memory_cache: InMemoryCache) -> CompositeCache:
    return CompositeCache([memory_cache])


@pytest.fixture
def index_manager(cache: CompositeCache, store: IndexStore, parser: PathParser) -> IndexManager:
    return IndexManager(cache, store, parser)


@pytest.fixture
def tracker(index_dir: Path, parser: PathParser) -> RebuildTracker:
    return RebuildTracker(index_dir / "rebuild-list.json", parser)


@pytest.fixture
def write_index(index_dir: Path):
    """Write a raw partition file: write_index(PartitionKey, entries_or_text)."""

    def _write(partition: PartitionKey, content: list[str] | str) -> Path:
        index_dir.mkdir(parents=True, exist_ok=True)
        path = index_dir / partition.file_name
        text = content if isinstance(content, str) else json.dumps(content)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
