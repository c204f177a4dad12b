# src/stream/proxy.py - v1
"""Stream-wrapper proxy that answers existence checks from the local index.

Quiet stat queries go through the resolver chain first:

- Found: a synthesized stat is returned, no remote call.
- DefinitiveNotFound: None is returned, no remote call.
- Inconclusive, or any error while resolving: the authoritative backend is
  asked with the protocol-qualified path.

Every other operation is forwarded to the backend unchanged. Successful
deletes, renames and write flushes also update the index, best effort.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from s3_local_index.core.models import (
    DefinitiveNotFound,
    Found,
    Inconclusive,
    StatFlags,
    StatRecord,
)
from s3_local_index.index.maintenance import IndexMaintainer
from s3_local_index.logging.context import set_query_context
from s3_local_index.parser.path_parser import PathParser
from s3_local_index.stream.base_backend import BaseStreamBackend
from s3_local_index.stream.resolvers.base_resolver import BaseResolver

logger = logging.getLogger(__name__)

_WRITE_MODES = ("w", "a", "x", "c")


@dataclass
class ProxyStats:
    """How url_stat queries were answered."""

    found: int = 0
    not_found: int = 0
    delegated: int = 0
    errors: int = 0


class StreamWrapperProxy(BaseStreamBackend):
    """BaseStreamBackend that consults resolvers before the real backend."""

    def __init__(
        self,
        backend: BaseStreamBackend,
        resolver: BaseResolver,
        parser: PathParser,
        maintainer: IndexMaintainer | None = None,
    ) -> None:
        self._backend = backend
        self._resolver = resolver
        self._parser = parser
        self._maintainer = maintainer
        self.stats = ProxyStats()

        self._open_path: str | None = None
        self._open_writable = False
        self._pending_index = False

    # --- Stat ---

    def url_stat(self, path: str, flags: StatFlags = StatFlags.NONE) -> StatRecord | None:
        set_query_context("url_stat", path)
        normalized = self._parser.normalize(path)
        qualified = self._parser.normalize_with_protocol(path)

        if not flags & StatFlags.QUIET:
            return self._delegate_stat(qualified, flags)

        try:
            if not self._resolver.can_resolve(normalized, flags):
                return self._delegate_stat(qualified, flags)
            outcome = self._resolver.resolve(normalized, flags)
        except Exception:
            self.stats.errors += 1
            logger.exception("Resolver failed for %s, asking backend", path)
            return self._delegate_stat(qualified, flags)

        if isinstance(outcome, Found):
            self.stats.found += 1
            return outcome.stat
        if isinstance(outcome, DefinitiveNotFound):
            self.stats.not_found += 1
            return None
        if isinstance(outcome, Inconclusive):
            logger.debug("Inconclusive (%s) for %s", outcome.reason.value, path)
        return self._delegate_stat(qualified, flags)

    def _delegate_stat(self, path: str, flags: StatFlags) -> StatRecord | None:
        self.stats.delegated += 1
        logger.debug("Delegating url_stat for %s to backend", path)
        return self._backend.url_stat(path, flags)

    # --- File streams ---

    def stream_open(self, path: str, mode: str) -> bool:
        set_query_context("stream_open", path)
        opened = self._backend.stream_open(path, mode)
        writable = mode.startswith(_WRITE_MODES) or "+" in mode
        self._open_path = path if opened else None
        self._open_writable = opened and writable
        self._pending_index = self._open_writable and mode.startswith(("w", "x"))
        return opened

    def stream_read(self, count: int) -> bytes:
        return self._backend.stream_read(count)

    def stream_write(self, data: bytes) -> int:
        written = self._backend.stream_write(data)
        if written and self._open_writable:
            self._pending_index = True
        return written

    def stream_eof(self) -> bool:
        return self._backend.stream_eof()

    def stream_flush(self) -> bool:
        flushed = self._backend.stream_flush()
        if flushed and self._pending_index and self._open_path is not None:
            self._pending_index = False
            if self._maintainer is not None:
                self._maintainer.on_file_upload(self._open_path)
        return flushed

    def stream_close(self) -> None:
        if self._pending_index:
            self.stream_flush()
        self._backend.stream_close()
        self._open_path = None
        self._open_writable = False
        self._pending_index = False

    # --- Namespace operations ---

    def unlink(self, path: str) -> bool:
        set_query_context("unlink", path)
        deleted = self._backend.unlink(path)
        if deleted and self._maintainer is not None:
            self._maintainer.on_file_delete(path)
        return deleted

    def rename(self, src: str, dst: str) -> bool:
        set_query_context("rename", src)
        renamed = self._backend.rename(src, dst)
        if renamed and self._maintainer is not None:
            self._maintainer.on_file_delete(src)
            self._maintainer.on_file_upload(dst)
        return renamed

    def mkdir(self, path: str, mode: int = 0o777, recursive: bool = False) -> bool:
        return self._backend.mkdir(path, mode, recursive)

    def rmdir(self, path: str) -> bool:
        return self._backend.rmdir(path)

    # --- Directory listing ---

    def dir_opendir(self, path: str) -> bool:
        set_query_context("dir_opendir", path)
        return self._backend.dir_opendir(path)

    def dir_readdir(self) -> str | None:
        return self._backend.dir_readdir()

    def dir_closedir(self) -> None:
        self._backend.dir_closedir()
