# src/stream/base_backend.py - v1
"""Stream backend interface: every operation the proxy forwards.

Paths are ``{protocol}://{key}`` strings. A backend instance holds at most
one open file stream and one open directory listing at a time, matching one
stream-wrapper handle.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from s3_local_index.core.models import StatFlags, StatRecord


class BaseStreamBackend(ABC):
    """Unified interface for stream-wrapper backends."""

    @abstractmethod
    def url_stat(self, path: str, flags: StatFlags = StatFlags.NONE) -> StatRecord | None:
        """Stat a path. None means not found."""

    @abstractmethod
    def stream_open(self, path: str, mode: str) -> bool:
        """Open a file stream in the given fopen-style mode."""

    @abstractmethod
    def stream_read(self, count: int) -> bytes:
        """Read up to ``count`` bytes from the open stream."""

    @abstractmethod
    def stream_write(self, data: bytes) -> int:
        """Write to the open stream; returns bytes accepted."""

    @abstractmethod
    def stream_eof(self) -> bool:
        """Whether the read position reached the end of the stream."""

    @abstractmethod
    def stream_flush(self) -> bool:
        """Persist buffered writes."""

    @abstractmethod
    def stream_close(self) -> None:
        """Close the open stream, flushing pending writes."""

    @abstractmethod
    def unlink(self, path: str) -> bool:
        """Delete the object at path."""

    @abstractmethod
    def rename(self, src: str, dst: str) -> bool:
        """Move an object."""

    @abstractmethod
    def mkdir(self, path: str, mode: int = 0o777, recursive: bool = False) -> bool:
        """Create a directory."""

    @abstractmethod
    def rmdir(self, path: str) -> bool:
        """Remove a directory."""

    @abstractmethod
    def dir_opendir(self, path: str) -> bool:
        """Open a directory listing."""

    @abstractmethod
    def dir_readdir(self) -> str | None:
        """Next entry name of the open listing, None when exhausted."""

    @abstractmethod
    def dir_closedir(self) -> None:
        """Close the open listing."""
