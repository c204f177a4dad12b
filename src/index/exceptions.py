# src/index/exceptions.py - v1
"""Index errors. Callers branch on the concrete type (or ``error_id``)."""

from __future__ import annotations


class IndexManagerError(Exception):
    """Base class for index read/write failures."""

    error_id = "index_error"

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class InvalidPathError(IndexManagerError):
    """Path does not map onto any partition."""

    error_id = "entry_invalid_path"

    def __init__(self, path: str) -> None:
        super().__init__(f"Path does not match any index partition: {path}", path)


class IndexNotFoundError(IndexManagerError):
    """The partition has no index file yet."""

    error_id = "index_not_found"

    def __init__(self, path: str, index_file: str) -> None:
        super().__init__(f"No index file {index_file} for path {path}", path)
        self.index_file = index_file


class IndexCorruptError(IndexManagerError):
    """The partition index file exists but is not a JSON array of paths."""

    error_id = "index_corrupt"

    def __init__(self, index_file: str, reason: str = "", path: str | None = None) -> None:
        detail = f": {reason}" if reason else ""
        super().__init__(f"Corrupt index file {index_file}{detail}", path)
        self.index_file = index_file


class IndexWriteError(IndexManagerError):
    """Persisting a partition to its index file failed."""

    error_id = "cannot_write_to_index"

    def __init__(self, index_file: str, path: str | None = None) -> None:
        super().__init__(f"Failed to write index file: {index_file}", path)
        self.index_file = index_file
