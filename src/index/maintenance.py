# src/index/maintenance.py - v1
"""Keep partition indexes in step with uploads and deletions.

Hooks never raise index errors: a failed index update is logged and the file
operation it shadows carries on.
"""

from __future__ import annotations

import logging

from s3_local_index.index.exceptions import (
    IndexCorruptError,
    IndexManagerError,
    IndexNotFoundError,
    IndexWriteError,
)
from s3_local_index.index.index_manager import IndexManager
from s3_local_index.rebuild.rebuild_tracker import RebuildTracker

logger = logging.getLogger(__name__)


class IndexMaintainer:
    """Applies upload/delete events to the index, best effort."""

    def __init__(
        self,
        index_manager: IndexManager,
        tracker: RebuildTracker | None = None,
    ) -> None:
        self._index_manager = index_manager
        self._tracker = tracker

    def on_file_upload(self, path: str) -> str:
        """Record a newly written object. Returns the path unchanged."""
        try:
            self._index_manager.write(path)
            logger.debug("Indexed upload %s", path)
        except IndexManagerError as e:
            self._handle_failure("write", path, e)
        return path

    def on_file_delete(self, path: str) -> str:
        """Forget a deleted object. Returns the path unchanged."""
        try:
            self._index_manager.delete(path)
            logger.debug("Removed %s from index", path)
        except IndexManagerError as e:
            self._handle_failure("delete", path, e)
        return path

    def _handle_failure(self, action: str, path: str, error: IndexManagerError) -> None:
        if isinstance(error, IndexWriteError):
            logger.error("%s", error)
        elif isinstance(error, IndexNotFoundError):
            logger.info("Skipped index %s for %s: %s", action, path, error)
        else:
            logger.warning("Unexpected error on index %s for %s: %s", action, path, error)

        if isinstance(error, IndexCorruptError) and self._tracker is not None:
            self._tracker.add_for_path(path)
