# src/stream/resolvers/file_resolver.py - v1
"""Resolve quiet existence checks on leaf files from the partition index."""

from __future__ import annotations

import logging

from s3_local_index.core.models import (
    DefinitiveNotFound,
    Found,
    Inconclusive,
    InconclusiveReason,
    ResolutionOutcome,
    StatFlags,
    StatRecord,
)
from s3_local_index.index.exceptions import (
    IndexCorruptError,
    IndexNotFoundError,
    InvalidPathError,
)
from s3_local_index.index.index_manager import IndexManager
from s3_local_index.stream.resolvers.base_resolver import BaseResolver

logger = logging.getLogger(__name__)


class FileResolver(BaseResolver):
    """Membership check of a file path in its partition index.

    Only handles quiet stats (existence checks) of paths with an extension;
    generic stats and directory-looking paths are left to other resolvers or
    the backend.
    """

    resolver_id = "file"

    def __init__(self, index_manager: IndexManager) -> None:
        self._index_manager = index_manager
        self._parser = index_manager.parser

    def can_resolve(self, path: str, flags: StatFlags) -> bool:
        return (
            bool(flags & StatFlags.QUIET)
            and self._parser.looks_like_file(self._parser.normalize(path))
        )

    def resolve(self, path: str, flags: StatFlags) -> ResolutionOutcome:
        try:
            entries = self._index_manager.read(path)
        except IndexNotFoundError as e:
            logger.debug("Index missing: %s", e)
            return Inconclusive(InconclusiveReason.INDEX_MISSING)
        except IndexCorruptError as e:
            logger.warning("Index corrupt, needs rebuild: %s", e)
            return Inconclusive(InconclusiveReason.INDEX_CORRUPT)
        except InvalidPathError as e:
            logger.debug("Could not resolve path to index: %s", e)
            return Inconclusive(InconclusiveReason.PATH_UNPARSEABLE)

        if self._parser.normalize(path) not in entries:
            logger.debug("Entry not found: %s", path)
            return DefinitiveNotFound()

        logger.debug("Entry found: %s", path)
        return Found(StatRecord.synthetic("file"))
