# src/stream/resolvers/resolver_chain.py - v1
"""Chain of responsibility over resolvers: the first capable one answers."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from s3_local_index.core.models import (
    Inconclusive,
    InconclusiveReason,
    ResolutionOutcome,
    StatFlags,
)
from s3_local_index.stream.resolvers.base_resolver import BaseResolver

logger = logging.getLogger(__name__)


class ResolverChain(BaseResolver):
    """Ordered resolvers; order is significant."""

    resolver_id = "chain"

    def __init__(self, resolvers: Iterable[BaseResolver] = ()) -> None:
        self._resolvers: list[BaseResolver] = list(resolvers)

    def add_resolver(self, resolver: BaseResolver) -> ResolverChain:
        self._resolvers.append(resolver)
        return self

    @property
    def resolvers(self) -> list[BaseResolver]:
        return list(self._resolvers)

    def can_resolve(self, path: str, flags: StatFlags) -> bool:
        return any(r.can_resolve(path, flags) for r in self._resolvers)

    def resolve(self, path: str, flags: StatFlags) -> ResolutionOutcome:
        for resolver in self._resolvers:
            if resolver.can_resolve(path, flags):
                logger.debug("Using resolver %s for %s", resolver.resolver_id, path)
                return resolver.resolve(path, flags)

        logger.debug("No resolver found for %s", path)
        return Inconclusive(InconclusiveReason.NO_RESOLVER)
