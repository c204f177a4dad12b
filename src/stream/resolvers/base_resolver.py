# src/stream/resolvers/base_resolver.py - v1
"""Abstract resolver interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from s3_local_index.core.models import ResolutionOutcome, StatFlags


class BaseResolver(ABC):
    """Answers stat queries from local state when it can."""

    resolver_id: str = "base"

    @abstractmethod
    def can_resolve(self, path: str, flags: StatFlags) -> bool:
        """Whether this resolver handles the query at all."""

    @abstractmethod
    def resolve(self, path: str, flags: StatFlags) -> ResolutionOutcome:
        """Found, DefinitiveNotFound or Inconclusive for the query."""
