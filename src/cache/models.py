# src/cache/models.py - v2
"""Cache domain models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class CacheEntry(BaseModel):
    """Single entry held by an in-process cache layer.

    ``expires_at`` is on the owning layer's clock; None means no expiry.
    """

    key: str
    value: Any
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now > self.expires_at
