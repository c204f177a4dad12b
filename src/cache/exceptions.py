# src/cache/exceptions.py - v1
"""Cache layer errors."""

from __future__ import annotations


class CacheLayerError(Exception):
    """An individual cache layer or service failed.

    Never fatal: CompositeCache and ExternalCache treat it as a failed layer.
    """
