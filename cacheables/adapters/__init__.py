"""Storage adapters for cached values."""

from __future__ import annotations

from cacheables.adapters.base import CacheAdapter
from cacheables.adapters.memory import InMemoryCacheAdapter

__all__ = ["CacheAdapter", "InMemoryCacheAdapter"]
