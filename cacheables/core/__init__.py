"""Core cache machinery: policies, entries, the registry and settings."""

from __future__ import annotations

from cacheables.core.cacheables import Cacheables
from cacheables.core.config import CacheConfigManager, CacheSettings
from cacheables.core.entry import CacheEntry, CacheStats
from cacheables.core.policy import (
    Action,
    CacheOnlyOptions,
    CachePolicy,
    MaxAgeOptions,
    NetworkOnlyNonConcurrentOptions,
    NetworkOnlyOptions,
    StaleWhileRevalidateOptions,
    evaluate,
    resolve_options,
)

__all__ = [
    "Action",
    "CacheConfigManager",
    "CacheEntry",
    "CacheOnlyOptions",
    "CachePolicy",
    "CacheSettings",
    "CacheStats",
    "Cacheables",
    "MaxAgeOptions",
    "NetworkOnlyNonConcurrentOptions",
    "NetworkOnlyOptions",
    "StaleWhileRevalidateOptions",
    "evaluate",
    "resolve_options",
]
