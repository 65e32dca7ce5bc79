"""In-process memoizing cache for asynchronous fetches."""

from __future__ import annotations

from cacheables.adapters import CacheAdapter, InMemoryCacheAdapter
from cacheables.core import (
    Action,
    CacheConfigManager,
    CacheEntry,
    CacheOnlyOptions,
    CachePolicy,
    CacheSettings,
    CacheStats,
    Cacheables,
    MaxAgeOptions,
    NetworkOnlyNonConcurrentOptions,
    NetworkOnlyOptions,
    StaleWhileRevalidateOptions,
    evaluate,
    resolve_options,
)
from cacheables.telemetry import CacheMonitor
from cacheables.utils.errors import CacheablesError, CachePolicyError, ConfigurationError

__version__ = "2.0.0"

__all__ = [
    "Action",
    "CacheAdapter",
    "CacheConfigManager",
    "CacheEntry",
    "CacheMonitor",
    "CacheOnlyOptions",
    "CachePolicy",
    "CachePolicyError",
    "CacheSettings",
    "CacheStats",
    "Cacheables",
    "CacheablesError",
    "ConfigurationError",
    "InMemoryCacheAdapter",
    "MaxAgeOptions",
    "NetworkOnlyNonConcurrentOptions",
    "NetworkOnlyOptions",
    "StaleWhileRevalidateOptions",
    "evaluate",
    "resolve_options",
]
