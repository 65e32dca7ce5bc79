"""Shared helpers: errors, logging and awaitable plumbing."""

from __future__ import annotations

from cacheables.utils.errors import CacheablesError, CachePolicyError, ConfigurationError
from cacheables.utils.logging import configure_logging, get_logger, log_quietly

__all__ = [
    "CacheablesError",
    "CachePolicyError",
    "ConfigurationError",
    "configure_logging",
    "get_logger",
    "log_quietly",
]
