"""Custom exceptions used across the cacheables package.

Errors raised by fetch functions are never wrapped in these types; they reach
the awaiting callers unchanged.
"""
from __future__ import annotations


class CacheablesError(Exception):
    """Base exception for all library-specific errors."""


class ConfigurationError(CacheablesError):
    """Raised when configuration loading or validation fails."""


class CachePolicyError(CacheablesError, ValueError):
    """Raised when per-call cache options are invalid or incomplete."""


__all__ = [
    "CacheablesError",
    "ConfigurationError",
    "CachePolicyError",
]
