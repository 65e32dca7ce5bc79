"""Storage adapter interface consulted by cache entries."""
from __future__ import annotations

from typing import Any, Awaitable, Union


class CacheAdapter:
    """Backing store for cached values.

    Every method may return its result directly or as an awaitable. Entries
    await adapter calls one at a time within a single cache operation; the
    adapter remains responsible for its own internal consistency.
    """

    def has(self, key: str) -> Union[bool, Awaitable[bool]]:
        """Return whether a value is stored under ``key``."""

        raise NotImplementedError

    def get(self, key: str) -> Union[Any, Awaitable[Any]]:
        """Return the value stored under ``key``."""

        raise NotImplementedError

    def put(self, key: str, value: Any) -> Union[None, Awaitable[None]]:
        """Store ``value`` under ``key``."""

        raise NotImplementedError

    def delete(self, key: str) -> Union[None, Awaitable[None]]:
        """Remove ``key``; missing keys are ignored."""

        raise NotImplementedError


__all__ = ["CacheAdapter"]
