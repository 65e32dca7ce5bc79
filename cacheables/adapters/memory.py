"""Default dictionary-backed adapter."""
from __future__ import annotations

from typing import Any, Dict

from cacheables.adapters.base import CacheAdapter


class InMemoryCacheAdapter(CacheAdapter):
    """Keep values in a plain dictionary owned by the adapter."""

    def __init__(self) -> None:
        self._store: Dict[str, Any] = {}

    def has(self, key: str) -> bool:
        return key in self._store

    def get(self, key: str) -> Any:
        return self._store.get(key)

    def put(self, key: str, value: Any) -> None:
        self._store[key] = value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def __len__(self) -> int:
        return len(self._store)


__all__ = ["InMemoryCacheAdapter"]
