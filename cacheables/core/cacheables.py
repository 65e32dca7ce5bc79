"""The :class:`Cacheables` registry, the public entry point of the library."""
from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import AsyncIterator, Awaitable, Callable, Dict, List, Optional, TypeVar, Union

from cacheables.adapters.base import CacheAdapter
from cacheables.adapters.memory import InMemoryCacheAdapter
from cacheables.core.config import CacheSettings
from cacheables.core.entry import CacheEntry, CacheStats
from cacheables.core.policy import OptionsLike, _BaseOptions, resolve_options
from cacheables.telemetry import CacheMonitor
from cacheables.utils.awaitables import maybe_await
from cacheables.utils.logging import get_logger, log_quietly

logger = get_logger(__name__)

T = TypeVar("T")

KEY_DELIMITER = ":"


class Cacheables:
    """Memoize asynchronous fetches under string keys.

    ``enabled``, ``log`` and ``log_timing`` are plain attributes and may be
    flipped at any time. Values are kept in ``adapter`` (an
    :class:`InMemoryCacheAdapter` unless another store is supplied).

    A key is expected to hold values of a single type; fetching different
    types under the same key is undefined behaviour.

    Example::

        cache = Cacheables()
        profile = await cache.cacheable(
            lambda: api.get_profile(user_id),
            Cacheables.key("user", user_id, "profile"),
            {"cache_policy": "max-age", "max_age": 60_000},
        )
    """

    def __init__(
        self,
        *,
        enabled: bool = True,
        log: bool = False,
        log_timing: bool = False,
        adapter: Optional[CacheAdapter] = None,
        default_options: OptionsLike = None,
        clock: Callable[[], float] = time.monotonic,
        monitor: Optional[CacheMonitor] = None,
    ) -> None:
        self.enabled = enabled
        self.log = log
        self.log_timing = log_timing
        self.adapter = adapter if adapter is not None else InMemoryCacheAdapter()
        self.default_options: _BaseOptions = resolve_options(default_options)
        self.monitor = monitor or CacheMonitor()
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    @classmethod
    def from_settings(cls, settings: CacheSettings, **kwargs) -> "Cacheables":
        return cls(
            enabled=settings.enabled,
            log=settings.log,
            log_timing=settings.log_timing,
            default_options=settings.default_policy,
            **kwargs,
        )

    async def apply_settings(self, settings: CacheSettings) -> None:
        """Update the runtime switches; usable as a config reload callback."""

        self.enabled = settings.enabled
        self.log = settings.log
        self.log_timing = settings.log_timing
        self.default_options = settings.default_policy

    @staticmethod
    def key(*parts: Union[str, int, float]) -> str:
        """Build a key by joining strings or numbers with ``:``."""

        return KEY_DELIMITER.join(str(part) for part in parts)

    async def cacheable(
        self,
        fetch: Callable[[], Awaitable[T]],
        key: str,
        options: OptionsLike = None,
    ) -> T:
        """Return the value for ``key``, fetching it according to ``options``.

        ``fetch`` is a zero-argument callable returning an awaitable, typically
        a lambda around a remote call. ``options`` selects the cache policy;
        see :mod:`cacheables.core.policy`. Errors raised by ``fetch`` reach
        every caller awaiting that fetch and are never cached.
        """

        resolved = resolve_options(options, self.default_options)
        if not self.enabled:
            if self.log:
                log_quietly(logger, logging.INFO, "CACHE: Caching disabled", extra={"key": key})
            return await fetch()

        entry = self._entries.get(key)
        if entry is None:
            entry = CacheEntry(key, self.adapter, clock=self._clock)
            self._entries[key] = entry

        async with self._timing(key, resolved):
            value = await entry.touch(fetch, resolved)

        if self.log:
            log_quietly(
                logger,
                logging.INFO,
                'Cacheable "%s": hits: %d, misses: %d',
                key,
                entry.hits,
                entry.misses,
                extra={"key": key, "policy": resolved.cache_policy},
            )
        return value

    async def delete(self, key: str) -> None:
        """Forget ``key``; the next call for it starts from scratch."""

        entry = self._entries.pop(key, None)
        if entry is None:
            return
        entry.dispose()
        await maybe_await(self.adapter.delete(key))
        if self.log:
            log_quietly(
                logger, logging.INFO, 'CACHE INVALIDATED: "%s" invalidated.', key, extra={"key": key}
            )

    async def clear(self) -> None:
        """Forget every key."""

        for key in self.keys():
            await self.delete(key)

    def keys(self) -> List[str]:
        return list(self._entries)

    def is_cached(self, key: str) -> bool:
        """Return whether an entry exists for ``key``.

        Freshness is deliberately not considered; max-age callers decide that
        through their policy.
        """

        return key in self._entries

    def stats(self, key: str) -> Optional[CacheStats]:
        entry = self._entries.get(key)
        return entry.stats() if entry is not None else None

    async def drain(self) -> None:
        """Wait until every pending background refresh has settled."""

        await asyncio.gather(*(entry.settle() for entry in list(self._entries.values())))

    @contextlib.asynccontextmanager
    async def _timing(self, key: str, options: _BaseOptions) -> AsyncIterator[None]:
        if not self.log_timing:
            yield
            return
        async with self.monitor.track(key, policy=options.cache_policy):
            yield


__all__ = ["Cacheables", "KEY_DELIMITER"]
