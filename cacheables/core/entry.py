"""Per-key cache state machine.

An entry starts uninitialized and becomes initialized after its first
successful fetch (or when the storage adapter already holds a value for the
key). Fetches run as :class:`asyncio.Task` objects so concurrent callers can
await the same pending result; the most recently started fetch is the
entry's in-flight fetch until it settles.

Fetch start times, not completion times, are recorded: an entry refreshed by
a slow fetch looks younger than the wall clock at completion suggests.
"""
from __future__ import annotations

import asyncio
import functools
import logging
import time
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

from cacheables.adapters.base import CacheAdapter
from cacheables.core.policy import Action, _BaseOptions, evaluate
from cacheables.utils.awaitables import maybe_await
from cacheables.utils.logging import get_logger, log_quietly

logger = get_logger(__name__)

T = TypeVar("T")

Fetch = Callable[[], Awaitable[T]]


@dataclass
class CacheStats:
    """Snapshot of an entry's counters."""

    key: str
    hits: int
    misses: int
    initialized: bool
    last_fetch: Optional[float]
    fetching: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class CacheEntry(Generic[T]):
    """Cache state for a single key."""

    def __init__(
        self,
        key: str,
        adapter: CacheAdapter,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.key = key
        self.hits = 0
        self.misses = 0
        self._adapter = adapter
        self._clock = clock
        self._initialized = False
        self._last_fetch: Optional[float] = None
        self._in_flight: Optional[asyncio.Task[T]] = None
        self._background: Optional[asyncio.Task[T]] = None
        self._detached = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def last_fetch(self) -> Optional[float]:
        """Clock reading taken when the last successful fetch started."""

        return self._last_fetch

    @property
    def fetching(self) -> bool:
        return self._in_flight is not None

    def elapsed(self) -> Optional[float]:
        """Milliseconds since the last successful fetch started."""

        if self._last_fetch is None:
            return None
        return (self._clock() - self._last_fetch) * 1000.0

    async def touch(self, fetch: Fetch[T], options: _BaseOptions) -> T:
        """Serve one call according to ``options``."""

        if not self._initialized and await maybe_await(self._adapter.has(self.key)):
            log_quietly(
                logger, logging.DEBUG, "entry hydrated from store", extra={"key": self.key}
            )
            self._initialized = True

        action = evaluate(
            options,
            initialized=self._initialized,
            in_flight=self._in_flight is not None,
            elapsed=self.elapsed(),
        )

        if action is Action.SERVE_CACHED:
            self.hits += 1
            return await self._read()

        if action is Action.FETCH_BACKGROUND:
            # Read first so a fast refresh cannot leak into this call's result.
            value = await self._read()
            if self._in_flight is None:
                self._start(fetch, background=True)
            self.hits += 1
            return value

        if action is Action.FETCH_JOIN_OR_START and self._in_flight is not None:
            task = self._in_flight
            if task is self._background:
                # Somebody awaits this refresh now; it must not be cancelled on delete.
                self._background = None
            log_quietly(
                logger, logging.DEBUG, "joining in-flight fetch", extra={"key": self.key}
            )
        else:
            task = self._start(fetch)

        value = await asyncio.shield(task)
        self.misses += 1
        return value

    def stats(self) -> CacheStats:
        return CacheStats(
            key=self.key,
            hits=self.hits,
            misses=self.misses,
            initialized=self._initialized,
            last_fetch=self._last_fetch,
            fetching=self.fetching,
        )

    def dispose(self) -> None:
        """Detach the entry from its store and cancel a pending background refresh.

        Foreground fetches keep running for the callers awaiting them but no
        longer write their result into the store.
        """

        self._detached = True
        if self._background is not None and not self._background.done():
            self._background.cancel()
        self._background = None
        self._in_flight = None

    async def settle(self) -> None:
        """Wait for a pending background refresh, ignoring its outcome."""

        task = self._background
        if task is None:
            return
        await asyncio.wait([task])

    def _start(self, fetch: Fetch[T], *, background: bool = False) -> asyncio.Task[T]:
        started = self._clock()
        task = asyncio.ensure_future(self._run(fetch, started))
        self._in_flight = task
        task.add_done_callback(functools.partial(self._on_done, background=background))
        if background:
            self._background = task
        log_quietly(
            logger,
            logging.DEBUG,
            "fetch started",
            extra={"key": self.key, "background": background},
        )
        return task

    async def _run(self, fetch: Fetch[T], started: float) -> T:
        try:
            value = await fetch()
            if not self._detached:
                await maybe_await(self._adapter.put(self.key, value))
                self._last_fetch = started
                self._initialized = True
            return value
        finally:
            if self._in_flight is asyncio.current_task():
                self._in_flight = None

    def _on_done(self, task: asyncio.Task[T], *, background: bool) -> None:
        if self._background is task:
            self._background = None
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None and background:
            log_quietly(
                logger,
                logging.WARNING,
                "background refresh failed",
                extra={"key": self.key},
                exc_info=exc,
            )

    async def _read(self) -> T:
        return await maybe_await(self._adapter.get(self.key))


__all__ = ["CacheEntry", "CacheStats", "Fetch"]
