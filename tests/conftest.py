import asyncio
from typing import Any, Dict

import pytest

from cacheables.adapters import CacheAdapter


class FakeClock:
    """Manually advanced monotonic clock, in seconds."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, milliseconds: float) -> None:
        self.now += milliseconds / 1000.0


class SlowCacheAdapter(CacheAdapter):
    """Coroutine-based adapter that suspends on every operation."""

    def __init__(self, latency: float = 0.01) -> None:
        self.latency = latency
        self.store: Dict[str, Any] = {}

    async def has(self, key: str) -> bool:
        await asyncio.sleep(self.latency)
        return key in self.store

    async def get(self, key: str) -> Any:
        await asyncio.sleep(self.latency)
        return self.store.get(key)

    async def put(self, key: str, value: Any) -> None:
        await asyncio.sleep(self.latency)
        self.store[key] = value

    async def delete(self, key: str) -> None:
        await asyncio.sleep(self.latency)
        self.store.pop(key, None)


class Source:
    """Counts invocations of fetch functions it hands out."""

    def __init__(self) -> None:
        self.calls = 0

    def returning(self, value: Any, delay: float = 0.0):
        async def fetch() -> Any:
            self.calls += 1
            await asyncio.sleep(delay)
            return value

        return fetch

    def failing(self, exc: Exception, delay: float = 0.0):
        async def fetch() -> Any:
            self.calls += 1
            await asyncio.sleep(delay)
            raise exc

        return fetch


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def source() -> Source:
    return Source()


@pytest.fixture()
def slow_adapter() -> SlowCacheAdapter:
    return SlowCacheAdapter()
