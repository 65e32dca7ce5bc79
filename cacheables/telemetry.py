"""Timing telemetry for cache calls."""
from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import dataclass
from statistics import mean
from typing import AsyncIterator, Deque, Dict, List

from cacheables.utils.logging import get_logger, log_quietly

logger = get_logger(__name__)


@dataclass
class TimingSample:
    """Represents one timed cache call."""

    name: str
    duration: float
    metadata: Dict[str, str]


class CacheMonitor:
    """High-resolution timing collector with a bounded window of samples."""

    def __init__(self, *, window: int = 100) -> None:
        if window <= 0:
            raise ValueError("window must be positive")
        self._samples: Deque[TimingSample] = deque(maxlen=window)
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def track(self, name: str, **metadata: str) -> AsyncIterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - start
            async with self._lock:
                self._samples.append(TimingSample(name=name, duration=duration, metadata=metadata))
            log_quietly(
                logger,
                logging.INFO,
                "%s: %.3fms",
                name,
                duration * 1000.0,
                extra={"key": name, "duration_ms": duration * 1000.0, **metadata},
            )

    async def samples(self, name: str) -> List[TimingSample]:
        async with self._lock:
            return [sample for sample in self._samples if sample.name == name]

    async def average(self, name: str) -> float:
        durations = [sample.duration for sample in await self.samples(name)]
        return mean(durations) if durations else 0.0

    async def percentile(self, name: str, percentile: float) -> float:
        durations = sorted(sample.duration for sample in await self.samples(name))
        if not durations:
            return 0.0
        index = min(int(len(durations) * percentile), len(durations) - 1)
        return durations[index]


__all__ = ["CacheMonitor", "TimingSample"]
