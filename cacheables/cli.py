"""Typer-based developer CLI for inspecting settings and trying policies."""
from __future__ import annotations

import asyncio
import itertools
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cacheables.core.cacheables import Cacheables
from cacheables.core.config import CacheConfigManager
from cacheables.core.policy import CachePolicy
from cacheables.utils.errors import CacheablesError
from cacheables.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

app = typer.Typer(help="Memoizing cache for asynchronous fetches")
console = Console()


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging threshold"),
) -> None:
    configure_logging(level=log_level.upper())


@app.command("config")
def config_show(
    path: Optional[Path] = typer.Option(None, "--path", "-p", help="Settings file (YAML or TOML)"),
) -> None:
    """Print the effective cache settings."""

    manager = CacheConfigManager(path)
    try:
        settings = asyncio.run(manager.load())
    except CacheablesError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]", soft_wrap=True)
        raise typer.Exit(code=1) from exc

    table = Table(title=f"cacheables settings ({manager.config_path})")
    table.add_column("setting")
    table.add_column("value")
    for name, value in settings.model_dump().items():
        table.add_row(name, str(value))
    console.print(table)


async def _simulate(
    policy: CachePolicy,
    *,
    calls: int,
    rounds: int,
    delay: float,
    pause: float,
    max_age: Optional[float],
    log: bool,
) -> Dict[str, Any]:
    cache = Cacheables(log=log)
    counter = itertools.count(1)
    fetches = 0

    async def fetch() -> int:
        nonlocal fetches
        fetches += 1
        value = next(counter)
        await asyncio.sleep(delay)
        return value

    options: Dict[str, Any] = {"cache_policy": policy.value}
    if max_age is not None:
        options["max_age"] = max_age

    results: List[List[int]] = []
    for index in range(rounds):
        if index:
            await asyncio.sleep(pause)
        values = await asyncio.gather(
            *(cache.cacheable(fetch, "simulated", options) for _ in range(calls))
        )
        results.append(list(values))
    await cache.drain()
    stats = cache.stats("simulated")
    return {
        "results": results,
        "fetches": fetches,
        "hits": stats.hits if stats else 0,
        "misses": stats.misses if stats else 0,
    }


@app.command("simulate")
def simulate(
    policy: CachePolicy = typer.Option(CachePolicy.CACHE_ONLY, "--policy", help="Cache policy to exercise"),
    calls: int = typer.Option(3, "--calls", min=1, help="Concurrent calls per round"),
    rounds: int = typer.Option(3, "--rounds", min=1, help="Number of rounds"),
    delay: float = typer.Option(0.05, "--delay", min=0.0, help="Seconds each fetch takes"),
    pause: float = typer.Option(0.1, "--pause", min=0.0, help="Seconds between rounds"),
    max_age: Optional[float] = typer.Option(None, "--max-age", min=0.0, help="Max age in milliseconds"),
    log: bool = typer.Option(False, "--log", help="Log hit and miss counters"),
) -> None:
    """Run concurrent calls against one key and report what the policy did."""

    try:
        report = asyncio.run(
            _simulate(
                policy,
                calls=calls,
                rounds=rounds,
                delay=delay,
                pause=pause,
                max_age=max_age,
                log=log,
            )
        )
    except CacheablesError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]", soft_wrap=True)
        raise typer.Exit(code=1) from exc

    table = Table(title=f"{policy.value}: {calls} calls x {rounds} rounds")
    table.add_column("round", justify="right")
    table.add_column("values")
    for index, values in enumerate(report["results"], start=1):
        table.add_row(str(index), ", ".join(str(value) for value in values))
    console.print(table)
    console.print(
        f"fetches: {report['fetches']}  hits: {report['hits']}  misses: {report['misses']}",
        soft_wrap=True,
    )


__all__ = ["app"]
