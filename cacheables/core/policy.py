"""Cache policies and the decision table that drives cache entries.

Each call to :meth:`cacheables.Cacheables.cacheable` carries one of the option
models below. :func:`evaluate` maps those options plus a snapshot of the entry
state to an :class:`Action`; it performs no I/O, which keeps every policy
testable with synthetic states.

============================  ===============================================
policy                        behaviour once the entry holds a value
============================  ===============================================
cache-only                    serve the stored value, never fetch
network-only                  always fetch, concurrent calls fetch separately
network-only-non-concurrent   join the running fetch or start one
max-age                       like non-concurrent once ``max_age`` ms elapsed
stale-while-revalidate        serve stored value, refresh in the background
============================  ===============================================

Before the first successful fetch every policy fetches (joining a fetch that
is already running).
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from cacheables.utils.errors import CachePolicyError


class CachePolicy(str, Enum):
    """Names of the supported cache policies."""

    CACHE_ONLY = "cache-only"
    NETWORK_ONLY = "network-only"
    NETWORK_ONLY_NON_CONCURRENT = "network-only-non-concurrent"
    MAX_AGE = "max-age"
    STALE_WHILE_REVALIDATE = "stale-while-revalidate"


class Action(str, Enum):
    """What an entry should do for a single call."""

    SERVE_CACHED = "serve-cached"
    FETCH_BLOCKING = "fetch-blocking"
    FETCH_JOIN_OR_START = "fetch-join-or-start"
    FETCH_BACKGROUND = "fetch-background"


class _BaseOptions(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    cache_policy: str

    @property
    def policy(self) -> CachePolicy:
        return CachePolicy(self.cache_policy)


class CacheOnlyOptions(_BaseOptions):
    cache_policy: Literal["cache-only"] = "cache-only"


class NetworkOnlyOptions(_BaseOptions):
    cache_policy: Literal["network-only"] = "network-only"


class NetworkOnlyNonConcurrentOptions(_BaseOptions):
    cache_policy: Literal["network-only-non-concurrent"] = "network-only-non-concurrent"


class MaxAgeOptions(_BaseOptions):
    """Refetch once ``max_age`` milliseconds passed since the last fetch started."""

    cache_policy: Literal["max-age"] = "max-age"
    max_age: float = Field(..., ge=0, description="Milliseconds")


class StaleWhileRevalidateOptions(_BaseOptions):
    """Serve immediately; refresh in the background when older than ``max_age``.

    Without ``max_age`` every call that finds no refresh running starts one.
    """

    cache_policy: Literal["stale-while-revalidate"] = "stale-while-revalidate"
    max_age: Optional[float] = Field(default=None, ge=0, description="Milliseconds")


CacheOptions = Annotated[
    Union[
        CacheOnlyOptions,
        NetworkOnlyOptions,
        NetworkOnlyNonConcurrentOptions,
        MaxAgeOptions,
        StaleWhileRevalidateOptions,
    ],
    Field(discriminator="cache_policy"),
]

_options_adapter: TypeAdapter[Any] = TypeAdapter(CacheOptions)

OptionsLike = Union[_BaseOptions, Mapping[str, Any], CachePolicy, str, None]


def resolve_options(options: OptionsLike, default: Optional[_BaseOptions] = None) -> _BaseOptions:
    """Normalise user supplied options into one of the option models.

    ``options`` may be an option model, a mapping such as
    ``{"cache_policy": "max-age", "max_age": 500}``, or a bare policy name for
    policies without parameters. ``None`` selects ``default`` (cache-only when
    no default is given).
    """

    if options is None:
        return default if default is not None else CacheOnlyOptions()
    if isinstance(options, _BaseOptions):
        return options
    if isinstance(options, CachePolicy):
        payload: Any = {"cache_policy": options.value}
    elif isinstance(options, str):
        payload = {"cache_policy": options}
    elif isinstance(options, Mapping):
        payload = dict(options)
    else:
        raise CachePolicyError(f"Unsupported cache options: {options!r}")
    try:
        return _options_adapter.validate_python(payload)
    except ValidationError as exc:
        raise CachePolicyError(f"Invalid cache options {payload!r}: {exc}") from exc


def is_expired(elapsed: Optional[float], max_age: Optional[float]) -> bool:
    """Return whether ``elapsed`` ms reached ``max_age``; unknown ages are expired."""

    if max_age is None or elapsed is None:
        return True
    return elapsed >= max_age


def evaluate(
    options: _BaseOptions,
    *,
    initialized: bool,
    in_flight: bool,
    elapsed: Optional[float],
) -> Action:
    """Choose the action for one call.

    ``elapsed`` is the number of milliseconds since the last successful fetch
    started, or ``None`` when the entry never completed one.
    """

    if not initialized:
        return Action.FETCH_JOIN_OR_START

    policy = options.policy
    if policy is CachePolicy.CACHE_ONLY:
        return Action.SERVE_CACHED
    if policy is CachePolicy.NETWORK_ONLY:
        return Action.FETCH_BLOCKING
    if policy is CachePolicy.NETWORK_ONLY_NON_CONCURRENT:
        return Action.FETCH_JOIN_OR_START
    if isinstance(options, MaxAgeOptions):
        if is_expired(elapsed, options.max_age):
            return Action.FETCH_JOIN_OR_START
        return Action.SERVE_CACHED
    if isinstance(options, StaleWhileRevalidateOptions):
        if not in_flight and is_expired(elapsed, options.max_age):
            return Action.FETCH_BACKGROUND
        return Action.SERVE_CACHED
    raise CachePolicyError(f"Unknown cache policy: {policy}")


__all__ = [
    "Action",
    "CacheOnlyOptions",
    "CacheOptions",
    "CachePolicy",
    "MaxAgeOptions",
    "NetworkOnlyNonConcurrentOptions",
    "NetworkOnlyOptions",
    "OptionsLike",
    "StaleWhileRevalidateOptions",
    "evaluate",
    "is_expired",
    "resolve_options",
]
