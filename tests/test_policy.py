import pytest

from cacheables.core.policy import (
    Action,
    CacheOnlyOptions,
    CachePolicy,
    MaxAgeOptions,
    NetworkOnlyNonConcurrentOptions,
    NetworkOnlyOptions,
    StaleWhileRevalidateOptions,
    evaluate,
    is_expired,
    resolve_options,
)
from cacheables.utils.errors import CachePolicyError


ALL_OPTIONS = [
    CacheOnlyOptions(),
    NetworkOnlyOptions(),
    NetworkOnlyNonConcurrentOptions(),
    MaxAgeOptions(max_age=100),
    StaleWhileRevalidateOptions(),
    StaleWhileRevalidateOptions(max_age=100),
]


@pytest.mark.parametrize("options", ALL_OPTIONS, ids=lambda options: options.cache_policy)
def test_uninitialized_entries_always_fetch(options) -> None:
    for in_flight in (False, True):
        action = evaluate(options, initialized=False, in_flight=in_flight, elapsed=None)
        assert action is Action.FETCH_JOIN_OR_START


def test_cache_only_serves_cached() -> None:
    action = evaluate(CacheOnlyOptions(), initialized=True, in_flight=True, elapsed=10_000)
    assert action is Action.SERVE_CACHED


def test_network_only_always_fetches_independently() -> None:
    assert evaluate(NetworkOnlyOptions(), initialized=True, in_flight=False, elapsed=0) is Action.FETCH_BLOCKING
    assert evaluate(NetworkOnlyOptions(), initialized=True, in_flight=True, elapsed=0) is Action.FETCH_BLOCKING


def test_non_concurrent_joins_or_starts() -> None:
    options = NetworkOnlyNonConcurrentOptions()
    assert evaluate(options, initialized=True, in_flight=True, elapsed=0) is Action.FETCH_JOIN_OR_START
    assert evaluate(options, initialized=True, in_flight=False, elapsed=0) is Action.FETCH_JOIN_OR_START


@pytest.mark.parametrize(
    ("elapsed", "expected"),
    [
        (0, Action.SERVE_CACHED),
        (50, Action.SERVE_CACHED),
        (99.9, Action.SERVE_CACHED),
        (100, Action.FETCH_JOIN_OR_START),
        (150, Action.FETCH_JOIN_OR_START),
        (None, Action.FETCH_JOIN_OR_START),
    ],
)
def test_max_age_boundary(elapsed, expected) -> None:
    action = evaluate(MaxAgeOptions(max_age=100), initialized=True, in_flight=False, elapsed=elapsed)
    assert action is expected


def test_stale_while_revalidate_without_max_age_refreshes_when_idle() -> None:
    options = StaleWhileRevalidateOptions()
    assert evaluate(options, initialized=True, in_flight=False, elapsed=0) is Action.FETCH_BACKGROUND
    assert evaluate(options, initialized=True, in_flight=True, elapsed=0) is Action.SERVE_CACHED


def test_stale_while_revalidate_respects_max_age() -> None:
    options = StaleWhileRevalidateOptions(max_age=100)
    assert evaluate(options, initialized=True, in_flight=False, elapsed=50) is Action.SERVE_CACHED
    assert evaluate(options, initialized=True, in_flight=False, elapsed=150) is Action.FETCH_BACKGROUND
    assert evaluate(options, initialized=True, in_flight=True, elapsed=150) is Action.SERVE_CACHED


def test_is_expired_treats_unknown_age_as_expired() -> None:
    assert is_expired(None, 100)
    assert is_expired(5, None)
    assert not is_expired(5, 100)


def test_resolve_options_defaults_to_cache_only() -> None:
    assert isinstance(resolve_options(None), CacheOnlyOptions)
    default = NetworkOnlyOptions()
    assert resolve_options(None, default) is default


def test_resolve_options_accepts_names_and_mappings() -> None:
    assert resolve_options("network-only").policy is CachePolicy.NETWORK_ONLY
    assert resolve_options(CachePolicy.NETWORK_ONLY_NON_CONCURRENT).policy is CachePolicy.NETWORK_ONLY_NON_CONCURRENT
    options = resolve_options({"cache_policy": "max-age", "max_age": 250})
    assert isinstance(options, MaxAgeOptions)
    assert options.max_age == 250
    swr = resolve_options({"cache_policy": "stale-while-revalidate"})
    assert isinstance(swr, StaleWhileRevalidateOptions)
    assert swr.max_age is None


def test_resolve_options_passes_models_through() -> None:
    options = MaxAgeOptions(max_age=10)
    assert resolve_options(options) is options


@pytest.mark.parametrize(
    "options",
    [
        "max-age",
        {"cache_policy": "max-age"},
        {"cache_policy": "max-age", "max_age": -1},
        {"cache_policy": "cache-first"},
        {"max_age": 100},
        {"cache_policy": "cache-only", "max_age": 100},
        42,
    ],
)
def test_resolve_options_rejects_invalid_options(options) -> None:
    with pytest.raises(CachePolicyError):
        resolve_options(options)


def test_policy_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        resolve_options({"cache_policy": "max-age"})
