"""Helpers for values that may or may not need awaiting."""

from __future__ import annotations

import inspect
from typing import Awaitable, TypeVar, Union

T = TypeVar("T")


async def maybe_await(result: Union[T, Awaitable[T]]) -> T:
    """Return ``result``, awaiting it first when it is awaitable.

    Storage adapters are free to implement their methods synchronously or as
    coroutines; callers route every adapter result through this helper.
    """

    if inspect.isawaitable(result):
        return await result
    return result


__all__ = ["maybe_await"]
