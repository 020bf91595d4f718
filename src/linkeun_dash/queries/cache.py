"""Keyed query cache with a staleness window and a retry policy.

Entries are served while fresh and refetched on the next access once stale;
nothing refreshes in the background. The store is a bounded TTL cache, so stale
entries are dropped and the oldest ones make room once it is full.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Hashable
from typing import Any

import httpx
from cachetools import TTLCache
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

logger = logging.getLogger(__name__)

type QueryKey = tuple[Hashable, ...]

DEFAULT_MAX_ENTRIES = 1000


def should_retry(exc: BaseException) -> bool:
    """Retry HTTP failures, except 401 which will not fix itself."""

    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code != 401
    return isinstance(exc, httpx.HTTPError)


class QueryCache:
    def __init__(
        self,
        *,
        stale_seconds: float = 5 * 60,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        max_retries: int = 3,
        wait: wait_base | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_retries = max_retries
        self._wait = wait if wait is not None else wait_exponential(multiplier=1, min=1, max=30)
        self._entries: TTLCache[QueryKey, Any] = TTLCache(
            maxsize=max_entries, ttl=stale_seconds, timer=clock
        )

    def __len__(self) -> int:
        return len(self._entries)

    def is_fresh(self, key: QueryKey) -> bool:
        return key in self._entries

    async def fetch[T](self, key: QueryKey, loader: Callable[[], Awaitable[T]]) -> T:
        try:
            return self._entries[key]
        except KeyError:
            pass

        value = await self._load(key, loader)
        self._entries[key] = value
        return value

    async def _load[T](self, key: QueryKey, loader: Callable[[], Awaitable[T]]) -> T:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_retries + 1),
            retry=retry_if_exception(should_retry),
            wait=self._wait,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info(
                        "Retrying query %s (attempt %d)", key[0], attempt.retry_state.attempt_number
                    )
                value = await loader()
        return value

    def invalidate(self, *prefix: Hashable) -> int:
        """Drop every entry whose key starts with `prefix`; returns how many."""

        self._entries.expire()
        doomed = [k for k in list(self._entries) if k[: len(prefix)] == prefix]
        for k in doomed:
            self._entries.pop(k, None)
        return len(doomed)
