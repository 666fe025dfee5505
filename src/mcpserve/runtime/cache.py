"""ResponseCache: in-process TTL store with single-flight ``get_or_fetch``.

The cache is an optimization for redundant outbound calls, never a source of
truth. Entries expire lazily (the read that finds an expired entry removes
it) and can also be swept proactively with :meth:`ResponseCache.sweep_expired`
or a background sweeper task.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

FetchFn = Callable[[], Any] | Callable[[], Awaitable[Any]]


@dataclass
class CacheEntry:
    key: str
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class ResponseCache:
    """Key/TTL value store guarded by a single lock.

    Concurrent :meth:`get_or_fetch` misses on the same key share one in-flight
    fetch: only the first caller runs ``fetch_fn`` and every other caller
    awaits its outcome, success or failure.

    Args:
        default_ttl: TTL in seconds used when a call does not pass one.
        clock: Monotonic time source; injectable so tests can move time.
    """

    def __init__(
        self,
        *,
        default_ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._inflight: dict[str, asyncio.Future[Any]] = {}
        self._lock = threading.Lock()
        self._sweeper: asyncio.Task[None] | None = None
        self.hits = 0
        self.misses = 0

    # -- basic operations ---------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for *key*, or *default* when absent or expired."""
        found, value = self._lookup(key)
        return value if found else default

    def __contains__(self, key: str) -> bool:
        return self._lookup(key)[0]

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        """Store *value* for *ttl_seconds*. A non-positive TTL stores nothing."""
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            self.remove(key)
            return
        entry = CacheEntry(key=key, value=value, expires_at=self._clock() + ttl)
        with self._lock:
            self._entries[key] = entry

    def remove(self, key: str) -> bool:
        """Drop *key*; return whether an entry existed."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def sweep_expired(self) -> int:
        """Remove every expired entry regardless of access pattern."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Swept %d expired cache entries", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # -- get-or-fetch -------------------------------------------------------

    async def get_or_fetch(
        self,
        key: str,
        fetch_fn: FetchFn,
        ttl_seconds: float | None = None,
    ) -> Any:
        """Return the cached value for *key*, fetching and storing it on a miss.

        ``fetch_fn`` may be a plain callable or a coroutine function. A failed
        fetch is not cached; its exception propagates to every waiter.
        """
        found, value = self._lookup(key)
        if found:
            return value

        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and not entry.is_expired(self._clock()):
                return entry.value
            future = self._inflight.get(key)
            if future is None:
                future = asyncio.ensure_future(self._fetch_and_store(key, fetch_fn, ttl_seconds))
                future.add_done_callback(_consume_exception)
                self._inflight[key] = future
            else:
                logger.debug("Joining in-flight fetch for %s", key)

        return await asyncio.shield(future)

    async def _fetch_and_store(self, key: str, fetch_fn: FetchFn, ttl_seconds: float | None) -> Any:
        try:
            result = fetch_fn()
            if inspect.isawaitable(result):
                result = await result
            self.set(key, result, ttl_seconds)
            return result
        finally:
            with self._lock:
                self._inflight.pop(key, None)

    def _lookup(self, key: str) -> tuple[bool, Any]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return False, None
            if entry.is_expired(now):
                del self._entries[key]
                self.misses += 1
                return False, None
            self.hits += 1
            return True, entry.value

    # -- background sweeping ------------------------------------------------

    def start_sweeper(self, interval: float) -> None:
        """Run :meth:`sweep_expired` every *interval* seconds on the running loop."""
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.get_running_loop().create_task(self._sweep_loop(interval))

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._sweeper
        self._sweeper = None

    async def _sweep_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self.sweep_expired()


def _consume_exception(future: asyncio.Future[Any]) -> None:
    # Every waiter may have been cancelled; retrieve the outcome so it is never reported as lost.
    if not future.cancelled():
        future.exception()
