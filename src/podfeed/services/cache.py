"""In-process TTL cache with single-flight computation per key."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

MISSING: Any = object()


@dataclass
class CacheStats:
    """Hit/miss counters for a cache instance."""

    hits: int = 0
    misses: int = 0


class TTLCache:
    """Time-bounded key/value store.

    Entries are visible for at most their TTL and are dropped lazily on read
    or by :meth:`sweep`. :meth:`get_or_compute` holds a per-key lock while the
    value is computed, so concurrent callers for the same missing key share a
    single upstream call. Failed computations are never stored.

    Example:
        >>> cache = TTLCache(default_ttl=90)
        >>> value = await cache.get_or_compute("key", load)
    """

    def __init__(
        self,
        default_ttl: float = 90.0,
        sweep_interval: float = 120.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the cache.

        Args:
            default_ttl: Seconds an entry stays visible unless overridden per call
            sweep_interval: Seconds between background sweeps
            clock: Monotonic time source (injectable for tests)
        """
        self.default_ttl = default_ttl
        self.sweep_interval = sweep_interval
        self.stats = CacheStats()
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        # Callers holding or queued on each lock
        self._lock_users: dict[str, int] = {}
        self._sweeper: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Any:
        """Return the live value for ``key`` or ``MISSING``."""
        entry = self._entries.get(key)
        if entry is None:
            return MISSING

        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return MISSING
        return value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store ``value``, replacing any previous entry for ``key``."""
        ttl = self.default_ttl if ttl is None else ttl
        self._entries[key] = (value, self._clock() + ttl)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[Any]],
        ttl: float | None = None,
    ) -> Any:
        """
        Return the cached value for ``key``, computing it on a miss.

        Args:
            key: Cache key
            compute: Coroutine factory producing the value
            ttl: Per-entry TTL override in seconds

        Returns:
            The cached or freshly computed value

        Raises:
            Exception: Whatever ``compute`` raises; nothing is cached then
        """
        value = self.get(key)
        if value is not MISSING:
            self.stats.hits += 1
            logger.debug("[CACHE HIT] %s", key)
            return value

        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                # Another caller may have filled the entry while we waited
                value = self.get(key)
                if value is not MISSING:
                    self.stats.hits += 1
                    logger.debug("[CACHE HIT] %s (after wait)", key)
                    return value

                self.stats.misses += 1
                logger.debug("[CACHE MISS] %s", key)
                value = await compute()
                self.set(key, value, ttl)
                return value
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]

    def sweep(self) -> int:
        """
        Drop expired entries and idle per-key locks.

        Returns:
            Number of expired entries removed
        """
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

        # A released lock may still have a woken waiter about to acquire it
        for key in [k for k in self._locks if k not in self._lock_users]:
            del self._locks[key]

        if expired:
            logger.debug("Cache sweep removed %d entries", len(expired))
        return len(expired)

    def start_sweeper(self) -> None:
        """Start periodic sweeping on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_forever())

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.sweep()
