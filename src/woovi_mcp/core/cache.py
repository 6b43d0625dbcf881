"""
Response cache - TTL-based caching for idempotent reads.

In-memory, owned by a single client instance. Entries expire lazily:
an expired entry is removed the first time a ``get`` observes it, or
when the whole store is cleared. There is no background sweeper.

Default TTLs:
- Balance: 60s
- Customer lookups: 5 min
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import Any

from woovi_mcp.core.logging import get_logger

logger = get_logger("cache")

# TTLs in seconds
BALANCE_TTL = 60.0
CUSTOMER_TTL = 300.0


@dataclass
class CacheEntry:
    """A cached value and the absolute instant it stops being served."""

    value: Any
    expires_at: float


class ResponseCache:
    """
    Key-value store with per-entry expiry.

    Last write wins: ``set`` overwrites any existing entry. No locking;
    the cache is only touched from the event loop thread.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._store: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Any | None:
        """
        Get cached value if not expired.

        Returns None on miss or expiry.
        """
        entry = self._store.get(key)
        if entry is None:
            return None

        if self._clock() >= entry.expires_at:
            # Expired - remove and return miss
            del self._store[key]
            logger.debug(f"Cache entry expired: {key}")
            return None

        return entry.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        """
        Store value with TTL.

        Args:
            key: Cache key, e.g. "balance:default"
            value: Value to cache
            ttl: Time to live in seconds
        """
        self._store[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def delete(self, key: str) -> bool:
        """Remove one entry. Returns True if it existed."""
        return self._store.pop(key, None) is not None

    def clear(self) -> None:
        """Drop every entry."""
        self._store.clear()

    def __len__(self) -> int:
        # Counts expired entries that have not been read since expiring
        return len(self._store)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._store))

    async def get_or_fetch(
        self,
        key: str,
        fetch_fn: Callable[[], Awaitable[Any]],
        ttl: float,
    ) -> tuple[Any, bool]:
        """
        Get from cache or fetch and store.

        None results are not cached.

        Returns:
            Tuple of (value, cache_hit)
        """
        cached = self.get(key)
        if cached is not None:
            return cached, True

        value = await fetch_fn()
        if value is not None:
            self.set(key, value, ttl)

        return value, False
