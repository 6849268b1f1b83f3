"""In-process LRU storage driver for cascache."""

import asyncio
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from cascache.core.exceptions import CacheConfigurationError
from cascache.core.types import MISSING
from cascache.drivers.base import StorageDriver


@dataclass
class CacheEntry:
    """A single stored value with optional expiration."""

    value: Any
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        """Check if this entry has expired."""
        if self.expires_at is None:
            return False
        return now >= self.expires_at


class LRUDriver(StorageDriver):
    """Least Recently Used (LRU) store with TTL support.

    This driver evicts the least recently used entries when it reaches
    max capacity. It is meant to be the first, fastest tier in front of
    a network store, or the only store in single-process deployments
    and tests.

    Values are kept by reference, so callers should not mutate objects
    after caching them.
    """

    supports_ttl = True

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the LRU driver.

        Args:
            max_size: Maximum number of entries
            default_ttl: TTL in seconds used when set() gets none
                (None or 0 for no expiration)
            clock: Source of the current time in seconds
        """
        if max_size < 1:
            raise CacheConfigurationError(f"max_size must be at least 1, got {max_size}")

        self._cache: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = asyncio.Lock()
        self._clock = clock
        self.max_size = max_size
        self.default_ttl = default_ttl
        self._hits = 0
        self._misses = 0

    def _lookup(self, key: str) -> CacheEntry | None:
        """Return the live entry for ``key``, dropping it if expired.

        Must be called with the lock held.
        """
        entry = self._cache.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._cache[key]
            return None
        return entry

    def _store(self, key: str, value: Any, ttl: int | None) -> None:
        actual_ttl = ttl if ttl is not None else self.default_ttl

        expires_at = None
        if actual_ttl:
            expires_at = self._clock() + actual_ttl

        # If key exists, update and move to end
        if key in self._cache:
            self._cache[key] = CacheEntry(value=value, expires_at=expires_at)
            self._cache.move_to_end(key)
            return

        # Evict LRU entry if at capacity
        while len(self._cache) >= self.max_size:
            self._cache.popitem(last=False)

        self._cache[key] = CacheEntry(value=value, expires_at=expires_at)

    async def get(self, key: str) -> Any:
        """Get a value from the store.

        Args:
            key: The storage key

        Returns:
            The stored value or MISSING if not found/expired
        """
        async with self._lock:
            entry = self._lookup(key)
            if entry is None:
                self._misses += 1
                return MISSING

            # Move to end (most recently used)
            self._cache.move_to_end(key)
            self._hits += 1
            return entry.value

    async def get_many(self, keys: list[str]) -> dict[str, Any]:
        if not keys:
            return {}

        result = {}
        async with self._lock:
            for key in keys:
                entry = self._lookup(key)
                if entry is None:
                    self._misses += 1
                    continue
                self._cache.move_to_end(key)
                self._hits += 1
                result[key] = entry.value
        return result

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> bool:
        """Set a value in the store.

        Args:
            key: The storage key
            value: The value to store
            ttl: Time-to-live in seconds (None uses default, 0 never expires)

        Returns:
            Always True
        """
        async with self._lock:
            self._store(key, value, ttl)
        return True

    async def set_many(
        self,
        mapping: dict[str, Any],
        ttl: int | None = None,
    ) -> None:
        async with self._lock:
            for key, value in mapping.items():
                self._store(key, value, ttl)

    async def delete(self, key: str) -> bool:
        """Delete a value from the store.

        Args:
            key: The storage key

        Returns:
            True if the key existed
        """
        async with self._lock:
            if self._lookup(key) is None:
                return False
            del self._cache[key]
            return True

    async def ttl(self, key: str) -> Any:
        """Get the remaining lifetime of a key.

        Args:
            key: The storage key

        Returns:
            Remaining seconds, None for no expiry, MISSING if absent
        """
        async with self._lock:
            entry = self._lookup(key)
            if entry is None:
                return MISSING
            if entry.expires_at is None:
                return None
            return entry.expires_at - self._clock()

    async def flush(self) -> None:
        """Clear all entries from the store."""
        async with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    @property
    def size(self) -> int:
        """Get the current number of entries in the store."""
        return len(self._cache)

    def stats(self) -> dict:
        """Get store statistics including hit rate.

        Returns:
            Dictionary with store statistics
        """
        total = self._hits + self._misses
        hit_rate = self._hits / total if total > 0 else 0.0

        return {
            "size": len(self._cache),
            "max_size": self.max_size,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": hit_rate,
            "default_ttl": self.default_ttl,
        }
