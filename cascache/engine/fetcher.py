"""Single-tier cache-aside engine."""

import asyncio
import logging
from typing import Any

from cascache.core.types import Lifetime
from cascache.drivers.base import StorageDriver
from cascache.engine.base import BaseFetcher
from cascache.engine.keys import KeyTransform

logger = logging.getLogger(__name__)


class Fetcher(BaseFetcher):
    """Read-through cache over one storage driver.

    Typical usage:
        fetcher = Fetcher(RedisDriver.from_url(url), key_transform=KeyTransform.hashing())

        user = await fetcher.fetch(f"user:{uid}", 300, lambda: repo.get_user(uid))
        users = await fetcher.multi_fetch(uids, "user", 300, repo.get_users)
    """

    def __init__(self, driver: StorageDriver, *, key_transform: KeyTransform):
        """Initialize the fetcher.

        Args:
            driver: The storage driver (owned by the caller)
            key_transform: How logical keys map to storage keys
        """
        super().__init__(key_transform=key_transform)
        self.driver = driver

    async def _lookup(self, key: str, lifetime: Lifetime) -> tuple[Any, Any]:
        if lifetime.stale_time is None:
            return await self.driver.get(key), None

        if not self.driver.supports_ttl:
            logger.debug(f"{self.driver.name} cannot report TTL, skipping staleness check")
            return await self.driver.get(key), None

        value, remaining = await asyncio.gather(
            self.driver.get(key),
            self.driver.ttl(key),
        )
        return value, remaining

    async def _lookup_many(self, keys: list[str], ttl: int) -> dict[str, Any]:
        return await self.driver.get_many(keys)

    async def _store(self, key: str, value: Any, ttl: int) -> None:
        await self.driver.set(key, value, ttl)

    async def _store_many(self, mapping: dict[str, Any], ttl: int) -> None:
        await asyncio.gather(
            *(self.driver.set(key, value, ttl) for key, value in mapping.items())
        )

    async def _delete_keys(self, keys: list[str]) -> bool:
        deleted = await asyncio.gather(*(self.driver.delete(key) for key in keys))
        return any(deleted)

    async def flush(self) -> None:
        await self.driver.flush()
