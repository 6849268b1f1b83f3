"""Cascading multi-tier cache-aside engine."""

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from cascache.core.exceptions import CacheConfigurationError
from cascache.core.types import MISSING, DeletePolicy, Lifetime
from cascache.drivers.base import StorageDriver
from cascache.engine.base import BaseFetcher
from cascache.engine.keys import KeyTransform, dedupe

logger = logging.getLogger(__name__)


class TieredFetcher(BaseFetcher):
    """Read-through cache over an ordered list of storage tiers.

    Reads check each tier in order and backfill the tiers above the one
    that had the value. Computed values are written to every tier.

    Typical usage:
        fetcher = TieredFetcher(
            [
                LRUDriver(max_size=1000),            # L1: in-process
                RedisDriver.from_url(redis_url),     # L2: shared
            ],
            key_transform=KeyTransform.hashing(),
        )
    """

    def __init__(
        self,
        tiers: Sequence[StorageDriver],
        *,
        key_transform: KeyTransform,
        delete_policy: DeletePolicy = DeletePolicy.ALL,
    ):
        """Initialize the tiered fetcher.

        Args:
            tiers: Storage drivers in priority order (first = fastest)
            key_transform: How logical keys map to storage keys, shared
                by all tiers
            delete_policy: Whether a failing tier fails a delete
                (ALL) or is only logged (BEST_EFFORT)
        """
        if not tiers:
            raise CacheConfigurationError("At least one storage tier is required")
        super().__init__(key_transform=key_transform)
        self._tiers = tuple(tiers)
        self.delete_policy = DeletePolicy(delete_policy)

    @property
    def tiers(self) -> tuple[StorageDriver, ...]:
        """The storage tiers, fastest first."""
        return self._tiers

    async def _cascade(self, key: str, ttl: int | None) -> tuple[Any, int | None]:
        for index, tier in enumerate(self._tiers):
            value = await tier.get(key)
            if value is MISSING:
                continue
            if index:
                logger.debug(f"Backfilling {key} from {tier.name} into {index} tier(s)")
                await asyncio.gather(
                    *(upper.set(key, value, ttl) for upper in self._tiers[:index])
                )
            return value, index
        return MISSING, None

    async def cascaded_get(self, key: str, ttl: int | None = None) -> Any:
        """Get a storage key from the first tier that has it.

        The value is copied into every faster tier before returning.

        Args:
            key: The storage key
            ttl: Time-to-live for backfilled copies

        Returns:
            The value or MISSING if no tier has it
        """
        value, _ = await self._cascade(key, ttl)
        return value

    async def cascaded_get_many(
        self,
        keys: list[str],
        ttl: int | None = None,
    ) -> dict[str, Any]:
        """Get storage keys, each from the first tier that has it.

        Args:
            keys: The storage keys
            ttl: Time-to-live for backfilled copies

        Returns:
            Dictionary of key -> value for keys found in any tier
        """
        found: dict[str, Any] = {}
        remaining = dedupe(keys)

        for index, tier in enumerate(self._tiers):
            if not remaining:
                break

            hits = {
                key: value
                for key, value in (await tier.get_many(remaining)).items()
                if value is not MISSING
            }
            if not hits:
                continue

            found.update(hits)
            if index:
                logger.debug(
                    f"Backfilling {len(hits)} key(s) from {tier.name} into {index} tier(s)"
                )
                await asyncio.gather(
                    *(upper.set_many(hits, ttl) for upper in self._tiers[:index])
                )
            remaining = [key for key in remaining if key not in hits]

        return found

    async def _lookup(self, key: str, lifetime: Lifetime) -> tuple[Any, Any]:
        value, index = await self._cascade(key, lifetime.cache_time)
        if value is MISSING or lifetime.stale_time is None:
            return value, None

        tier = self._tiers[index]
        if not tier.supports_ttl:
            logger.debug(f"{tier.name} cannot report TTL, skipping staleness check")
            return value, None
        return value, await tier.ttl(key)

    async def _lookup_many(self, keys: list[str], ttl: int) -> dict[str, Any]:
        return await self.cascaded_get_many(keys, ttl)

    async def _store(self, key: str, value: Any, ttl: int) -> None:
        await asyncio.gather(*(tier.set(key, value, ttl) for tier in self._tiers))

    async def _store_many(self, mapping: dict[str, Any], ttl: int) -> None:
        await asyncio.gather(*(tier.set_many(mapping, ttl) for tier in self._tiers))

    async def _delete_keys(self, keys: list[str]) -> bool:
        results = await asyncio.gather(
            *(tier.delete_many(keys) for tier in self._tiers),
            return_exceptions=True,
        )

        deleted = False
        failures = []
        for tier, result in zip(self._tiers, results):
            if isinstance(result, Exception):
                failures.append((tier, result))
            elif isinstance(result, BaseException):
                raise result
            elif result:
                deleted = True

        if failures:
            if self.delete_policy is DeletePolicy.ALL:
                raise failures[0][1]
            for tier, error in failures:
                logger.warning(f"Failed to delete {len(keys)} key(s) from {tier.name}: {error!r}")

        return deleted

    async def flush(self) -> None:
        """Flush every tier."""
        await asyncio.gather(*(tier.flush() for tier in self._tiers))

    def stats(self) -> dict:
        """Get statistics from all tiers.

        Returns:
            Dictionary with statistics from each tier
        """
        return {
            "tiers": [
                {
                    "type": tier.name,
                    "supports_ttl": tier.supports_ttl,
                    **(tier.stats() if hasattr(tier, "stats") else {}),
                }
                for tier in self._tiers
            ]
        }
