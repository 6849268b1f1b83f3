"""Cache-aside orchestration shared by the single-tier and tiered engines.

Subclasses only decide how keys are read from, written to and deleted
from their storage; hit/miss reconciliation, stale fallback and the
batch contract live here.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Any, TypeVar

from cascache.core.exceptions import CacheConfigurationError, FetcherContractError
from cascache.core.types import MISSING, Lifetime, is_cacheable, unwrap
from cascache.engine.keys import (
    KeyTransform,
    NamespaceSpec,
    dedupe,
    namespace_key,
    split_namespace,
)

logger = logging.getLogger(__name__)

A = TypeVar("A")
R = TypeVar("R")

Compute = Callable[[], Awaitable[R]]
BatchCompute = Callable[[list[A]], Awaitable[Sequence[R]]]


class BaseFetcher(ABC):
    """Read-through cache engine over some storage.

    Concurrent calls for the same missing key are not coalesced: each
    call computes and writes on its own, and the store keeps the last
    write.
    """

    def __init__(self, *, key_transform: KeyTransform):
        """Initialize the engine.

        Args:
            key_transform: How logical keys map to storage keys
        """
        if key_transform is None:
            raise CacheConfigurationError(
                "key_transform is required; use KeyTransform.identity() "
                "to store keys unchanged"
            )
        self.key_transform = key_transform

    @abstractmethod
    async def _lookup(self, key: str, lifetime: Lifetime) -> tuple[Any, Any]:
        """Read one storage key.

        Returns:
            (value or MISSING, remaining TTL or None when unknown)
        """

    @abstractmethod
    async def _lookup_many(self, keys: list[str], ttl: int) -> dict[str, Any]:
        """Read storage keys, returning only the ones found."""

    @abstractmethod
    async def _store(self, key: str, value: Any, ttl: int) -> None:
        """Write one computed value."""

    @abstractmethod
    async def _store_many(self, mapping: dict[str, Any], ttl: int) -> None:
        """Write computed values; must not return before all writes finish."""

    @abstractmethod
    async def _delete_keys(self, keys: list[str]) -> bool:
        """Delete storage keys, returning True if any existed."""

    @abstractmethod
    async def flush(self) -> None:
        """Remove every entry from the underlying storage."""

    async def fetch(
        self,
        key: str,
        lifetime: int | Lifetime,
        compute: Compute,
    ) -> Any:
        """Return the cached value for ``key``, computing it on a miss.

        A stale entry (see :class:`Lifetime`) is refreshed by calling
        ``compute``; if that raises, the stale value is returned instead.

        Args:
            key: Logical cache key
            lifetime: Seconds to keep the value, or a Lifetime with a
                stale window
            compute: Async callable producing the value

        Returns:
            The cached or freshly computed value
        """
        lifetime = Lifetime.coerce(lifetime)
        storage_key = self.key_transform(key)

        value, remaining = await self._lookup(storage_key, lifetime)
        if value is not MISSING and not lifetime.is_stale(remaining):
            logger.debug(f"Cache hit for {storage_key}")
            return value

        if value is MISSING:
            logger.debug(f"Cache miss for {storage_key}")
        else:
            logger.debug(f"Stale entry for {storage_key} (ttl={remaining}), refreshing")

        try:
            result = await compute()
        except Exception as e:
            if value is MISSING:
                raise
            logger.warning(
                f"Refreshing {storage_key} failed, serving cached value: {e!r}"
            )
            return value

        if is_cacheable(result):
            await self._store(storage_key, result, lifetime.cache_time)
        return unwrap(result)

    async def delete(self, key: str) -> bool:
        """Delete the cached value for ``key``.

        Returns:
            True if the key existed
        """
        return await self._delete_keys([self.key_transform(key)])

    def storage_keys(self, args: Iterable[Any], namespace: NamespaceSpec) -> list[str]:
        """Derive the storage key of every batch argument, in order."""
        name, arg_to_key = split_namespace(namespace)
        return [
            self.key_transform(namespace_key(name, arg_to_key, arg))
            for arg in args
        ]

    async def multi_fetch(
        self,
        args: Iterable[A],
        namespace: NamespaceSpec,
        lifetime: int | Lifetime,
        compute: BatchCompute,
    ) -> list[Any]:
        """Return one value per argument, computing only the missing ones.

        ``compute`` is called at most once, with the missing arguments in
        their original order, and must return exactly one result for each.
        Results wrapped in NotCacheable are returned but never stored.

        Args:
            args: Arguments to look up
            namespace: Namespace string, or (namespace, arg_to_key) pair
            lifetime: Seconds to keep computed values
            compute: Async callable mapping missing arguments to results

        Returns:
            Values in the same order and length as ``args``

        Raises:
            FetcherContractError: If compute returns the wrong number of results
        """
        args = list(args)
        if not args:
            return []

        ttl = Lifetime.coerce(lifetime).cache_time
        keys = self.storage_keys(args, namespace)

        cached = {
            key: value
            for key, value in (await self._lookup_many(dedupe(keys), ttl)).items()
            if value is not MISSING
        }
        results = [cached[key] if key in cached else MISSING for key in keys]
        missing = [index for index, key in enumerate(keys) if key not in cached]

        logger.debug(f"multi_fetch: {len(args) - len(missing)} hits, {len(missing)} misses")
        if not missing:
            return results

        computed = list(await compute([args[index] for index in missing]))
        if len(computed) != len(missing):
            raise FetcherContractError(expected=len(missing), actual=len(computed))

        to_store = {}
        for index, result in zip(missing, computed):
            results[index] = unwrap(result)
            if is_cacheable(result):
                to_store[keys[index]] = result

        if to_store:
            await self._store_many(to_store, ttl)
        return results

    async def multi_fetch_delete(
        self,
        args: Iterable[Any],
        namespace: NamespaceSpec,
    ) -> bool:
        """Delete the cached values of batch arguments.

        Args:
            args: Arguments whose entries should be removed
            namespace: The namespace used when they were fetched

        Returns:
            True if any entry existed
        """
        keys = dedupe(self.storage_keys(args, namespace))
        if not keys:
            return False
        return await self._delete_keys(keys)
