"""Redis storage drivers for cascache."""

import asyncio
from typing import Any

import redis.asyncio as redis
from redis.asyncio.cluster import RedisCluster

from cascache.core.types import MISSING
from cascache.drivers.base import StorageDriver
from cascache.drivers.codec import decode, encode

# Replies of the TTL command for keys without a remaining lifetime
_TTL_NO_EXPIRY = -1
_TTL_NO_KEY = -2


class RedisDriver(StorageDriver):
    """Driver for a single Redis node.

    The client is owned by the caller; this driver never closes it
    unless :meth:`close` is called explicitly.

    Example:
        driver = RedisDriver.from_url("redis://localhost:6379/0")
        await driver.set("user:1", {"name": "Ann"}, ttl=60)
    """

    supports_ttl = True

    def __init__(self, client: redis.Redis):
        """Initialize the driver.

        Args:
            client: A connected redis.asyncio client
        """
        self.client = client

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> "RedisDriver":
        """Create a driver with a new client for ``url``.

        Args:
            url: Redis connection URL
            **kwargs: Extra options for the redis client

        Returns:
            A RedisDriver instance
        """
        return cls(redis.Redis.from_url(url, decode_responses=True, **kwargs))

    async def get(self, key: str) -> Any:
        raw = await self.client.get(key)
        if raw is None:
            return MISSING
        return decode(raw)

    async def get_many(self, keys: list[str]) -> dict[str, Any]:
        if not keys:
            return {}

        replies = await self.client.mget(keys)
        return {
            key: decode(raw)
            for key, raw in zip(keys, replies)
            if raw is not None
        }

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> bool:
        if ttl:
            reply = await self.client.set(key, encode(value), ex=ttl)
        else:
            reply = await self.client.set(key, encode(value))
        return bool(reply)

    async def set_many(
        self,
        mapping: dict[str, Any],
        ttl: int | None = None,
    ) -> None:
        if not mapping:
            return

        async with self.client.pipeline(transaction=False) as pipe:
            for key, value in mapping.items():
                if ttl:
                    pipe.set(key, encode(value), ex=ttl)
                else:
                    pipe.set(key, encode(value))
            await pipe.execute()

    async def replace(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> bool:
        """Overwrite a value only if the key already exists.

        Args:
            key: The storage key
            value: The new value
            ttl: Time-to-live in seconds (None or 0 for no expiration)

        Returns:
            True if the key existed and was replaced
        """
        if ttl:
            reply = await self.client.set(key, encode(value), ex=ttl, xx=True)
        else:
            reply = await self.client.set(key, encode(value), xx=True)
        return bool(reply)

    async def touch(self, key: str, ttl: int) -> bool:
        """Reset the lifetime of an existing key.

        Args:
            key: The storage key
            ttl: New time-to-live in seconds

        Returns:
            True if the key exists and its timeout was set
        """
        return bool(await self.client.expire(key, ttl))

    async def delete(self, key: str) -> bool:
        return await self.client.delete(key) > 0

    async def delete_many(self, keys: list[str]) -> int:
        if not keys:
            return 0
        return await self.client.delete(*keys)

    async def ttl(self, key: str) -> Any:
        reply = await self.client.ttl(key)
        if reply == _TTL_NO_KEY:
            return MISSING
        if reply == _TTL_NO_EXPIRY:
            return None
        return reply

    async def flush(self) -> None:
        # Only the current database is flushed, not the whole server
        await self.client.flushdb()

    async def close(self) -> None:
        """Close the underlying client connection."""
        await self.client.aclose()


class RedisClusterDriver(RedisDriver):
    """Driver for a Redis Cluster.

    Multi-key commands are split per hash slot, since keys derived from
    different arguments rarely share one.
    """

    def __init__(self, client: RedisCluster):
        """Initialize the driver.

        Args:
            client: A redis.asyncio cluster client
        """
        super().__init__(client)

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> "RedisClusterDriver":
        return cls(RedisCluster.from_url(url, decode_responses=True, **kwargs))

    async def get_many(self, keys: list[str]) -> dict[str, Any]:
        if not keys:
            return {}

        replies = await self.client.mget_nonatomic(keys)
        return {
            key: decode(raw)
            for key, raw in zip(keys, replies)
            if raw is not None
        }

    async def set_many(
        self,
        mapping: dict[str, Any],
        ttl: int | None = None,
    ) -> None:
        await asyncio.gather(
            *(self.set(key, value, ttl) for key, value in mapping.items())
        )

    async def flush(self) -> None:
        await self.client.flushdb(target_nodes=RedisCluster.PRIMARIES)
