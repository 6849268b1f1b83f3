"""Memcached storage driver for cascache.

pymemcache clients are blocking, so every call runs in a worker thread
through ``asyncio.to_thread``. The clients built here are pooled and
safe to share between those threads.
"""

import asyncio
import logging
from typing import Any

from pymemcache.client.base import Client, PooledClient
from pymemcache.client.hash import HashClient

from cascache.core.exceptions import CacheConfigurationError
from cascache.core.types import MISSING
from cascache.drivers.base import StorageDriver
from cascache.drivers.codec import decode, encode

logger = logging.getLogger(__name__)

DEFAULT_PORT = 11211

# Connect and read timeout in seconds
NET_TIMEOUT = 0.5


def parse_server(server: str) -> tuple[str, int]:
    """Split ``host[:port]`` into a (host, port) pair."""
    host, _, port = server.rpartition(":")
    if not host:
        return server, DEFAULT_PORT
    return host, int(port)


def parse_cluster_config(reply: bytes | str) -> list[tuple[str, int]]:
    """Parse the reply of ElastiCache's ``config get cluster`` command.

    The reply carries a config version line followed by one line of
    space separated ``hostname|ip|port`` nodes.

    Args:
        reply: Raw command reply

    Returns:
        (host, port) pairs, using the IP when one is given
    """
    if isinstance(reply, bytes):
        reply = reply.decode("utf-8")

    nodes = []
    for line in reply.splitlines():
        if "|" not in line:
            continue
        for node in line.split():
            hostname, ip, port = node.split("|")
            nodes.append((ip or hostname, int(port)))
    return nodes


class MemcachedDriver(StorageDriver):
    """Driver for Memcached (single server, several servers, or an
    auto-discovered ElastiCache cluster).

    Memcached cannot report remaining lifetimes, so engines treat values
    stored here as never stale.

    Example:
        driver = MemcachedDriver.from_servers(["cache-1:11211", "cache-2:11211"])
        await driver.set("user:1", {"name": "Ann"}, ttl=60)
    """

    supports_ttl = False

    def __init__(self, client: Any):
        """Initialize the driver.

        Args:
            client: A pymemcache client created with ``default_noreply=False``
        """
        self.client = client

    @classmethod
    def from_servers(cls, servers: str | list[str], **kwargs: Any) -> "MemcachedDriver":
        """Create a driver with a new pooled client.

        Args:
            servers: ``host[:port]`` or a list of them; keys are
                distributed over several servers by hashing
            **kwargs: Extra options for the pymemcache client

        Returns:
            A MemcachedDriver instance
        """
        if isinstance(servers, str):
            servers = [server.strip() for server in servers.split(",") if server.strip()]
        if not servers:
            raise CacheConfigurationError("At least one Memcached server is required")

        options = {
            "connect_timeout": NET_TIMEOUT,
            "timeout": NET_TIMEOUT,
            "default_noreply": False,
            **kwargs,
        }
        nodes = [parse_server(server) for server in servers]
        if len(nodes) == 1:
            return cls(PooledClient(nodes[0], **options))
        return cls(HashClient(nodes, use_pooling=True, **options))

    @classmethod
    def discover(cls, config_endpoint: str, **kwargs: Any) -> "MemcachedDriver":
        """Create a driver for the nodes behind an ElastiCache config endpoint.

        Args:
            config_endpoint: ``host[:port]`` of the cluster configuration endpoint
            **kwargs: Extra options for the pymemcache client

        Returns:
            A MemcachedDriver over every discovered node
        """
        config_client = Client(
            parse_server(config_endpoint),
            connect_timeout=NET_TIMEOUT,
            timeout=NET_TIMEOUT,
        )
        try:
            reply = config_client.raw_command("config get cluster", end_tokens=b"END\r\n")
        finally:
            config_client.close()

        nodes = parse_cluster_config(reply)
        if not nodes:
            raise CacheConfigurationError(
                f"No Memcached nodes discovered at {config_endpoint}",
                hint="Check that the endpoint is an ElastiCache configuration endpoint",
            )
        logger.info(f"Discovered {len(nodes)} Memcached node(s) at {config_endpoint}")
        return cls.from_servers([f"{host}:{port}" for host, port in nodes], **kwargs)

    async def get(self, key: str) -> Any:
        raw = await asyncio.to_thread(self.client.get, key)
        if raw is None:
            return MISSING
        return decode(raw)

    async def get_many(self, keys: list[str]) -> dict[str, Any]:
        if not keys:
            return {}

        replies = await asyncio.to_thread(self.client.get_many, keys)
        return {
            key: decode(raw)
            for key, raw in replies.items()
            if raw is not None
        }

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> bool:
        data = encode(value).encode("utf-8")
        return bool(await asyncio.to_thread(self.client.set, key, data, expire=ttl or 0))

    async def set_many(
        self,
        mapping: dict[str, Any],
        ttl: int | None = None,
    ) -> None:
        if not mapping:
            return

        data = {key: encode(value).encode("utf-8") for key, value in mapping.items()}
        await asyncio.to_thread(self.client.set_many, data, expire=ttl or 0)

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
        data = encode(value).encode("utf-8")
        return bool(
            await asyncio.to_thread(self.client.replace, key, data, expire=ttl or 0)
        )

    async def touch(self, key: str, ttl: int) -> bool:
        """Reset the lifetime of an existing key.

        Args:
            key: The storage key
            ttl: New time-to-live in seconds

        Returns:
            True if the key was found
        """
        return bool(await asyncio.to_thread(self.client.touch, key, expire=ttl))

    async def delete(self, key: str) -> bool:
        return bool(await asyncio.to_thread(self.client.delete, key))

    async def flush(self) -> None:
        await asyncio.to_thread(self.client.flush_all)

    async def close(self) -> None:
        """Close the underlying client connections."""
        await asyncio.to_thread(self.client.close)
