"""Tests for the Memcached driver against a mocked pymemcache client."""

from unittest.mock import MagicMock

import pytest
from pymemcache.exceptions import MemcacheUnexpectedCloseError

from cascache.core.exceptions import CacheConfigurationError
from cascache.core.types import MISSING, Lifetime
from cascache.drivers import memcached
from cascache.drivers.memcached import (
    MemcachedDriver,
    parse_cluster_config,
    parse_server,
)
from cascache.engine.fetcher import Fetcher
from cascache.engine.keys import KeyTransform

CLUSTER_REPLY = (
    b"CONFIG cluster 0 147\r\n"
    b"12\n"
    b"node-1.cache.amazonaws.com|10.0.0.1|11211 "
    b"node-2.cache.amazonaws.com||11212\n"
    b"\r\n"
    b"END\r\n"
)


class TestParsing:
    """Tests for server and cluster config parsing."""

    @pytest.mark.parametrize(
        "server, expected",
        [
            ("cache:11212", ("cache", 11212)),
            ("cache", ("cache", 11211)),
        ],
    )
    def test_parse_server(self, server, expected):
        """Test host[:port] strings are split with a default port."""
        assert parse_server(server) == expected

    def test_parse_cluster_config(self):
        """Test nodes are read from the config reply, preferring IPs."""
        assert parse_cluster_config(CLUSTER_REPLY) == [
            ("10.0.0.1", 11211),
            ("node-2.cache.amazonaws.com", 11212),
        ]

    def test_parse_empty_cluster_config(self):
        """Test a reply without nodes yields nothing."""
        assert parse_cluster_config("CONFIG cluster 0 2\r\n1\n\r\nEND\r\n") == []


class TestMemcachedDriver:
    """Tests for MemcachedDriver."""

    @pytest.mark.asyncio
    async def test_get_decodes_json(self):
        """Test values are JSON-decoded, and a miss is MISSING."""
        client = MagicMock()
        driver = MemcachedDriver(client)

        client.get.return_value = b'{"a": 1}'
        assert await driver.get("key") == {"a": 1}

        client.get.return_value = b"null"
        assert await driver.get("key") is None

        client.get.return_value = None
        assert await driver.get("key") is MISSING

    @pytest.mark.asyncio
    async def test_get_returns_raw_on_decode_failure(self):
        """Test undecodable values are returned raw."""
        client = MagicMock()
        client.get.return_value = b"\x80binary"

        assert await MemcachedDriver(client).get("key") == b"\x80binary"

    @pytest.mark.asyncio
    async def test_get_many(self):
        """Test batch reads only return present keys."""
        client = MagicMock()
        client.get_many.return_value = {"a": b"1", "b": b"[2]"}

        result = await MemcachedDriver(client).get_many(["a", "b", "c"])

        assert result == {"a": 1, "b": [2]}
        client.get_many.assert_called_once_with(["a", "b", "c"])

    @pytest.mark.asyncio
    async def test_get_many_empty_skips_network(self):
        """Test an empty batch never reaches the client."""
        client = MagicMock()

        assert await MemcachedDriver(client).get_many([]) == {}
        client.get_many.assert_not_called()

    @pytest.mark.asyncio
    async def test_set_with_and_without_ttl(self):
        """Test values are JSON-encoded and ttl maps to expire."""
        client = MagicMock()
        client.set.return_value = True
        driver = MemcachedDriver(client)

        assert await driver.set("a", {"x": 1}, ttl=30) is True
        assert await driver.set("b", None) is True

        client.set.assert_any_call("a", b'{"x": 1}', expire=30)
        client.set.assert_any_call("b", b"null", expire=0)

    @pytest.mark.asyncio
    async def test_set_many(self):
        """Test batch writes go out in one call."""
        client = MagicMock()

        await MemcachedDriver(client).set_many({"a": 1, "b": "two"}, ttl=10)

        client.set_many.assert_called_once_with({"a": b"1", "b": b'"two"'}, expire=10)

    @pytest.mark.asyncio
    async def test_replace_and_touch(self):
        """Test replace and touch report whether the key existed."""
        client = MagicMock()
        client.replace.return_value = False
        client.touch.return_value = True
        driver = MemcachedDriver(client)

        assert await driver.replace("a", 1, ttl=5) is False
        assert await driver.touch("a", 60) is True

        client.replace.assert_called_once_with("a", b"1", expire=5)
        client.touch.assert_called_once_with("a", expire=60)

    @pytest.mark.asyncio
    async def test_delete_many(self):
        """Test batch deletes count the keys that existed."""
        client = MagicMock()
        client.delete.side_effect = [True, False]
        driver = MemcachedDriver(client)

        assert await driver.delete_many(["a", "b"]) == 1

    @pytest.mark.asyncio
    async def test_flush_and_close(self):
        """Test flush_all and close are forwarded."""
        client = MagicMock()
        driver = MemcachedDriver(client)

        await driver.flush()
        await driver.close()

        client.flush_all.assert_called_once_with()
        client.close.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        """Test client errors are not swallowed."""
        client = MagicMock()
        client.get.side_effect = MemcacheUnexpectedCloseError()

        with pytest.raises(MemcacheUnexpectedCloseError):
            await MemcachedDriver(client).get("key")

    @pytest.mark.asyncio
    async def test_fetch_is_never_stale(self):
        """Test engines skip staleness checks since TTL is unknown."""
        client = MagicMock()
        client.get.return_value = b'"cached"'
        fetcher = Fetcher(MemcachedDriver(client), key_transform=KeyTransform.identity())

        async def compute():
            return "fresh"

        assert await fetcher.fetch("k", Lifetime(10, 5), compute) == "cached"
        client.set.assert_not_called()


class TestMemcachedConstruction:
    """Tests for building Memcached clients."""

    def test_single_server_uses_pooled_client(self, monkeypatch):
        """Test one server gives a pooled client with replies enabled."""
        pooled = MagicMock()
        monkeypatch.setattr(memcached, "PooledClient", pooled)

        driver = MemcachedDriver.from_servers("cache:11212")

        pooled.assert_called_once()
        args, kwargs = pooled.call_args
        assert args == (("cache", 11212),)
        assert kwargs["default_noreply"] is False
        assert driver.client is pooled.return_value

    def test_several_servers_use_hash_client(self, monkeypatch):
        """Test a server list is distributed with a hash client."""
        hashed = MagicMock()
        monkeypatch.setattr(memcached, "HashClient", hashed)

        MemcachedDriver.from_servers("a:11211, b:11212")

        args, kwargs = hashed.call_args
        assert args == ([("a", 11211), ("b", 11212)],)
        assert kwargs["use_pooling"] is True

    def test_no_servers(self):
        """Test an empty server list is rejected."""
        with pytest.raises(CacheConfigurationError):
            MemcachedDriver.from_servers("")

    def test_discover(self, monkeypatch):
        """Test auto-discovery builds a client over every cluster node."""
        config_client = MagicMock()
        config_client.return_value.raw_command.return_value = CLUSTER_REPLY
        hashed = MagicMock()
        monkeypatch.setattr(memcached, "Client", config_client)
        monkeypatch.setattr(memcached, "HashClient", hashed)

        MemcachedDriver.discover("config.cache.amazonaws.com:11211")

        config_client.assert_called_once()
        assert config_client.call_args.args == (("config.cache.amazonaws.com", 11211),)
        config_client.return_value.raw_command.assert_called_once_with(
            "config get cluster", end_tokens=b"END\r\n"
        )
        config_client.return_value.close.assert_called_once_with()
        assert hashed.call_args.args == (
            [("10.0.0.1", 11211), ("node-2.cache.amazonaws.com", 11212)],
        )

    def test_discover_without_nodes(self, monkeypatch):
        """Test an endpoint that reports no nodes is a configuration error."""
        config_client = MagicMock()
        config_client.return_value.raw_command.return_value = b"CONFIG cluster 0 2\r\n1\n\r\nEND\r\n"
        monkeypatch.setattr(memcached, "Client", config_client)

        with pytest.raises(CacheConfigurationError):
            MemcachedDriver.discover("config:11211")
