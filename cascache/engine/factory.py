"""Build cache engines from settings."""

import logging

from cascache.core.settings import CascacheSettings, get_settings
from cascache.drivers.base import StorageDriver
from cascache.drivers.memcached import MemcachedDriver
from cascache.drivers.memory import LRUDriver
from cascache.drivers.redis import RedisClusterDriver, RedisDriver
from cascache.engine.base import BaseFetcher
from cascache.engine.fetcher import Fetcher
from cascache.engine.keys import KeyTransform
from cascache.engine.tiered import TieredFetcher

logger = logging.getLogger(__name__)


def create_remote_tiers(settings: CascacheSettings) -> list[StorageDriver]:
    """Create the configured network drivers, Redis before Memcached."""
    tiers: list[StorageDriver] = []

    if settings.redis_url:
        driver_class = RedisClusterDriver if settings.redis_cluster else RedisDriver
        tiers.append(driver_class.from_url(settings.redis_url))

    if settings.memcached_servers:
        if settings.memcached_auto_discovery:
            tiers.append(MemcachedDriver.discover(settings.memcached_servers))
        else:
            tiers.append(MemcachedDriver.from_servers(settings.memcached_servers))

    return tiers


def create_fetcher(settings: CascacheSettings | None = None) -> BaseFetcher:
    """Create a fetcher from settings.

    Without a network store this is a single in-process LRU tier.
    Otherwise the LRU tier sits in front of Redis and/or Memcached.

    Args:
        settings: Settings to use (defaults to get_settings())

    Returns:
        A Fetcher or TieredFetcher
    """
    settings = settings or get_settings()
    key_transform = KeyTransform.from_name(settings.key_transform, settings.key_prefix)

    local = LRUDriver(
        max_size=settings.local_max_size,
        default_ttl=settings.local_default_ttl,
    )
    remote = create_remote_tiers(settings)
    if not remote:
        logger.info(f"Using in-process cache ({key_transform!r})")
        return Fetcher(local, key_transform=key_transform)

    names = ", ".join(tier.name for tier in remote)
    logger.info(f"Using in-process cache in front of {names} ({key_transform!r})")
    return TieredFetcher(
        [local, *remote],
        key_transform=key_transform,
        delete_policy=settings.delete_policy,
    )
