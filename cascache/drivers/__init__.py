"""Storage drivers for cascache.

Engines depend only on :class:`StorageDriver`; the concrete drivers here
cover an in-process LRU store, Redis (single node or cluster) and
Memcached.
"""

from cascache.drivers.base import StorageDriver
from cascache.drivers.memcached import MemcachedDriver
from cascache.drivers.memory import LRUDriver
from cascache.drivers.redis import RedisClusterDriver, RedisDriver

__all__ = [
    "StorageDriver",
    "LRUDriver",
    "RedisDriver",
    "RedisClusterDriver",
    "MemcachedDriver",
]
