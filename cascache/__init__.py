"""cascache: cache-aside fetching over cascaded storage tiers."""

__version__ = "0.1.0"

# Core components
from cascache.core.exceptions import (
    CacheConfigurationError,
    CascacheError,
    FetcherContractError,
    UnsupportedOperationError,
)
from cascache.core.settings import CascacheSettings, get_settings
from cascache.core.types import MISSING, DeletePolicy, Lifetime, NotCacheable

# Drivers
from cascache.drivers import (
    LRUDriver,
    MemcachedDriver,
    RedisClusterDriver,
    RedisDriver,
    StorageDriver,
)

# Engines
from cascache.engine import (
    BaseFetcher,
    Fetcher,
    KeyTransform,
    TieredFetcher,
    create_fetcher,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "CascacheError",
    "CacheConfigurationError",
    "FetcherContractError",
    "UnsupportedOperationError",
    "CascacheSettings",
    "get_settings",
    "MISSING",
    "DeletePolicy",
    "Lifetime",
    "NotCacheable",
    # Drivers
    "StorageDriver",
    "LRUDriver",
    "RedisDriver",
    "RedisClusterDriver",
    "MemcachedDriver",
    # Engines
    "BaseFetcher",
    "Fetcher",
    "TieredFetcher",
    "KeyTransform",
    "create_fetcher",
]
