"""Configuration for cascache, loaded from CASCACHE_* environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cascache.core.exceptions import CacheConfigurationError
from cascache.core.types import DeletePolicy


class CascacheSettings(BaseSettings):
    """Settings used by :func:`cascache.engine.factory.create_fetcher`.

    Every field can be set with an environment variable, e.g.
    ``CASCACHE_KEY_TRANSFORM=hashing`` or ``CASCACHE_REDIS_URL=redis://...``.
    ``CASCACHE_MEMCACHED_SERVERS`` is a comma separated list of
    ``host[:port]``; with ``CASCACHE_MEMCACHED_AUTO_DISCOVERY=true`` it is
    the single ElastiCache configuration endpoint instead.
    """

    model_config = SettingsConfigDict(
        env_prefix="CASCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    key_transform: Literal["identity", "hashing", "prefix"] = "identity"
    key_prefix: str | None = None

    local_max_size: int = Field(default=1000, gt=0)
    local_default_ttl: int | None = Field(default=None, ge=0)

    redis_url: str | None = None
    redis_cluster: bool = False

    memcached_servers: str | None = None
    memcached_auto_discovery: bool = False

    delete_policy: DeletePolicy = DeletePolicy.ALL

    @model_validator(mode="after")
    def _check_prefix(self) -> "CascacheSettings":
        if self.key_transform == "prefix" and not self.key_prefix:
            raise CacheConfigurationError(missing_fields=["key_prefix"])
        return self


@lru_cache
def get_settings() -> CascacheSettings:
    """Get the process-wide settings instance.

    Returns:
        The CascacheSettings instance
    """
    return CascacheSettings()
