"""Value-state markers and lifetime types shared by drivers and engines."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from cascache.core.exceptions import CacheConfigurationError

T = TypeVar("T")


class _Missing:
    """Marker for "no entry" in a storage driver.

    ``None`` is a legitimate cached value, so absence needs its own marker.
    """

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "<MISSING>"

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass(frozen=True)
class NotCacheable(Generic[T]):
    """A computed result that is returned to the caller but never stored.

    Example:
        async def load_user():
            user = await repo.get(user_id)
            if user.is_draft:
                return NotCacheable(user)
            return user
    """

    value: T | None = None


def unwrap(result: Any) -> Any:
    """Return the caller-facing value of a computed result."""
    if isinstance(result, NotCacheable):
        return result.value
    return result


def is_cacheable(result: Any) -> bool:
    """Check whether a computed result may be written to a driver."""
    return not isinstance(result, NotCacheable) and result is not MISSING


@dataclass(frozen=True)
class Lifetime:
    """Cache lifetime with an optional stale-while-revalidate window.

    Attributes:
        cache_time: Seconds an entry lives in the store (0 for no expiry)
        stale_time: Seconds after which a stored entry is considered stale
            and refreshed on the next fetch (None disables staleness checks)
    """

    cache_time: int
    stale_time: int | None = None

    def __post_init__(self) -> None:
        if self.cache_time < 0:
            raise CacheConfigurationError(
                f"cache_time must not be negative, got {self.cache_time}"
            )
        if self.stale_time is not None:
            if self.stale_time < 0:
                raise CacheConfigurationError(
                    f"stale_time must not be negative, got {self.stale_time}"
                )
            if self.stale_time >= self.cache_time:
                raise CacheConfigurationError(
                    f"stale_time ({self.stale_time}) must be less than "
                    f"cache_time ({self.cache_time})"
                )

    @classmethod
    def coerce(cls, lifetime: "int | Lifetime") -> "Lifetime":
        """Normalise a plain number of seconds into a Lifetime."""
        if isinstance(lifetime, Lifetime):
            return lifetime
        return cls(cache_time=lifetime)

    def is_stale(self, remaining: Any) -> bool:
        """Check whether an entry with ``remaining`` seconds left is stale.

        Args:
            remaining: TTL reported by the driver (seconds, None for no
                expiry, or MISSING)

        Returns:
            True if the entry should be refreshed
        """
        if self.stale_time is None:
            return False
        if remaining is None or remaining is MISSING:
            return False
        return remaining > 0 and (self.cache_time - self.stale_time) > remaining


class DeletePolicy(str, Enum):
    """How a tiered delete treats failures from individual tiers."""

    ALL = "all"
    BEST_EFFORT = "best_effort"
