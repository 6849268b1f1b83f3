"""Storage driver interface for cascache."""

from abc import ABC, abstractmethod
from typing import Any

from cascache.core.exceptions import UnsupportedOperationError
from cascache.core.types import MISSING


class StorageDriver(ABC):
    """Abstract base class for storage drivers.

    All backends should inherit from this class and implement the
    required methods. Engines only ever talk to this interface.

    Absent entries are reported as ``MISSING``; a stored ``None`` is a
    regular value.
    """

    #: Whether :meth:`ttl` reports remaining lifetimes.
    supports_ttl: bool = False

    @property
    def name(self) -> str:
        """Driver name for logging."""
        return self.__class__.__name__

    @abstractmethod
    async def get(self, key: str) -> Any:
        """Get a value from the store.

        Args:
            key: The storage key

        Returns:
            The stored value or MISSING if not found
        """
        pass

    @abstractmethod
    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> bool:
        """Set a value in the store.

        Args:
            key: The storage key
            value: The value to store
            ttl: Time-to-live in seconds (None or 0 for no expiration)

        Returns:
            True if the value was stored
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a value from the store.

        Args:
            key: The storage key

        Returns:
            True if the key existed and was deleted
        """
        pass

    @abstractmethod
    async def flush(self) -> None:
        """Remove all entries from the store."""
        pass

    async def get_many(self, keys: list[str]) -> dict[str, Any]:
        """Get multiple values from the store.

        Args:
            keys: List of storage keys

        Returns:
            Dictionary of key -> value for found keys only. Engines
            also accept absent keys reported as MISSING.
        """
        result = {}
        for key in keys:
            value = await self.get(key)
            if value is not MISSING:
                result[key] = value
        return result

    async def set_many(
        self,
        mapping: dict[str, Any],
        ttl: int | None = None,
    ) -> None:
        """Set multiple values in the store.

        Args:
            mapping: Dictionary of key -> value
            ttl: Time-to-live in seconds
        """
        for key, value in mapping.items():
            await self.set(key, value, ttl)

    async def delete_many(self, keys: list[str]) -> int:
        """Delete multiple keys from the store.

        Args:
            keys: List of storage keys

        Returns:
            Number of keys deleted
        """
        count = 0
        for key in keys:
            if await self.delete(key):
                count += 1
        return count

    async def ttl(self, key: str) -> Any:
        """Get the remaining lifetime of a key.

        Default implementation raises UnsupportedOperationError.
        Subclasses that can report expiry should override this and set
        ``supports_ttl = True``.

        Args:
            key: The storage key

        Returns:
            Remaining seconds, None if the key never expires, or MISSING
            if the key does not exist
        """
        raise UnsupportedOperationError(self.name, "ttl")
