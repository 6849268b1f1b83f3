"""Cache key derivation for cascache.

A logical key never reaches a driver directly: engines pass it through a
:class:`KeyTransform` first. Batch calls additionally scope each argument
under a namespace (``"<namespace>:<arg>"``) before transforming it.
"""

import hashlib
from collections.abc import Callable, Hashable
from typing import Any, Union

from cascache.core.exceptions import CacheConfigurationError

ArgToKey = Callable[[Any], Any]
NamespaceSpec = Union[str, tuple[str, ArgToKey]]


class KeyTransform:
    """Maps a logical key to the physical key used by storage drivers.

    Use the named constructors rather than subclassing:

        KeyTransform.identity()
        KeyTransform.hashing()           # md5 hex digest
        KeyTransform.prefix("myapp:")
        KeyTransform.custom(str.lower)

    Transforms are pure: the same input always yields the same output.
    """

    kind = "custom"

    def __init__(self, fn: Callable[[str], str]):
        self._fn = fn

    def __call__(self, key: str) -> str:
        return self._fn(key)

    def __repr__(self) -> str:
        return f"KeyTransform({self.kind})"

    @classmethod
    def identity(cls) -> "KeyTransform":
        """Return keys unchanged."""
        return _IdentityTransform()

    @classmethod
    def hashing(cls) -> "KeyTransform":
        """Replace keys with their md5 hex digest.

        Bounds key length and keeps raw content out of the store.
        Not a security measure.
        """
        return _HashingTransform()

    @classmethod
    def prefix(cls, prefix: str) -> "KeyTransform":
        """Prepend a fixed string to every key."""
        return _PrefixTransform(prefix)

    @classmethod
    def custom(cls, fn: Callable[[str], str]) -> "KeyTransform":
        """Use a caller-supplied pure function."""
        return cls(fn)

    @classmethod
    def from_name(cls, name: str, prefix: str | None = None) -> "KeyTransform":
        """Build a transform from its configuration name.

        Args:
            name: One of "identity", "hashing" or "prefix"
            prefix: The prefix, required when name is "prefix"

        Returns:
            The matching KeyTransform

        Raises:
            CacheConfigurationError: If the name is unknown or the prefix
                is missing
        """
        if name == "identity":
            return cls.identity()
        if name == "hashing":
            return cls.hashing()
        if name == "prefix":
            if not prefix:
                raise CacheConfigurationError(missing_fields=["key_prefix"])
            return cls.prefix(prefix)
        raise CacheConfigurationError(f"Unknown key transform: {name!r}")


class _IdentityTransform(KeyTransform):
    kind = "identity"

    def __init__(self):
        super().__init__(lambda key: key)


class _HashingTransform(KeyTransform):
    kind = "hashing"

    def __init__(self):
        super().__init__(md5_key)


class _PrefixTransform(KeyTransform):
    kind = "prefix"

    def __init__(self, prefix: str):
        self.value = prefix
        super().__init__(lambda key: f"{prefix}{key}")

    def __repr__(self) -> str:
        return f"KeyTransform(prefix={self.value!r})"


def md5_key(key: str) -> str:
    """Return the md5 hex digest of a key."""
    return hashlib.md5(key.encode("utf-8")).hexdigest()


def split_namespace(namespace: NamespaceSpec) -> tuple[str, ArgToKey]:
    """Resolve a namespace spec into ``(namespace, arg_to_key)``.

    Args:
        namespace: A bare namespace string, or a (namespace, arg_to_key) pair

    Returns:
        The namespace string and the argument-to-key function
    """
    if isinstance(namespace, str):
        return namespace, str
    name, arg_to_key = namespace
    return name, arg_to_key


def namespace_key(name: str, arg_to_key: ArgToKey, arg: Any) -> str:
    """Build the logical key of one batch argument.

    Returns:
        Key like "users:42"
    """
    return f"{name}:{arg_to_key(arg)}"


def dedupe(keys: list[Hashable]) -> list:
    """Drop repeated keys, keeping first-seen order."""
    return list(dict.fromkeys(keys))
