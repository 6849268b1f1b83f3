"""Core types, settings and exceptions for cascache."""

from cascache.core.exceptions import (
    CacheConfigurationError,
    CascacheError,
    FetcherContractError,
    UnsupportedOperationError,
)
from cascache.core.settings import CascacheSettings, get_settings
from cascache.core.types import MISSING, DeletePolicy, Lifetime, NotCacheable

__all__ = [
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
]
