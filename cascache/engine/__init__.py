"""Cache-aside engines for cascache."""

from cascache.engine.base import BaseFetcher
from cascache.engine.factory import create_fetcher
from cascache.engine.fetcher import Fetcher
from cascache.engine.keys import KeyTransform
from cascache.engine.tiered import TieredFetcher

__all__ = [
    "BaseFetcher",
    "Fetcher",
    "TieredFetcher",
    "KeyTransform",
    "create_fetcher",
]
