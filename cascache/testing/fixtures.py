"""Pytest fixtures for cascache testing.

To use these fixtures, add to your conftest.py:

    pytest_plugins = ["cascache.testing.fixtures"]

Or import specific fixtures:

    from cascache.testing.fixtures import fake_clock, memory_driver
"""

import pytest

from cascache.core.settings import CascacheSettings
from cascache.drivers.memory import LRUDriver
from cascache.engine.fetcher import Fetcher
from cascache.engine.keys import KeyTransform
from cascache.engine.tiered import TieredFetcher
from cascache.testing.mocks import FakeClock, RecordingDriver
from cascache.testing.utils import create_test_settings


@pytest.fixture
def cascache_settings() -> CascacheSettings:
    """Provide test settings for cascache.

    Returns:
        CascacheSettings instance configured for testing
    """
    return create_test_settings()


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a manually advanced clock starting at t=0."""
    return FakeClock()


@pytest.fixture
def memory_driver(fake_clock: FakeClock) -> LRUDriver:
    """Provide an LRU driver driven by the fake clock."""
    return LRUDriver(max_size=100, clock=fake_clock)


@pytest.fixture
def recording_driver(memory_driver: LRUDriver) -> RecordingDriver:
    """Provide a recording wrapper around the memory driver."""
    return RecordingDriver(memory_driver)


@pytest.fixture
def fetcher(recording_driver: RecordingDriver) -> Fetcher:
    """Provide a single-tier fetcher with identity keys.

    Example:
        async def test_something(fetcher):
            assert await fetcher.fetch("k", 60, compute) == ...
    """
    return Fetcher(recording_driver, key_transform=KeyTransform.identity())


@pytest.fixture
def tiers(fake_clock: FakeClock) -> list[RecordingDriver]:
    """Provide three recording LRU tiers named L1, L2 and L3."""
    return [
        RecordingDriver(LRUDriver(clock=fake_clock), name=f"L{i}")
        for i in (1, 2, 3)
    ]


@pytest.fixture
def tiered_fetcher(tiers: list[RecordingDriver]) -> TieredFetcher:
    """Provide a tiered fetcher over the three recording tiers."""
    return TieredFetcher(tiers, key_transform=KeyTransform.identity())
