"""Testing utilities for cascache applications.

This module provides test doubles for storage drivers, a controllable
clock for expiry tests, and pytest fixtures.

Usage in conftest.py:
    from cascache.testing import FakeClock, RecordingDriver

    @pytest.fixture
    def driver():
        return RecordingDriver()

Or use provided fixtures directly:
    pytest_plugins = ["cascache.testing.fixtures"]
"""

from cascache.testing.mocks import (
    AbsentReportingDriver,
    DictDriver,
    FailingDriver,
    FakeClock,
    RecordingDriver,
)
from cascache.testing.utils import create_test_settings

__all__ = [
    "AbsentReportingDriver",
    "DictDriver",
    "FailingDriver",
    "FakeClock",
    "RecordingDriver",
    "create_test_settings",
]
