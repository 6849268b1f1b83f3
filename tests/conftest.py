"""Shared pytest configuration."""

pytest_plugins = ["cascache.testing.fixtures"]
