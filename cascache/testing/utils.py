"""Testing utilities for cascache applications."""

from cascache.core.settings import CascacheSettings


def create_test_settings(
    key_transform: str = "identity",
    local_max_size: int = 100,
    **overrides
) -> CascacheSettings:
    """Create cascache settings for testing.

    The .env file is ignored so tests do not pick up a developer's
    local configuration.

    Args:
        key_transform: Key transform name
        local_max_size: Capacity of the in-process tier
        **overrides: Additional settings to override

    Returns:
        CascacheSettings instance configured for testing
    """
    return CascacheSettings(
        _env_file=None,
        key_transform=key_transform,
        local_max_size=local_max_size,
        **overrides,
    )
