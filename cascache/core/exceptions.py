"""Custom exceptions for cascache.

This module provides a hierarchy of exceptions with helpful error messages
to make debugging easier for developers. Compute and driver failures are
never wrapped: only conditions the engine itself detects are raised here.
"""


class CascacheError(Exception):
    """Base exception for all cascache errors.

    All cascache exceptions inherit from this class, making it easy
    to catch all library-specific errors.
    """

    def __init__(self, message: str, hint: str | None = None):
        """Initialize the exception.

        Args:
            message: The error message
            hint: Optional hint for resolving the error
        """
        self.message = message
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\nHint: {self.hint}"
        return self.message


class FetcherContractError(CascacheError):
    """Raised when a batch fetcher returns the wrong number of results.

    The batch engine has no way to correlate results with arguments when
    the lengths differ, so this is never recovered from.
    """

    def __init__(self, expected: int, actual: int):
        """Initialize the contract error.

        Args:
            expected: Number of missing arguments passed to the fetcher
            actual: Number of results the fetcher returned
        """
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Fetcher must return same length of result with args "
            f"(expected {expected}, got {actual})",
            "Return exactly one result per argument, in argument order. "
            "Wrap results that must not be stored in NotCacheable().",
        )


class CacheConfigurationError(CascacheError):
    """Raised when cascache configuration is invalid."""

    def __init__(
        self,
        message: str | None = None,
        missing_fields: list[str] | None = None,
    ):
        """Initialize the configuration error.

        Args:
            message: Custom error message
            missing_fields: List of missing configuration fields
        """
        self.missing_fields = missing_fields or []

        if missing_fields:
            fields_str = ", ".join(missing_fields)
            message = f"Missing required configuration: {fields_str}"
            hint = "Set these as CASCACHE_* environment variables or in your .env file."
        else:
            hint = "Check your cascache configuration."

        super().__init__(message or "Invalid cascache configuration", hint)


class UnsupportedOperationError(CascacheError):
    """Raised when a storage driver lacks an optional capability."""

    def __init__(self, driver_name: str, operation: str):
        """Initialize the unsupported operation error.

        Args:
            driver_name: The driver class name
            operation: The operation that is not supported (e.g., 'ttl')
        """
        self.driver_name = driver_name
        self.operation = operation

        hint = None
        if operation == "ttl":
            hint = "Use a plain cache lifetime (no stale_time) with this driver."

        super().__init__(f"{driver_name} doesn't support #{operation}", hint)
