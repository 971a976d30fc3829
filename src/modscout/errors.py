"""Error types shared by providers, the navigator and the CLI."""

from __future__ import annotations


class ModscoutError(RuntimeError):
    """Base error for modscout operations."""


class ProviderError(ModscoutError):
    """Raised when a provider fails to retrieve content.

    The navigator turns these into a one-line error document.
    """

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: {detail}")


class NotFoundError(ModscoutError):
    """Raised when the catalog has nothing matching the requested filter."""

    def __init__(self, pattern: str | None):
        self.pattern = pattern
        if pattern:
            super().__init__(f"No modules found matching '{pattern}'")
        else:
            super().__init__("No modules found")


class ProviderUnavailableError(ModscoutError):
    """Raised when the requested provider cannot run on this host."""
