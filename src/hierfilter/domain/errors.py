from __future__ import annotations

"""
Domain Error Types.

Configuration problems block a build; host failures are retryable and
leave the last-known-good state in place. Data problems are never raised.
"""

from typing import Optional


class ConfigurationError(ValueError):
    """A required field is missing or does not resolve in the host schema."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class HostError(RuntimeError):
    """The host dashboard failed to serve rows or to apply a filter."""

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message)
        self.retryable = retryable
