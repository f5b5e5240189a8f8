"""
Error Taxonomy
==============

Exceptions raised by the signal monitor and its collaborators.

Everything below the cycle boundary is caught at per-entry or per-item
granularity; only ConfigurationError (and MonitorAlreadyRunning from start())
reaches the caller of the scheduler.
"""

from typing import Optional


class MonitorError(Exception):
    """Base class for signal monitor errors."""


class ConfigurationError(MonitorError):
    """Invalid or missing configuration (e.g. no read credentials)."""


class SourceUnavailable(ConfigurationError):
    """The content source has no read capability, so the scheduler cannot start."""


class MonitorAlreadyRunning(MonitorError):
    """start() called on a scheduler that is already enabled."""


class ValidationError(MonitorError):
    """Rejected watchlist input."""


class SourceError(MonitorError):
    """Non-2xx or malformed response from the content source."""

    def __init__(self, status: Optional[int], body: str = ""):
        self.status = status
        self.body = body
        super().__init__(f"Content source error {status}: {body[:200]}")


class NotFoundError(MonitorError):
    """An account handle did not resolve to an account id."""

    def __init__(self, handle: str):
        self.handle = handle
        super().__init__(f"Account not found: {handle}")


class PersistenceError(MonitorError):
    """A store read or write failed."""


class NotificationError(MonitorError):
    """Alert delivery failed."""
