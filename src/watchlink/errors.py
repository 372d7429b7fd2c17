"""Exception hierarchy shared by the watchlink pipeline stages."""

from __future__ import annotations

from typing import Optional


class WatchlinkError(RuntimeError):
    """Base class for all errors raised by watchlink."""


class ConfigurationError(WatchlinkError):
    """Raised when the configuration is missing or invalid; aborts startup."""


class FetchError(WatchlinkError):
    """Raised when an upstream service request fails or returns unusable data."""

    def __init__(self, message: str, *, source: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.source = source
        self.status_code = status_code


class LedgerIOError(WatchlinkError):
    """Raised when the history ledger cannot be created, read or appended to."""


class PathRemapError(WatchlinkError):
    """Raised when a container path does not start with the configured prefix."""


class PublishError(WatchlinkError):
    """Raised when a symlink for a single match cannot be created."""


class NotificationError(WatchlinkError):
    """Raised by notification targets; never escalated past the orchestrator."""
