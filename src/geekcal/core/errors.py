"""Error taxonomy shared by the sync client.

This module provides:
- CalendarSyncError: Base class for everything the sync core raises
- ConfigurationError, LocalDataError, RemoteDataError: Fatal data/setup errors
- NetworkError, NotFoundError, ConflictError: Remote store failures
- AuthorizationError, UnauthorizedError, ForbiddenError: Credential failures

The core only classifies failures. Formatting them for a human is left
to the caller (the CLI prints one line per error).
"""

from __future__ import annotations


class CalendarSyncError(Exception):
    """Base exception for calendar sync errors."""


class ConfigurationError(CalendarSyncError):
    """Required remote settings are absent or unparsable."""


class LocalDataError(CalendarSyncError):
    """The local calendar file exists but is not a valid event collection."""


class RemoteDataError(CalendarSyncError):
    """The remote calendar file exists but is not a valid event collection."""


class NetworkError(CalendarSyncError):
    """Connectivity, timeout or unexpected status from the remote store."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(NetworkError):
    """Resource not found on the remote store."""


class ConflictError(NetworkError):
    """The expected content hash is stale (optimistic concurrency failure)."""


class AuthorizationError(CalendarSyncError):
    """Credentials were rejected. Never retried automatically."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UnauthorizedError(AuthorizationError):
    """Invalid or expired token (HTTP 401)."""


class ForbiddenError(AuthorizationError):
    """Access denied or rate limited (HTTP 403/429)."""
