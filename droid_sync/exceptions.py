"""
Shared exceptions for droid-sync.

Domain-specific exceptions used across services.

Exception Hierarchy:
    DroidSyncError (base)
    ├── ConfigurationMissingError (no credentials found)
    ├── SyncTransportError (network failure or non-2xx response)
    ├── HookPayloadError (malformed hook payload on stdin)
    └── InvalidSessionIdError (session ID unusable as a state key)
"""

from __future__ import annotations


class DroidSyncError(Exception):
    """Base exception for all droid-sync errors."""


class ConfigurationMissingError(DroidSyncError):
    """Raised when an operation needs credentials and none are configured."""

    def __init__(self) -> None:
        super().__init__('Not configured. Run: droid-sync login')


class SyncTransportError(DroidSyncError):
    """Raised when the backend rejects a request or cannot be reached.

    status is None for network-level failures (no response received).
    """

    def __init__(self, status: int | None, body: str) -> None:
        self.status = status
        self.body = body
        if status is None:
            super().__init__(f'Sync failed: {body}')
        else:
            super().__init__(f'Sync failed: {status} - {body}')


class HookPayloadError(DroidSyncError):
    """Raised when the hook payload on stdin is not a JSON object."""


class InvalidSessionIdError(DroidSyncError):
    """Raised when a session ID cannot be used as a state file name."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f'Invalid session ID: {session_id!r}')
