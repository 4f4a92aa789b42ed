"""
Shared protocols for droid-sync services.

This module contains Protocol definitions used across multiple services.
Having a single source of truth for protocols prevents type incompatibility
issues when the same protocol is defined in multiple modules.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from droid_sync.schemas.sync import SessionMetadata, SyncRecord


class LoggerProtocol(Protocol):
    """
    Protocol for async logger - enables services to work with any logging implementation.

    Implementations:
    - CLILogger (cli/logger.py): Logs to stdout with optional verbose mode
    - HookLogger (cli/logger.py): Appends to the debug log during hook invocations
    - NullLogger (below): No-op implementation for when logging is optional
    """

    async def info(self, message: str) -> None: ...
    async def warning(self, message: str) -> None: ...
    async def error(self, message: str) -> None: ...
    async def debug(self, message: str) -> None: ...


class SyncTransport(Protocol):
    """
    Capability the hook handlers need from the backend.

    SyncClient (transport/client.py) is the production implementation;
    tests substitute in-memory recorders.
    """

    async def sync_session(self, session: SessionMetadata) -> None: ...
    async def sync_batch(self, sessions: Sequence[SessionMetadata], records: Sequence[SyncRecord]) -> None: ...
    async def test_connection(self) -> bool: ...


class NullLogger:
    """
    No-op logger implementation for when logging is optional.

    Use this when a function requires a LoggerProtocol but the caller
    doesn't need logging output.
    """

    async def info(self, message: str) -> None:
        pass

    async def warning(self, message: str) -> None:
        pass

    async def error(self, message: str) -> None:
        pass

    async def debug(self, message: str) -> None:
        pass
