"""Backend transport."""

from __future__ import annotations

from droid_sync.transport.client import SyncClient

__all__ = ['SyncClient']
