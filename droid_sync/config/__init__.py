"""Configuration: runtime settings and backend credentials."""

from __future__ import annotations

from droid_sync.config.base import DroidSyncSettings, get_settings
from droid_sync.config.credentials import (
    SyncConfig,
    clear_credentials,
    load_credentials,
    mask_api_key,
    normalize_url,
    require_credentials,
    save_credentials,
)

__all__ = [
    'DroidSyncSettings',
    'SyncConfig',
    'clear_credentials',
    'get_settings',
    'load_credentials',
    'mask_api_key',
    'normalize_url',
    'require_credentials',
    'save_credentials',
]
