"""
Backend credentials and sync preferences.

Resolution order:
1. DROID_SYNC_CONVEX_URL + DROID_SYNC_API_KEY environment variables (both required)
2. The credentials file written by `droid-sync login`
   (~/.opensync/droid-credentials.json by default)

A missing or unreadable credentials file means "not configured"; hook
invocations then no-op silently.
"""

from __future__ import annotations

import json
import os
import re

import pydantic

from droid_sync.config.base import DroidSyncSettings
from droid_sync.exceptions import ConfigurationMissingError
from droid_sync.schemas.types import StrictModel

__all__ = [
    'SyncConfig',
    'clear_credentials',
    'load_credentials',
    'mask_api_key',
    'normalize_url',
    'require_credentials',
    'save_credentials',
]

_CONVEX_CLOUD_SUFFIX = re.compile(r'\.convex\.cloud$')


def normalize_url(url: str) -> str:
    """
    Derive the HTTP-actions base URL from a configured deployment URL.

    Examples:
        >>> normalize_url('https://happy-otter-123.convex.cloud/')
        'https://happy-otter-123.convex.site'

        >>> normalize_url('https://sync.example.com')
        'https://sync.example.com'
    """
    return _CONVEX_CLOUD_SUFFIX.sub('.convex.site', url.strip().rstrip('/'))


def mask_api_key(api_key: str) -> str:
    """Show only enough of the key to recognize it."""
    if len(api_key) <= 12:
        return '****'
    return f'{api_key[:8]}****{api_key[-4:]}'


class SyncConfig(StrictModel):
    """Credentials file structure (camelCase keys, compatible with the OpenSync droid plugin)."""

    convexUrl: str = pydantic.Field(min_length=1)
    apiKey: str = pydantic.Field(min_length=1)
    autoSync: bool = True
    syncToolCalls: bool = True
    syncThinking: bool = False

    @property
    def site_url(self) -> str:
        return normalize_url(self.convexUrl)

    def masked(self) -> dict[str, object]:
        """JSON-ready view with the API key masked."""
        data = self.model_dump(mode='json')
        data['apiKey'] = mask_api_key(self.apiKey)
        return data


def load_credentials(settings: DroidSyncSettings) -> SyncConfig | None:
    """
    Resolve credentials from the environment or the credentials file.

    Args:
        settings: Runtime settings

    Returns:
        SyncConfig, or None when not configured (missing, empty or corrupt file)
    """
    if settings.CONVEX_URL and settings.API_KEY:
        return SyncConfig(
            convexUrl=settings.CONVEX_URL,
            apiKey=settings.API_KEY,
            autoSync=settings.AUTO_SYNC,
            syncToolCalls=settings.TOOL_CALLS,
            syncThinking=settings.THINKING,
        )

    path = settings.CREDENTIALS_FILE
    if not path.exists():
        return None

    try:
        data = json.loads(path.read_text(encoding='utf-8'))
        return SyncConfig.model_validate(data)
    except (OSError, ValueError):
        # json.JSONDecodeError and pydantic.ValidationError are both ValueErrors;
        # a cleared file ({}) lands here too
        return None


def require_credentials(settings: DroidSyncSettings) -> SyncConfig:
    """Like load_credentials, for commands that cannot proceed without them.

    Raises:
        ConfigurationMissingError: If no credentials are configured
    """
    config = load_credentials(settings)
    if config is None:
        raise ConfigurationMissingError()
    return config


def save_credentials(settings: DroidSyncSettings, config: SyncConfig) -> None:
    """Write the credentials file (owner-only permissions)."""
    path = settings.CREDENTIALS_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.model_dump(mode='json'), indent=2), encoding='utf-8')
    os.chmod(path, 0o600)


def clear_credentials(settings: DroidSyncSettings) -> bool:
    """
    Overwrite the credentials file with {}.

    Returns:
        True if a credentials file existed and was cleared
    """
    path = settings.CREDENTIALS_FILE
    if not path.exists():
        return False
    path.write_text('{}', encoding='utf-8')
    return True
