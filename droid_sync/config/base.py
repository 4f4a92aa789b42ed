"""
Runtime settings for droid-sync.

Every value can be set through a DROID_SYNC_* environment variable. Paths
default to the locations the Factory Droid plugin has always used, so
existing credentials and state files keep working.
"""

from __future__ import annotations

import os
import pathlib

import pydantic
import pydantic_settings

_HOME = pathlib.Path.home()


class DroidSyncSettings(pydantic_settings.BaseSettings):
    """Settings shared by the hook entry point and the CLI commands."""

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix='DROID_SYNC_',
        env_file_encoding='utf-8',
        case_sensitive=True,  # Fail fast on misconfiguration
        extra='ignore',  # Hooks run inside arbitrary projects with arbitrary .env files
    )

    # Application metadata
    APP_NAME: str = 'droid-sync'

    # Credentials (both must be set to override the credentials file)
    CONVEX_URL: str | None = None
    API_KEY: str | None = None

    # Sync policy (env overrides apply only together with CONVEX_URL/API_KEY)
    AUTO_SYNC: bool = True
    TOOL_CALLS: bool = True
    THINKING: bool = False

    # Diagnostics
    DEBUG: bool = False

    # HTTP timeout in seconds; None waits indefinitely
    HTTP_TIMEOUT: float | None = None

    # Filesystem locations
    CREDENTIALS_FILE: pathlib.Path = _HOME / '.opensync' / 'droid-credentials.json'
    STATE_DIR: pathlib.Path = _HOME / '.config' / 'droid-sync' / 'state'
    DEBUG_LOG: pathlib.Path = _HOME / '.config' / 'droid-sync' / 'debug.log'
    FACTORY_SETTINGS_FILE: pathlib.Path = _HOME / '.factory' / 'settings.json'

    @pydantic.field_validator('HTTP_TIMEOUT')
    @classmethod
    def validate_http_timeout(cls, v: float | None) -> float | None:
        """Reject non-positive timeouts (use None for no timeout)."""
        if v is not None and v <= 0:
            raise ValueError('HTTP_TIMEOUT must be positive')
        return v


def get_settings(env_file: str | None = None) -> DroidSyncSettings:
    """
    Build settings, optionally layering a .env file under the environment.

    DROID_SYNC_ENV_FILE names a custom .env file path. When unset, settings
    come from environment variables only.

    Args:
        env_file: Optional path to .env file (overrides DROID_SYNC_ENV_FILE)

    Returns:
        Settings instance

    Raises:
        FileNotFoundError: If specified .env file doesn't exist
    """
    env_file_path = env_file or os.getenv('DROID_SYNC_ENV_FILE')

    if not env_file_path:
        return DroidSyncSettings()

    resolved_path = pathlib.Path(env_file_path).resolve()
    if not resolved_path.exists():
        raise FileNotFoundError(f'Environment file not found: {resolved_path}')

    return DroidSyncSettings(_env_file=resolved_path)
