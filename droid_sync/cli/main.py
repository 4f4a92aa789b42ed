#!/usr/bin/env python3
"""
Command-line interface for droid-sync.

Provides commands to configure the OpenSync backend, check connectivity and
handle Factory Droid hook events.
"""

from __future__ import annotations

import asyncio
import json
import sys

import typer

from droid_sync import __version__
from droid_sync.cli.hook import run_hook
from droid_sync.cli.logger import CLILogger
from droid_sync.config.base import DroidSyncSettings, get_settings
from droid_sync.config.credentials import (
    SyncConfig,
    clear_credentials,
    load_credentials,
    mask_api_key,
    require_credentials,
    save_credentials,
)
from droid_sync.exceptions import ConfigurationMissingError
from droid_sync.services.hook_registration import register_hooks
from droid_sync.transport.client import SyncClient

app = typer.Typer(
    name='droid-sync',
    help='Sync Factory Droid sessions to an OpenSync dashboard',
    add_completion=False,
)


def _settings() -> DroidSyncSettings:
    try:
        return get_settings()
    except FileNotFoundError as e:
        typer.secho(f'Error: {e}', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


def _require_config(settings: DroidSyncSettings) -> SyncConfig:
    try:
        return require_credentials(settings)
    except ConfigurationMissingError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


async def _test_connection(settings: DroidSyncSettings, config: SyncConfig, verbose: bool = False) -> bool:
    client = SyncClient(config, timeout=settings.HTTP_TIMEOUT, debug=verbose, logger=CLILogger(verbose=verbose))
    return await client.test_connection()


@app.command()
def login(
    convex_url: str | None = typer.Option(None, '--url', help='Convex deployment URL (prompted if omitted)'),
    api_key: str | None = typer.Option(None, '--api-key', help='OpenSync API key (prompted if omitted)'),
    no_hooks: bool = typer.Option(False, '--no-hooks', help="Don't register hooks in the Droid settings file"),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Configure the backend URL and API key, then register hooks."""
    settings = _settings()

    url = (convex_url or typer.prompt('Convex URL (e.g., https://your-project.convex.cloud)', default='')).strip()
    if not url:
        typer.secho('Error: Convex URL is required', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    key = (api_key or typer.prompt('API Key (starts with osk_)', default='', hide_input=True)).strip()
    if not key:
        typer.secho('Error: API Key is required', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    config = SyncConfig(convexUrl=url, apiKey=key)
    save_credentials(settings, config)
    typer.echo(f'Credentials saved to {settings.CREDENTIALS_FILE}')

    typer.echo('Testing connection...')
    if not asyncio.run(_test_connection(settings, config, verbose)):
        typer.secho(f'Connection failed: {config.site_url}/health is not reachable', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    typer.secho('Connected successfully', fg=typer.colors.GREEN)

    if no_hooks:
        return

    try:
        added = register_hooks(settings.FACTORY_SETTINGS_FILE)
    except ValueError as e:
        typer.secho(f'Error: {e}', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    if added:
        typer.secho(f'Hooks registered in {settings.FACTORY_SETTINGS_FILE}: {", ".join(added)}', fg=typer.colors.GREEN)
    else:
        typer.echo(f'Hooks already registered in {settings.FACTORY_SETTINGS_FILE}')


@app.command()
def logout() -> None:
    """Clear stored credentials."""
    settings = _settings()
    if clear_credentials(settings):
        typer.secho('Credentials cleared', fg=typer.colors.GREEN)
    else:
        typer.echo('No stored credentials')


@app.command()
def status(
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Show configuration and connection status."""
    settings = _settings()
    config = load_credentials(settings)
    if config is None:
        typer.secho('Not configured. Run: droid-sync login', fg=typer.colors.YELLOW)
        return

    typer.secho('Configuration:', bold=True)
    typer.echo(f'  Convex URL: {config.convexUrl}')
    typer.echo(f'  API Key:    {mask_api_key(config.apiKey)}')
    typer.echo(f'  Auto Sync:  {"enabled" if config.autoSync else "disabled"}')
    typer.echo(f'  Tool Calls: {"enabled" if config.syncToolCalls else "disabled"}')
    typer.echo(f'  Thinking:   {"enabled" if config.syncThinking else "disabled"}')
    typer.echo(f'  State Dir:  {settings.STATE_DIR}')
    typer.echo()

    typer.echo('Testing connection...')
    if asyncio.run(_test_connection(settings, config, verbose)):
        typer.secho('Connected to OpenSync backend', fg=typer.colors.GREEN)
    else:
        typer.secho('Connection failed', fg=typer.colors.RED)


@app.command()
def verify(
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Test connectivity to the backend (exit 1 on failure)."""
    settings = _settings()
    config = _require_config(settings)

    typer.echo('Verifying connection...')
    if not asyncio.run(_test_connection(settings, config, verbose)):
        typer.secho('Verification failed: Connection failed', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    typer.secho('Connection verified', fg=typer.colors.GREEN)


@app.command('config')
def show_config(
    show_secrets: bool = typer.Option(False, '--show-secrets', help='Print the API key unmasked'),
) -> None:
    """Print the current configuration as JSON."""
    settings = _settings()
    config = load_credentials(settings)
    if config is None:
        typer.echo('Not configured. Run: droid-sync login')
        return
    data = config.model_dump(mode='json') if show_secrets else config.masked()
    typer.echo(json.dumps(data, indent=2))


@app.command()
def hook(
    event: str | None = typer.Argument(None, help='Hook event name (SessionStart, Stop, SessionEnd, ...)'),
) -> None:
    """Handle a Droid hook event (internal use; reads JSON from stdin)."""
    raise typer.Exit(run_hook(event, sys.stdin.buffer))


@app.command()
def version() -> None:
    """Show version."""
    typer.echo(__version__)


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == '__main__':
    main()
