"""
Hook entry point - the only place that decides a hook's exit status.

Exit codes:
    0  handled, ignored, empty payload, or any failure while syncing
    1  missing event name, or a payload that is not a JSON object

Sync failures are reported as success: a non-zero exit would
block or visibly break the user's Droid session.
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, BinaryIO

from droid_sync.cli.logger import HookLogger
from droid_sync.config.base import DroidSyncSettings, get_settings
from droid_sync.config.credentials import load_credentials
from droid_sync.exceptions import HookPayloadError
from droid_sync.protocols import SyncTransport
from droid_sync.schemas.hook import normalize_hook_input, resolve_event_name
from droid_sync.services.hooks import HookContext, dispatch_event
from droid_sync.services.sync_state import SyncStateStore
from droid_sync.services.transcript import TranscriptDecoder
from droid_sync.transport.client import SyncClient

MAX_PAYLOAD_BYTES = 1024 * 1024


def read_payload(stream: BinaryIO) -> dict[str, Any] | None:
    """
    Read the whole hook payload before acting on it.

    Returns:
        Decoded JSON object, or None for an empty payload

    Raises:
        HookPayloadError: Oversized, non-UTF-8, invalid JSON, or not an object
    """
    data = stream.read(MAX_PAYLOAD_BYTES + 1)
    if len(data) > MAX_PAYLOAD_BYTES:
        raise HookPayloadError(f'Hook payload exceeds {MAX_PAYLOAD_BYTES} bytes')
    try:
        text = data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise HookPayloadError(f'Hook payload is not UTF-8: {e}') from e
    if not text.strip():
        return None
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise HookPayloadError(f'Invalid JSON input: {e}') from e
    if not isinstance(payload, dict):
        raise HookPayloadError(f'Expected a JSON object, got {type(payload).__name__}')
    return payload


def build_context(
    settings: DroidSyncSettings,
    logger: HookLogger,
    transport: SyncTransport | None = None,
) -> HookContext:
    """Construct the per-invocation collaborators (client only when configured)."""
    config = load_credentials(settings)
    if transport is None and config is not None:
        transport = SyncClient(config, timeout=settings.HTTP_TIMEOUT, debug=settings.DEBUG, logger=logger)
    return HookContext(
        settings=settings,
        config=config,
        transport=transport,
        store=SyncStateStore(settings.STATE_DIR),
        decoder=TranscriptDecoder(),
        logger=logger,
    )


def run_hook(
    event_name: str | None,
    stream: BinaryIO,
    settings: DroidSyncSettings | None = None,
    transport: SyncTransport | None = None,
) -> int:
    """
    Handle one hook invocation end to end.

    Args:
        event_name: Event name from the command line
        stream: Binary stdin carrying the JSON payload
        settings: Runtime settings (loaded from the environment when None)
        transport: Transport override (tests)

    Returns:
        Process exit code
    """
    if not event_name:
        print('[droid-sync] Missing hook event name', file=sys.stderr)
        return 1

    try:
        settings = settings or get_settings()
    except Exception as e:
        print(f'[droid-sync] Invalid configuration: {e}', file=sys.stderr)
        return 0

    event = resolve_event_name(event_name)
    logger = HookLogger(settings.DEBUG_LOG, enabled=settings.DEBUG, event=event or event_name)

    try:
        payload = read_payload(stream)
    except HookPayloadError as e:
        print(f'[droid-sync] {e}', file=sys.stderr)
        return 1

    if payload is None:
        return 0

    async def _dispatch() -> None:
        hook_input = normalize_hook_input(payload)
        ctx = build_context(settings, logger, transport)
        await dispatch_event(event, ctx, hook_input)

    try:
        asyncio.run(_dispatch())
    except Exception as e:
        # Logged only; the host tool must see success
        asyncio.run(logger.error(f'{type(e).__name__}: {e}'))
    return 0
