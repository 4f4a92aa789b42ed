"""
Hook event handlers.

One hook event arrives per process. The dispatcher picks the single matching
handler; nothing is remembered between invocations except the sync state
store on disk.

Events:
    SessionStart / UserPromptSubmit / PostToolUse
        Real-time notifications. Upsert one session record built from the
        hook payload alone; the transcript is not read.
    Stop
        The sync trigger. Decode the transcript, recompute session metadata,
        extract the delta, transmit, then persist the advanced synced set.
        State is only advanced after the backend accepted the batch.
    SessionEnd
        Clear the session's sync state.
    anything else
        No-op.

Handlers raise on failure; the caller (cli/hook.py) logs and swallows, so a
sync problem never surfaces to the host tool.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import TypeAlias

from droid_sync.config.base import DroidSyncSettings
from droid_sync.config.credentials import SyncConfig
from droid_sync.protocols import LoggerProtocol, SyncTransport
from droid_sync.schemas.hook import HookEventName, HookInput
from droid_sync.schemas.sync import DeltaResult, SyncPolicy
from droid_sync.services.delta import extract_new_records
from droid_sync.services.metadata import build_live_metadata, build_session_metadata
from droid_sync.services.sync_state import SyncStateStore
from droid_sync.services.transcript import TranscriptDecoder


@dataclass
class HookContext:
    """
    Collaborators for one hook invocation.

    Built once at process start and passed explicitly to the handler.
    config and transport are None when no credentials are configured.
    """

    settings: DroidSyncSettings
    config: SyncConfig | None
    transport: SyncTransport | None
    store: SyncStateStore
    decoder: TranscriptDecoder
    logger: LoggerProtocol

    @property
    def sync_enabled(self) -> bool:
        return self.config is not None and self.config.autoSync and self.transport is not None

    @property
    def policy(self) -> SyncPolicy:
        if self.config is None:
            return SyncPolicy()
        return SyncPolicy(
            include_tool_calls=self.config.syncToolCalls,
            include_thinking=self.config.syncThinking,
        )


async def _upsert_live_session(ctx: HookContext, hook_input: HookInput) -> None:
    if not ctx.sync_enabled or ctx.transport is None:
        return
    if not hook_input.session_id:
        await ctx.logger.warning('No session ID in hook payload, skipping')
        return
    await ctx.transport.sync_session(build_live_metadata(hook_input))
    await ctx.logger.info(f'Session upserted: {hook_input.session_id}')


async def handle_session_start(ctx: HookContext, hook_input: HookInput) -> None:
    """Register the session with the backend as soon as it starts."""
    await _upsert_live_session(ctx, hook_input)


async def handle_user_prompt_submit(ctx: HookContext, hook_input: HookInput) -> None:
    """Keep the backend session current while the user is active."""
    await _upsert_live_session(ctx, hook_input)


async def handle_post_tool_use(ctx: HookContext, hook_input: HookInput) -> None:
    """Keep the backend session current between turns."""
    await _upsert_live_session(ctx, hook_input)


async def handle_stop(ctx: HookContext, hook_input: HookInput) -> DeltaResult | None:
    """
    Sync everything new in the transcript.

    Returns:
        The delta that was transmitted, or None when sync is disabled or the
        payload lacks a session ID
    """
    if not ctx.sync_enabled or ctx.transport is None:
        await ctx.logger.debug('Sync disabled or not configured, skipping Stop')
        return None
    if not hook_input.session_id:
        await ctx.logger.warning('No session ID in hook payload, skipping')
        return None

    session_id = hook_input.session_id
    # A missing path or file decodes as an empty transcript
    transcript = await ctx.decoder.decode(hook_input.transcript_path, ctx.logger)
    session_settings = ctx.decoder.load_settings(hook_input.transcript_path)
    metadata = build_session_metadata(hook_input, transcript, session_settings)

    synced = ctx.store.load(session_id)
    delta = extract_new_records(session_id, transcript, synced, ctx.policy)

    if delta.is_empty:
        await ctx.transport.sync_session(metadata)
        await ctx.logger.info(f'No new records for {session_id} ({len(synced.synced_ids)} already synced)')
        return delta

    await ctx.transport.sync_batch([metadata], delta.records)
    # Only reached when the backend accepted the batch
    ctx.store.save(session_id, delta.updated_ids)
    await ctx.logger.info(f'Synced {len(delta.records)} record(s) for {session_id}')
    return delta


async def handle_session_end(ctx: HookContext, hook_input: HookInput) -> None:
    """Forget the session's sync state."""
    if not hook_input.session_id:
        return
    ctx.store.clear(hook_input.session_id)
    await ctx.logger.info(f'Sync state cleared: {hook_input.session_id} (reason: {hook_input.reason or "unknown"})')


HookHandler: TypeAlias = Callable[[HookContext, HookInput], Awaitable[object]]

HANDLERS: Mapping[HookEventName, HookHandler] = {
    'SessionStart': handle_session_start,
    'UserPromptSubmit': handle_user_prompt_submit,
    'PostToolUse': handle_post_tool_use,
    'Stop': handle_stop,
    'SessionEnd': handle_session_end,
}


async def dispatch_event(event: HookEventName | None, ctx: HookContext, hook_input: HookInput) -> object:
    """
    Route one event to its handler.

    Args:
        event: Canonical event name, or None for an unrecognized event
        ctx: Invocation collaborators
        hook_input: Normalized hook payload

    Returns:
        Whatever the handler returns (None for the unknown-event sink)
    """
    if event is None:
        await ctx.logger.debug(f'Ignoring unknown hook event (payload event: {hook_input.hook_event_name!r})')
        return None
    return await HANDLERS[event](ctx, hook_input)
