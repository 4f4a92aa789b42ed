"""
Session metadata builder.

Metadata is recomputed from scratch on every sync (never incremented): the
backend treats each session upsert as idempotent on the external ID, so the
latest full picture always wins.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import PurePath

from droid_sync.schemas.hook import HookInput
from droid_sync.schemas.sync import SOURCE, SessionMetadata
from droid_sync.schemas.transcript import DecodedTranscript, SessionSettings


def project_name_for(path: str) -> str | None:
    """Last component of a project path ('' and '/' yield None)."""
    name = PurePath(path).name if path else ''
    return name or None


def _parse_timestamp(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None


def transcript_duration_ms(transcript: DecodedTranscript) -> int | None:
    """Wall-clock span between the first and last message timestamps."""
    first, last = transcript.first_timestamp, transcript.last_timestamp
    if not first or not last:
        return None
    start, end = _parse_timestamp(first), _parse_timestamp(last)
    if start is None or end is None:
        return None
    try:
        delta = end - start
    except TypeError:
        # Mixed naive/aware timestamps
        return None
    return max(0, int(delta.total_seconds() * 1000))


def build_session_metadata(
    hook_input: HookInput,
    transcript: DecodedTranscript,
    settings: SessionSettings | None = None,
) -> SessionMetadata:
    """
    Build the full session aggregate for an upsert.

    Args:
        hook_input: Hook payload (session ID, cwd fallback)
        transcript: Decoded transcript
        settings: Settings sidecar, if present

    Returns:
        SessionMetadata for this session
    """
    start = transcript.session_start
    project_path = (start.cwd if start and start.cwd else hook_input.cwd) or None

    duration_ms = None
    if settings and settings.assistantActiveTimeMs is not None:
        duration_ms = settings.assistantActiveTimeMs
    else:
        duration_ms = transcript_duration_ms(transcript)

    usage = settings.tokenUsage if settings else None

    return SessionMetadata(
        session_id=hook_input.session_id,
        source=SOURCE,
        title=(start.display_title or None) if start else None,
        project_path=project_path,
        project_name=project_name_for(project_path or ''),
        model=settings.model if settings else None,
        prompt_tokens=usage.inputTokens if usage else None,
        completion_tokens=usage.outputTokens if usage else None,
        duration_ms=duration_ms,
        message_count=transcript.message_count,
        tool_call_count=transcript.tool_call_count,
    )


def build_live_metadata(hook_input: HookInput) -> SessionMetadata:
    """Minimal session record for real-time events (no transcript read)."""
    return SessionMetadata(
        session_id=hook_input.session_id,
        source=SOURCE,
        project_path=hook_input.cwd or None,
        project_name=project_name_for(hook_input.cwd),
    )
