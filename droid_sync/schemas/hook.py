"""
Hook payload schema.

Factory Droid sends camelCase keys (sessionId, transcriptPath, ...); its
documentation and older builds use snake_case. normalize_hook_input()
reconciles both spellings field by field into one canonical HookInput, so
nothing downstream ever branches on key casing.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from droid_sync.schemas.types import StrictModel

HookEventName = Literal['SessionStart', 'UserPromptSubmit', 'PostToolUse', 'Stop', 'SessionEnd']

# Kebab-case spellings accepted on the command line (droid-sync hook session-start)
HOOK_EVENT_ALIASES: Mapping[str, HookEventName] = {
    'SessionStart': 'SessionStart',
    'session-start': 'SessionStart',
    'UserPromptSubmit': 'UserPromptSubmit',
    'user-prompt-submit': 'UserPromptSubmit',
    'PostToolUse': 'PostToolUse',
    'post-tool-use': 'PostToolUse',
    'Stop': 'Stop',
    'stop': 'Stop',
    'SessionEnd': 'SessionEnd',
    'session-end': 'SessionEnd',
}


def resolve_event_name(name: str) -> HookEventName | None:
    """Map a command-line event name to its canonical form (None if unknown)."""
    return HOOK_EVENT_ALIASES.get(name.strip())


class HookInput(StrictModel):
    """Canonical hook payload.

    Fields:
        session_id: Host session identifier (state key, backend external ID)
        transcript_path: Path to the session's JSONL transcript
        cwd: Working directory of the session
        permission_mode: Host autonomy mode ('default' when absent)
        hook_event_name: Event name as reported by the host (may be empty)
        source: SessionStart trigger ("startup" | "resume" | "clear" | "compact")
        reason: SessionEnd reason ("clear" | "logout" | "prompt_input_exit" | "other")
        prompt: UserPromptSubmit prompt text
        tool_name / tool_input / tool_response: PostToolUse details
        stop_hook_active: Whether the host is already inside a Stop hook continuation
    """

    session_id: str = ''
    transcript_path: str = ''
    cwd: str = ''
    permission_mode: str = 'default'
    hook_event_name: str = ''
    source: str | None = None
    reason: str | None = None
    prompt: str | None = None
    tool_name: str | None = None
    tool_input: Any = None
    tool_response: Any = None
    stop_hook_active: bool | None = None


def _pick_str(raw: Mapping[str, Any], *keys: str) -> str | None:
    """First non-empty string value among keys (camelCase listed first)."""
    for key in keys:
        value = raw.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _pick_bool(raw: Mapping[str, Any], *keys: str) -> bool | None:
    for key in keys:
        value = raw.get(key)
        if isinstance(value, bool):
            return value
    return None


def _pick_any(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def normalize_hook_input(raw: Mapping[str, Any]) -> HookInput:
    """
    Reconcile a raw hook payload into a HookInput.

    Missing keys and values of the wrong type fall back to defaults instead of
    raising, so a host-side schema drift degrades to "less metadata".

    Args:
        raw: Decoded JSON object from stdin

    Returns:
        Canonical HookInput
    """
    return HookInput(
        session_id=_pick_str(raw, 'sessionId', 'session_id') or '',
        transcript_path=_pick_str(raw, 'transcriptPath', 'transcript_path') or '',
        cwd=_pick_str(raw, 'cwd') or '',
        permission_mode=_pick_str(raw, 'permissionMode', 'permission_mode') or 'default',
        hook_event_name=_pick_str(raw, 'hookEventName', 'hook_event_name') or '',
        source=_pick_str(raw, 'source'),
        reason=_pick_str(raw, 'reason'),
        prompt=_pick_str(raw, 'prompt'),
        tool_name=_pick_str(raw, 'toolName', 'tool_name'),
        tool_input=_pick_any(raw, 'toolInput', 'tool_input'),
        tool_response=_pick_any(raw, 'toolResponse', 'tool_response'),
        stop_hook_active=_pick_bool(raw, 'stopHookActive', 'stop_hook_active'),
    )
