"""
Hook registration in the Factory Droid settings file.

Merges one `droid-sync hook <Event>` command per lifecycle event into
~/.factory/settings.json. Existing hooks from other tools are preserved, and
an event that already has a droid-sync command is left untouched, so
registering twice is a no-op.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from droid_sync.schemas.hook import HookEventName

COMMAND_PREFIX = 'droid-sync'

HOOK_EVENTS: Sequence[HookEventName] = ('SessionStart', 'UserPromptSubmit', 'PostToolUse', 'Stop', 'SessionEnd')

# Events whose matcher applies to tool names
_TOOL_EVENTS = frozenset({'PostToolUse'})


def hook_entry(event: HookEventName) -> dict[str, Any]:
    """Settings entry that runs droid-sync for one event."""
    entry: dict[str, Any] = {'hooks': [{'type': 'command', 'command': f'{COMMAND_PREFIX} hook {event}'}]}
    if event in _TOOL_EVENTS:
        entry = {'matcher': '*', **entry}
    return entry


def _has_droid_sync_hook(entries: Sequence[Any]) -> bool:
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        for hook in entry.get('hooks') or []:
            if isinstance(hook, Mapping) and str(hook.get('command', '')).startswith(COMMAND_PREFIX):
                return True
    return False


def merge_hooks(settings: Mapping[str, Any]) -> tuple[dict[str, Any], list[HookEventName]]:
    """
    Merge droid-sync hooks into a settings document.

    Args:
        settings: Parsed settings.json content

    Returns:
        (new settings, events that were added)
    """
    merged = dict(settings)
    hooks = dict(merged.get('hooks') or {}) if isinstance(merged.get('hooks'), Mapping) else {}
    added: list[HookEventName] = []

    for event in HOOK_EVENTS:
        existing = hooks.get(event)
        existing_list = list(existing) if isinstance(existing, list) else []
        if _has_droid_sync_hook(existing_list):
            continue
        hooks[event] = [*existing_list, hook_entry(event)]
        added.append(event)

    merged['hooks'] = hooks
    return merged, added


def register_hooks(settings_file: Path) -> list[HookEventName]:
    """
    Register droid-sync hooks in a Factory Droid settings file.

    A missing file is treated as empty settings. An unparseable file is left
    alone rather than overwritten.

    Returns:
        Events newly registered (empty when already registered)

    Raises:
        ValueError: If the existing file is not a JSON object
    """
    current: dict[str, Any] = {}
    if settings_file.exists():
        try:
            loaded = json.loads(settings_file.read_text(encoding='utf-8'))
        except json.JSONDecodeError as e:
            raise ValueError(f'Cannot parse {settings_file}: {e}') from e
        if not isinstance(loaded, dict):
            raise ValueError(f'Expected a JSON object in {settings_file}')
        current = loaded

    merged, added = merge_hooks(current)
    if not added:
        return added
    settings_file.parent.mkdir(parents=True, exist_ok=True)
    settings_file.write_text(json.dumps(merged, indent=2), encoding='utf-8')
    return added
