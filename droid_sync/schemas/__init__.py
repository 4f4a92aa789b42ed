"""
Schema definitions for droid-sync.

This package contains Pydantic models for:
- transcript: Factory Droid transcript JSONL records and the settings sidecar
- hook: the hook payload read from stdin
- sync: sync records, session metadata and persisted sync state
- wire: backend HTTP payloads
"""

from __future__ import annotations

from droid_sync.schemas.hook import HookEventName, HookInput, normalize_hook_input, resolve_event_name
from droid_sync.schemas.sync import (
    SOURCE,
    DeltaResult,
    SessionMetadata,
    SyncedState,
    SyncPolicy,
    SyncRecord,
    tool_record_id,
)
from droid_sync.schemas.transcript import (
    DecodedTranscript,
    MessageRecord,
    SessionSettings,
    SessionStartRecord,
    TranscriptRecordAdapter,
)
from droid_sync.schemas.types import JsonDatetime, PermissiveModel, StrictModel

__all__ = [
    'SOURCE',
    'DecodedTranscript',
    'DeltaResult',
    'HookEventName',
    'HookInput',
    'JsonDatetime',
    'MessageRecord',
    'PermissiveModel',
    'SessionMetadata',
    'SessionSettings',
    'SessionStartRecord',
    'StrictModel',
    'SyncPolicy',
    'SyncRecord',
    'SyncedState',
    'TranscriptRecordAdapter',
    'normalize_hook_input',
    'resolve_event_name',
    'tool_record_id',
]
