"""
Sync domain models.

- SyncPolicy: what the delta extractor includes
- SyncRecord: one logical record (a message's text, or one tool call)
- SessionMetadata: full-recompute session aggregate sent as an idempotent upsert
- SyncedState: persisted per-session set of already-transmitted record IDs
- DeltaResult: output of one delta extraction
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Literal

import pydantic

from droid_sync.schemas.types import JsonDatetime, StrictModel

SOURCE = 'factory-droid'


def tool_record_id(message_id: str, tool_call_id: str) -> str:
    """Composite logical record ID for one tool call inside a message."""
    return f'{message_id}-tool-{tool_call_id}'


class SyncPolicy(StrictModel):
    """Inclusion policy for the delta extractor."""

    include_tool_calls: bool = True
    include_thinking: bool = False


class SyncRecord(StrictModel):
    """One logical record ready for transmission (already redacted)."""

    record_id: str  # message ID, or composite {messageId}-tool-{toolCallId}
    session_id: str
    role: Literal['user', 'assistant']
    kind: Literal['message', 'tool_use']
    timestamp: str = ''
    text_content: str | None = None
    thinking_content: str | None = None
    tool_name: str | None = None
    tool_args: Mapping[str, Any] | None = None
    tool_result: str | None = None


class SessionMetadata(StrictModel):
    """Session aggregate, recomputed in full on every sync."""

    session_id: str
    source: str = SOURCE
    title: str | None = None
    project_path: str | None = None
    project_name: str | None = None
    model: str | None = None
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    cost: float | None = None
    duration_ms: int | None = None
    message_count: int | None = None
    tool_call_count: int | None = None


class SyncedState(StrictModel):
    """Persisted sync state for one session.

    On-disk layout (camelCase, compatible with the OpenSync droid plugin):
        {"syncedMessageIds": ["msg-1", "msg-2-tool-call-1"], "lastSyncTime": "2026-01-01T00:00:00Z"}

    A cleared state file contains {} and loads as empty.
    """

    model_config = pydantic.ConfigDict(
        extra='ignore',
        strict=True,
        frozen=True,
        populate_by_name=True,
    )

    synced_ids: Sequence[str] = pydantic.Field(default=(), alias='syncedMessageIds')
    last_sync_time: JsonDatetime | None = pydantic.Field(default=None, alias='lastSyncTime')

    @pydantic.field_validator('last_sync_time', mode='before')
    @classmethod
    def _empty_string_is_never(cls, value: Any) -> Any:
        return None if value == '' else value

    @pydantic.field_validator('synced_ids', mode='after')
    @classmethod
    def _dedupe(cls, value: Sequence[str]) -> tuple[str, ...]:
        return tuple(dict.fromkeys(value))

    @property
    def id_set(self) -> frozenset[str]:
        return frozenset(self.synced_ids)

    def is_empty(self) -> bool:
        return not self.synced_ids


class DeltaResult(StrictModel):
    """New records for this invocation plus the accumulated ID list to persist after sending."""

    records: Sequence[SyncRecord] = ()
    updated_ids: Sequence[str] = ()

    @property
    def is_empty(self) -> bool:
        return not self.records
