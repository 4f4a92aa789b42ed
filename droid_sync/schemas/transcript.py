"""
Pydantic models for Factory Droid transcript JSONL records.

Each transcript line is one JSON object. Two record types matter for sync:

    {"type": "session_start", "id": ..., "title": ..., "sessionTitle": ..., "cwd": ...}
    {"type": "message", "id": ..., "timestamp": ..., "message": {"role": ..., "content": [...]}}

Other line types (todo state, compaction markers, ...) are ignored by the
decoder before validation.

Content blocks are a left-to-right union with a permissive fallback, so an
unknown or incomplete block never fails the whole line:

    text | thinking | tool_use | tool_result | image | UnknownContent

Also models the `<session>.settings.json` sidecar Factory Droid writes next
to each transcript (model, active time, token usage).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Annotated, Any, Literal

import pydantic

from droid_sync.schemas.types import PermissiveModel, StrictModel

# ==============================================================================
# Message Content Types (Union with fallback)
# ==============================================================================


class TextContent(PermissiveModel):
    """Text content block from user or assistant messages."""

    type: Literal['text']
    text: str


class ThinkingContent(PermissiveModel):
    """Reasoning block from assistant messages (synced only when enabled)."""

    type: Literal['thinking']
    thinking: str
    signature: str | None = None


class ToolUseContent(PermissiveModel):
    """Tool invocation requested by the assistant."""

    type: Literal['tool_use']
    id: str
    name: str
    input: Mapping[str, Any] = pydantic.Field(default_factory=dict)


class ToolResultContent(PermissiveModel):
    """Tool output, linked back to its tool_use block by tool_use_id.

    content is a plain string in most records, but structured lists
    (text/image blocks) appear for some tools.
    """

    type: Literal['tool_result']
    tool_use_id: str
    content: str | Sequence[Any] | None = None
    is_error: bool | None = None

    def flatten(self) -> str:
        """Return the result as plain text (nested text blocks joined, images dropped)."""
        if self.content is None:
            return ''
        if isinstance(self.content, str):
            return self.content
        parts = []
        for item in self.content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, Mapping) and item.get('type') == 'text' and isinstance(item.get('text'), str):
                parts.append(item['text'])
        return '\n'.join(parts)


class ImageContent(PermissiveModel):
    """Pasted image. Never transmitted."""

    type: Literal['image']
    source: Mapping[str, Any] | None = None


class UnknownContent(PermissiveModel):
    """Fallback for block types droid-sync does not model. Ignored by all consumers."""

    type: str


ContentBlock = Annotated[
    TextContent | ThinkingContent | ToolUseContent | ToolResultContent | ImageContent | UnknownContent,
    pydantic.Field(union_mode='left_to_right'),
]


# ==============================================================================
# Records
# ==============================================================================


class SessionStartRecord(PermissiveModel):
    """First line of a transcript: session identity and working directory."""

    type: Literal['session_start']
    id: str
    title: str = ''
    sessionTitle: str = ''
    owner: str | None = None
    version: int | None = None
    cwd: str = ''
    isSessionTitleManuallySet: bool | None = None
    sessionTitleAutoStage: str | None = None

    @property
    def display_title(self) -> str:
        """Session title, preferring the (possibly user-set) sessionTitle."""
        return self.sessionTitle or self.title


class Message(PermissiveModel):
    """The role/content payload of a message record."""

    role: Literal['user', 'assistant']
    content: Sequence[ContentBlock] = ()

    @pydantic.field_validator('content', mode='before')
    @classmethod
    def _normalize_string_content(cls, value: Any) -> Any:
        # Older transcripts store plain-text user prompts as a bare string
        if isinstance(value, str):
            return [{'type': 'text', 'text': value}] if value else []
        if value is None:
            return []
        return value


class MessageRecord(PermissiveModel):
    """A user or assistant message line."""

    type: Literal['message']
    id: str
    timestamp: str = ''
    parentId: str | None = None
    message: Message

    @property
    def role(self) -> Literal['user', 'assistant']:
        return self.message.role

    @property
    def content(self) -> Sequence[ContentBlock]:
        return self.message.content

    def tool_uses(self) -> list[ToolUseContent]:
        return [block for block in self.message.content if isinstance(block, ToolUseContent)]


TranscriptRecord = Annotated[SessionStartRecord | MessageRecord, pydantic.Field(discriminator='type')]

# Type adapter for validating transcript lines (required for union types)
TranscriptRecordAdapter: pydantic.TypeAdapter[TranscriptRecord] = pydantic.TypeAdapter(TranscriptRecord)

KNOWN_RECORD_TYPES = frozenset({'session_start', 'message'})


# ==============================================================================
# Session Settings Sidecar
# ==============================================================================


class TokenUsage(PermissiveModel):
    """Cumulative token counters from the settings sidecar."""

    inputTokens: int = 0
    outputTokens: int = 0
    cacheCreationTokens: int = 0
    cacheReadTokens: int = 0
    thinkingTokens: int = 0


class SessionSettings(PermissiveModel):
    """Factory Droid `<session>.settings.json` file."""

    assistantActiveTimeMs: int | None = None
    model: str | None = None
    reasoningEffort: str | None = None
    autonomyMode: str | None = None
    providerLock: str | None = None
    providerLockTimestamp: str | None = None
    tokenUsage: TokenUsage | None = None


# ==============================================================================
# Decoder Output
# ==============================================================================


class DecodedTranscript(StrictModel):
    """Everything downstream components read from a transcript.

    Produced once per invocation by TranscriptDecoder; no caller re-reads the
    raw file.
    """

    session_start: SessionStartRecord | None = None
    messages: Sequence[MessageRecord] = ()
    message_count: int = 0
    tool_call_count: int = 0
    tool_results: Mapping[str, str] = pydantic.Field(default_factory=dict)  # tool_use_id -> flattened result
    skipped_lines: int = 0

    @property
    def first_timestamp(self) -> str | None:
        stamps = [m.timestamp for m in self.messages if m.timestamp]
        return stamps[0] if stamps else None

    @property
    def last_timestamp(self) -> str | None:
        stamps = [m.timestamp for m in self.messages if m.timestamp]
        return stamps[-1] if stamps else None
