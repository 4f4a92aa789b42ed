"""
Backend wire payloads.

Field names mirror the JSON the OpenSync HTTP actions accept (camelCase).
Serialize with model_dump(mode='json', exclude_none=True) so absent optional
values are omitted rather than sent as null.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Annotated, Any, Literal

import pydantic

from droid_sync.schemas.sync import SessionMetadata, SyncRecord
from droid_sync.schemas.types import StrictModel


class SessionPayload(StrictModel):
    """Body of POST /sync/session, and each entry of a batch's sessions list."""

    externalId: str
    title: str | None = None
    projectPath: str | None = None
    projectName: str | None = None
    model: str | None = None
    source: str
    promptTokens: int | None = None
    completionTokens: int | None = None
    cost: float | None = None
    durationMs: int | None = None
    messageCount: int | None = None
    toolCallCount: int | None = None

    @classmethod
    def from_metadata(cls, session: SessionMetadata) -> SessionPayload:
        return cls(
            externalId=session.session_id,
            title=session.title,
            projectPath=session.project_path,
            projectName=session.project_name,
            model=session.model,
            source=session.source,
            promptTokens=session.prompt_tokens,
            completionTokens=session.completion_tokens,
            cost=session.cost,
            durationMs=session.duration_ms,
            messageCount=session.message_count,
            toolCallCount=session.tool_call_count,
        )


class ToolUsePartContent(StrictModel):
    toolName: str
    args: Mapping[str, Any] | None = None
    result: str | None = None


class ToolUsePart(StrictModel):
    type: Literal['tool_use'] = 'tool_use'
    content: ToolUsePartContent


class ThinkingPartContent(StrictModel):
    text: str


class ThinkingPart(StrictModel):
    type: Literal['thinking'] = 'thinking'
    content: ThinkingPartContent


MessagePart = Annotated[ToolUsePart | ThinkingPart, pydantic.Field(discriminator='type')]


class MessagePayload(StrictModel):
    """One entry of a batch's messages list."""

    sessionExternalId: str
    externalId: str
    role: Literal['user', 'assistant', 'system']
    textContent: str | None = None
    durationMs: int | None = None
    source: str
    parts: Sequence[MessagePart] | None = None

    @classmethod
    def from_record(cls, record: SyncRecord, source: str) -> MessagePayload:
        parts: list[ToolUsePart | ThinkingPart] = []
        if record.thinking_content:
            parts.append(ThinkingPart(content=ThinkingPartContent(text=record.thinking_content)))
        if record.tool_name is not None:
            parts.append(
                ToolUsePart(
                    content=ToolUsePartContent(
                        toolName=record.tool_name,
                        args=record.tool_args,
                        result=record.tool_result,
                    )
                )
            )
        return cls(
            sessionExternalId=record.session_id,
            externalId=record.record_id,
            role=record.role,
            textContent=record.text_content or record.tool_result,
            source=source,
            parts=parts or None,
        )


class BatchPayload(StrictModel):
    """Body of POST /sync/batch."""

    sessions: Sequence[SessionPayload] = ()
    messages: Sequence[MessagePayload] = ()
