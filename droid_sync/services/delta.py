"""
Delta extraction - which logical records are new since the last sync.

A logical record is either a message's text (ID = message ID) or one tool
call inside a message (ID = {messageId}-tool-{toolCallId}). Each is checked
against the synced set on its own, so a message whose text was already sent
can still yield a tool-call record that was not, and vice versa.

Guarantees, for any transcript T and synced set S:
- no emitted record has an ID in S
- updated_ids is S followed by every emitted ID, in emission order
- extracting again with (T, updated_ids) emits nothing
"""

from __future__ import annotations

from droid_sync.schemas.sync import DeltaResult, SyncedState, SyncPolicy, SyncRecord, tool_record_id
from droid_sync.schemas.transcript import (
    DecodedTranscript,
    ImageContent,
    MessageRecord,
    TextContent,
    ThinkingContent,
    ToolResultContent,
    ToolUseContent,
    UnknownContent,
)
from droid_sync.services.redaction import redact_text, redact_value


def _split_content(message: MessageRecord) -> tuple[str, str, list[ToolUseContent]]:
    """Collect (text, thinking, tool calls) from a message's content blocks."""
    text_parts: list[str] = []
    thinking_parts: list[str] = []
    tool_calls: list[ToolUseContent] = []

    for block in message.content:
        match block:
            case TextContent():
                text_parts.append(block.text)
            case ThinkingContent():
                thinking_parts.append(block.thinking)
            case ToolUseContent():
                tool_calls.append(block)
            case ToolResultContent() | ImageContent() | UnknownContent():
                # Results are attached to their tool_use record; images never leave the machine
                pass

    return ''.join(text_parts), '\n\n'.join(thinking_parts), tool_calls


def extract_new_records(
    session_id: str,
    transcript: DecodedTranscript,
    synced: SyncedState,
    policy: SyncPolicy,
) -> DeltaResult:
    """
    Compute the records to transmit this invocation.

    Output order follows the transcript. For each message:
    1. A text record under the message ID, if the ID is unsynced and the
       message has non-blank text (or thinking, when include_thinking is set),
       or is a user message with no content blocks at all.
    2. One record per tool_use block under its composite ID, if
       include_tool_calls is set and the composite ID is unsynced.

    All payload text passes through the redactor.

    Args:
        session_id: Session the records belong to
        transcript: Decoded transcript
        synced: Previously persisted state for this session
        policy: Inclusion policy

    Returns:
        DeltaResult; updated_ids is a superset of synced.synced_ids even when
        records is empty
    """
    seen = set(synced.synced_ids)
    updated_ids = list(synced.synced_ids)
    records: list[SyncRecord] = []

    def emit(record: SyncRecord) -> None:
        records.append(record)
        seen.add(record.record_id)
        updated_ids.append(record.record_id)

    for message in transcript.messages:
        text, thinking, tool_calls = _split_content(message)
        thinking = thinking if policy.include_thinking else ''

        if message.id not in seen:
            bare_user_message = message.role == 'user' and not message.content
            if text.strip() or thinking.strip() or bare_user_message:
                emit(
                    SyncRecord(
                        record_id=message.id,
                        session_id=session_id,
                        role=message.role,
                        kind='message',
                        timestamp=message.timestamp,
                        text_content=redact_text(text),
                        thinking_content=redact_text(thinking) if thinking.strip() else None,
                    )
                )

        if not policy.include_tool_calls:
            continue

        for tool in tool_calls:
            record_id = tool_record_id(message.id, tool.id)
            if record_id in seen:
                continue
            result = transcript.tool_results.get(tool.id)
            emit(
                SyncRecord(
                    record_id=record_id,
                    session_id=session_id,
                    role='assistant',
                    kind='tool_use',
                    timestamp=message.timestamp,
                    tool_name=tool.name,
                    tool_args=redact_value(dict(tool.input)),
                    tool_result=redact_text(result) if result is not None else None,
                )
            )

    return DeltaResult(records=records, updated_ids=updated_ids)
