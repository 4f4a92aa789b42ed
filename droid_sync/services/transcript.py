"""
Transcript decoder service - JSONL transcript parsing.

Turns a Factory Droid transcript into a DecodedTranscript. Unlike a strict
archive parser, decoding here is tolerant: hooks fire while the host is still
appending, so a truncated trailing line or a record from a newer host build
must never stop the sync.
"""

from __future__ import annotations

import json
from pathlib import Path

import pydantic

from droid_sync.protocols import LoggerProtocol, NullLogger
from droid_sync.schemas.transcript import (
    KNOWN_RECORD_TYPES,
    DecodedTranscript,
    MessageRecord,
    SessionSettings,
    SessionStartRecord,
    ToolResultContent,
    ToolUseContent,
    TranscriptRecordAdapter,
)


def settings_path_for(transcript_path: Path) -> Path:
    """Sidecar location: <dir>/<stem>.settings.json next to <dir>/<stem>.jsonl."""
    return transcript_path.with_name(f'{transcript_path.stem}.settings.json')


class TranscriptDecoder:
    """
    Service for decoding transcript JSONL files.

    Pure domain logic - file in, typed records out.
    """

    async def decode(self, transcript_path: Path | str, logger: LoggerProtocol | None = None) -> DecodedTranscript:
        """
        Decode a transcript file.

        Decoding policy:
        - Missing file -> empty result (the host may not have created it yet)
        - Each line decoded independently; malformed lines are counted and skipped
        - Lines with unmodeled record types are ignored without counting as malformed
        - The first session_start record wins

        Args:
            transcript_path: Path to the JSONL transcript
            logger: Optional logger for skipped-line diagnostics

        Returns:
            DecodedTranscript with messages in file order
        """
        logger = logger or NullLogger()
        path = Path(transcript_path)

        if not path.is_file():
            await logger.debug(f'Transcript not found: {path}')
            return DecodedTranscript()

        session_start: SessionStartRecord | None = None
        messages: list[MessageRecord] = []
        tool_results: dict[str, str] = {}
        tool_call_count = 0
        skipped = 0

        with open(path, encoding='utf-8', errors='replace') as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue

                try:
                    raw = json.loads(line)
                except json.JSONDecodeError:
                    skipped += 1
                    await logger.debug(f'{path.name}:{line_num}: skipping malformed JSON')
                    continue

                if not isinstance(raw, dict):
                    skipped += 1
                    continue
                if raw.get('type') not in KNOWN_RECORD_TYPES:
                    continue

                try:
                    record = TranscriptRecordAdapter.validate_python(raw)
                except pydantic.ValidationError as e:
                    skipped += 1
                    await logger.debug(f'{path.name}:{line_num}: skipping invalid record ({e.error_count()} errors)')
                    continue

                match record:
                    case SessionStartRecord():
                        if session_start is None:
                            session_start = record
                    case MessageRecord():
                        messages.append(record)
                        for block in record.content:
                            match block:
                                case ToolUseContent():
                                    tool_call_count += 1
                                case ToolResultContent():
                                    tool_results[block.tool_use_id] = block.flatten()
                                case _:
                                    pass

        if skipped:
            await logger.info(f'Skipped {skipped} malformed transcript line(s) in {path.name}')

        return DecodedTranscript(
            session_start=session_start,
            messages=messages,
            message_count=len(messages),
            tool_call_count=tool_call_count,
            tool_results=tool_results,
            skipped_lines=skipped,
        )

    def load_settings(self, transcript_path: Path | str) -> SessionSettings | None:
        """
        Load the session settings sidecar next to a transcript.

        Returns:
            SessionSettings, or None if missing or unreadable
        """
        transcript = Path(transcript_path)
        if not transcript.name:
            return None
        path = settings_path_for(transcript)
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
            return SessionSettings.model_validate(data)
        except (OSError, ValueError):
            return None
