"""Shared pytest fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any

import pytest

from droid_sync.config.base import DroidSyncSettings
from droid_sync.exceptions import SyncTransportError
from droid_sync.schemas.sync import SessionMetadata, SyncRecord

FIXTURES_DIR = Path(__file__).parent.parent / 'fixtures'
TRANSCRIPTS_DIR = FIXTURES_DIR / 'transcripts'


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer DROID_SYNC_* variables out of every test."""
    import os

    for key in list(os.environ):
        if key.startswith('DROID_SYNC_'):
            monkeypatch.delenv(key)


@pytest.fixture
def settings(tmp_path: Path) -> DroidSyncSettings:
    """Settings with every path inside tmp_path."""
    return DroidSyncSettings(
        CREDENTIALS_FILE=tmp_path / 'opensync' / 'droid-credentials.json',
        STATE_DIR=tmp_path / 'state',
        DEBUG_LOG=tmp_path / 'debug.log',
        FACTORY_SETTINGS_FILE=tmp_path / 'factory' / 'settings.json',
    )


@pytest.fixture
def configured_settings(settings: DroidSyncSettings) -> DroidSyncSettings:
    """Settings with a credentials file in place."""
    settings.CREDENTIALS_FILE.parent.mkdir(parents=True, exist_ok=True)
    settings.CREDENTIALS_FILE.write_text(
        json.dumps(
            {
                'convexUrl': 'https://happy-otter-123.convex.cloud',
                'apiKey': 'osk_test_0123456789abcdef',
                'autoSync': True,
                'syncToolCalls': True,
                'syncThinking': False,
            }
        )
    )
    return settings


def message_line(
    message_id: str,
    role: str,
    content: Sequence[dict[str, Any]] | str,
    timestamp: str = '2026-01-15T10:00:00.000Z',
) -> dict[str, Any]:
    return {'type': 'message', 'id': message_id, 'timestamp': timestamp, 'message': {'role': role, 'content': content}}


def text_block(text: str) -> dict[str, Any]:
    return {'type': 'text', 'text': text}


def tool_use_block(call_id: str, name: str, args: dict[str, Any] | None = None) -> dict[str, Any]:
    return {'type': 'tool_use', 'id': call_id, 'name': name, 'input': args or {}}


@pytest.fixture
def write_transcript(tmp_path: Path) -> Callable[..., Path]:
    """Write JSONL lines (dicts or raw strings) to a transcript file and return its path."""

    def _write(lines: Iterable[dict[str, Any] | str], name: str = 'session.jsonl') -> Path:
        path = tmp_path / 'sessions' / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open('w', encoding='utf-8') as f:
            for line in lines:
                f.write((line if isinstance(line, str) else json.dumps(line)) + '\n')
        return path

    return _write


class RecordingTransport:
    """In-memory SyncTransport that records calls and can be told to fail."""

    def __init__(self, fail_with: SyncTransportError | None = None, healthy: bool = True) -> None:
        self.fail_with = fail_with
        self.healthy = healthy
        self.sessions: list[SessionMetadata] = []
        self.batches: list[tuple[list[SessionMetadata], list[SyncRecord]]] = []

    async def sync_session(self, session: SessionMetadata) -> None:
        if self.fail_with:
            raise self.fail_with
        self.sessions.append(session)

    async def sync_batch(self, sessions: Sequence[SessionMetadata], records: Sequence[SyncRecord]) -> None:
        if self.fail_with:
            raise self.fail_with
        self.batches.append((list(sessions), list(records)))

    async def test_connection(self) -> bool:
        return self.healthy


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()
