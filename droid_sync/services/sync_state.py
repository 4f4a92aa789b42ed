"""
Per-session sync state store.

Remembers which logical record IDs were already transmitted, one JSON file
per session under ~/.config/droid-sync/state/ by default. Every hook runs in
a fresh process, so this file is the only memory between invocations.

Durability is best-effort: a missing or corrupt file loads as empty, which at
worst re-sends records the backend already has (its upserts are idempotent
per external ID).

Writes take a per-session filelock, merge with whatever is on disk, and
replace the file via temp file + rename, so the persisted set only grows
between clears, even when two hook processes for the same session overlap.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from filelock import FileLock

from droid_sync.exceptions import InvalidSessionIdError
from droid_sync.schemas.sync import SyncedState

__all__ = ['SyncStateStore']

_SAFE_SESSION_ID = re.compile(r'^[A-Za-z0-9][A-Za-z0-9._-]{0,200}$')


class SyncStateStore:
    """File-backed SyncedState storage keyed by session ID."""

    def __init__(self, state_dir: Path) -> None:
        self.state_dir = state_dir

    def state_file(self, session_id: str) -> Path:
        """Path of a session's state file.

        Raises:
            InvalidSessionIdError: If the ID could escape the state directory
        """
        if not _SAFE_SESSION_ID.match(session_id) or '..' in session_id:
            raise InvalidSessionIdError(session_id)
        return self.state_dir / f'{session_id}.json'

    def _lock(self, session_id: str) -> FileLock:
        return FileLock(self.state_file(session_id).with_suffix('.lock'))

    def load(self, session_id: str) -> SyncedState:
        """
        Load a session's state.

        Returns:
            Persisted state, or an empty state if absent, cleared or corrupt
        """
        return self._read(self.state_file(session_id))

    def save(self, session_id: str, synced_ids: Iterable[str], synced_at: datetime | None = None) -> SyncedState:
        """
        Persist synced IDs for a session.

        The stored set becomes the union of what is on disk and synced_ids;
        IDs are never dropped by a save.

        Args:
            session_id: Session to update
            synced_ids: IDs transmitted so far (normally DeltaResult.updated_ids)
            synced_at: Sync timestamp (defaults to now, UTC)

        Returns:
            The state as written
        """
        path = self.state_file(session_id)
        self.state_dir.mkdir(parents=True, exist_ok=True)

        with self._lock(session_id):
            current = self._read(path)
            merged = SyncedState(
                synced_ids=[*current.synced_ids, *synced_ids],
                last_sync_time=synced_at or datetime.now(UTC),
            )
            self._write(path, merged.model_dump(mode='json', by_alias=True))
        return merged

    def clear(self, session_id: str) -> None:
        """Reset a session's state to {} (called once, at SessionEnd)."""
        path = self.state_file(session_id)
        if not path.exists():
            return
        with self._lock(session_id):
            self._write(path, {})

    def _read(self, path: Path) -> SyncedState:
        if not path.exists():
            return SyncedState()
        try:
            with path.open(encoding='utf-8') as f:
                data = json.load(f)
            return SyncedState.model_validate(data)
        except (OSError, ValueError):
            return SyncedState()

    def _write(self, path: Path, data: dict[str, object]) -> None:
        """Write JSON atomically using temp file + rename."""
        tmp_file = path.with_suffix('.tmp.json')
        with tmp_file.open('w', encoding='utf-8') as f:
            json.dump(data, f)
        tmp_file.replace(path)
