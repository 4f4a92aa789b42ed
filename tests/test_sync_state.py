"""Tests for the per-session sync state store."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from droid_sync.exceptions import InvalidSessionIdError
from droid_sync.services.sync_state import SyncStateStore


@pytest.fixture
def store(tmp_path: Path) -> SyncStateStore:
    return SyncStateStore(tmp_path / 'state')


def test_load_absent_is_empty(store: SyncStateStore) -> None:
    state = store.load('session-1')

    assert state.is_empty()
    assert state.last_sync_time is None


def test_save_then_load(store: SyncStateStore) -> None:
    synced_at = datetime(2026, 1, 15, 10, 0, tzinfo=UTC)

    store.save('session-1', ['m1', 'm2', 'm2-tool-c1'], synced_at=synced_at)
    state = store.load('session-1')

    assert list(state.synced_ids) == ['m1', 'm2', 'm2-tool-c1']
    assert state.last_sync_time == synced_at


def test_on_disk_layout(store: SyncStateStore) -> None:
    store.save('session-1', ['m1'])

    data = json.loads(store.state_file('session-1').read_text())

    assert data['syncedMessageIds'] == ['m1']
    assert isinstance(data['lastSyncTime'], str)


def test_saves_are_monotonic(store: SyncStateStore) -> None:
    """A save with fewer IDs (e.g. a stale concurrent process) never shrinks the set."""
    store.save('session-1', ['m1', 'm2'])
    store.save('session-1', ['m3'])
    store.save('session-1', ['m1'])

    state = store.load('session-1')

    assert list(state.synced_ids) == ['m1', 'm2', 'm3']


def test_sizes_non_decreasing_across_saves(store: SyncStateStore) -> None:
    sizes = []
    for batch in (['a'], ['a', 'b'], ['c'], [], ['b', 'd']):
        store.save('s', batch)
        sizes.append(len(store.load('s').synced_ids))

    assert sizes == sorted(sizes)
    assert sizes[-1] == 4


def test_clear_resets_to_empty_object(store: SyncStateStore) -> None:
    store.save('session-1', ['m1', 'm2'])

    store.clear('session-1')

    assert json.loads(store.state_file('session-1').read_text()) == {}
    assert store.load('session-1').is_empty()


def test_clear_then_save_starts_fresh(store: SyncStateStore) -> None:
    store.save('session-1', ['m1', 'm2'])
    store.clear('session-1')

    store.save('session-1', ['m9'])

    assert list(store.load('session-1').synced_ids) == ['m9']


def test_clear_absent_session_is_noop(store: SyncStateStore) -> None:
    store.clear('never-synced')

    assert not store.state_file('never-synced').exists()


def test_sessions_are_isolated(store: SyncStateStore) -> None:
    store.save('session-a', ['m1'])
    store.save('session-b', ['m2'])
    store.clear('session-a')

    assert store.load('session-a').is_empty()
    assert list(store.load('session-b').synced_ids) == ['m2']


@pytest.mark.parametrize('content', ['{not json', '[]', '{"syncedMessageIds": "oops"}', ''])
def test_corrupt_state_loads_empty(store: SyncStateStore, content: str) -> None:
    path = store.state_file('session-1')
    path.parent.mkdir(parents=True)
    path.write_text(content)

    assert store.load('session-1').is_empty()


def test_legacy_empty_last_sync_time(store: SyncStateStore) -> None:
    path = store.state_file('session-1')
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({'syncedMessageIds': ['m1'], 'lastSyncTime': ''}))

    state = store.load('session-1')

    assert list(state.synced_ids) == ['m1']
    assert state.last_sync_time is None


def test_save_over_corrupt_state(store: SyncStateStore) -> None:
    path = store.state_file('session-1')
    path.parent.mkdir(parents=True)
    path.write_text('garbage')

    store.save('session-1', ['m1'])

    assert list(store.load('session-1').synced_ids) == ['m1']


def test_no_temp_file_left_behind(store: SyncStateStore) -> None:
    store.save('session-1', ['m1'])

    assert sorted(p.name for p in store.state_dir.iterdir() if not p.name.endswith('.lock')) == ['session-1.json']


@pytest.mark.parametrize('session_id', ['', '../escape', 'a/b', '.hidden', 'a..b'])
def test_unsafe_session_ids_rejected(store: SyncStateStore, session_id: str) -> None:
    with pytest.raises(InvalidSessionIdError):
        store.load(session_id)
