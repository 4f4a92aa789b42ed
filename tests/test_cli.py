"""Tests for the droid-sync command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from droid_sync import __version__
from droid_sync.cli import main as cli_main
from droid_sync.cli.main import app

runner = CliRunner()


@pytest.fixture
def cli_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point every droid-sync path at tmp_path; returns the credentials file."""
    credentials = tmp_path / 'opensync' / 'droid-credentials.json'
    monkeypatch.setenv('DROID_SYNC_CREDENTIALS_FILE', str(credentials))
    monkeypatch.setenv('DROID_SYNC_STATE_DIR', str(tmp_path / 'state'))
    monkeypatch.setenv('DROID_SYNC_DEBUG_LOG', str(tmp_path / 'debug.log'))
    monkeypatch.setenv('DROID_SYNC_FACTORY_SETTINGS_FILE', str(tmp_path / 'factory' / 'settings.json'))
    return credentials


def write_credentials(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({'convexUrl': 'https://happy-otter-123.convex.cloud', 'apiKey': 'osk_test_0123456789abcdef'}))


def stub_connection(monkeypatch: pytest.MonkeyPatch, healthy: bool) -> None:
    async def _fake(settings, config, verbose=False) -> bool:
        return healthy

    monkeypatch.setattr(cli_main, '_test_connection', _fake)


def test_version() -> None:
    result = runner.invoke(app, ['version'])

    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_config_not_configured(cli_env: Path) -> None:
    result = runner.invoke(app, ['config'])

    assert result.exit_code == 0
    assert 'Not configured' in result.output


def test_config_masks_api_key(cli_env: Path) -> None:
    write_credentials(cli_env)

    masked = runner.invoke(app, ['config'])
    revealed = runner.invoke(app, ['config', '--show-secrets'])

    assert json.loads(masked.output)['apiKey'] == 'osk_test****cdef'
    assert json.loads(revealed.output)['apiKey'] == 'osk_test_0123456789abcdef'


def test_logout_clears_credentials(cli_env: Path) -> None:
    write_credentials(cli_env)

    result = runner.invoke(app, ['logout'])

    assert result.exit_code == 0
    assert cli_env.read_text() == '{}'
    assert 'Not configured' in runner.invoke(app, ['config']).output


def test_verify_not_configured(cli_env: Path) -> None:
    result = runner.invoke(app, ['verify'])

    assert result.exit_code == 1


@pytest.mark.parametrize(('healthy', 'exit_code'), [(True, 0), (False, 1)])
def test_verify_connection(cli_env: Path, monkeypatch: pytest.MonkeyPatch, healthy: bool, exit_code: int) -> None:
    write_credentials(cli_env)
    stub_connection(monkeypatch, healthy)

    assert runner.invoke(app, ['verify']).exit_code == exit_code


def test_status_shows_masked_key(cli_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    write_credentials(cli_env)
    stub_connection(monkeypatch, True)

    result = runner.invoke(app, ['status'])

    assert result.exit_code == 0
    assert 'osk_test****cdef' in result.output
    assert 'osk_test_0123456789abcdef' not in result.output
    assert 'Connected to OpenSync backend' in result.output


def test_login_saves_credentials_and_registers_hooks(
    cli_env: Path, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    stub_connection(monkeypatch, True)

    result = runner.invoke(app, ['login', '--url', 'https://x.convex.cloud', '--api-key', 'osk_abc'])

    assert result.exit_code == 0
    assert json.loads(cli_env.read_text())['convexUrl'] == 'https://x.convex.cloud'
    hooks = json.loads((tmp_path / 'factory' / 'settings.json').read_text())['hooks']
    assert set(hooks) == {'SessionStart', 'UserPromptSubmit', 'PostToolUse', 'Stop', 'SessionEnd'}


def test_login_no_hooks(cli_env: Path, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    stub_connection(monkeypatch, True)

    result = runner.invoke(app, ['login', '--url', 'https://x.convex.cloud', '--api-key', 'osk_abc', '--no-hooks'])

    assert result.exit_code == 0
    assert not (tmp_path / 'factory' / 'settings.json').exists()


def test_login_connection_failure(cli_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    stub_connection(monkeypatch, False)

    result = runner.invoke(app, ['login', '--url', 'https://x.convex.cloud', '--api-key', 'osk_abc'])

    assert result.exit_code == 1


def test_login_prompts_for_missing_values(cli_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    stub_connection(monkeypatch, True)

    result = runner.invoke(app, ['login', '--no-hooks'], input='https://x.convex.cloud\nosk_prompted\n')

    assert result.exit_code == 0
    assert json.loads(cli_env.read_text())['apiKey'] == 'osk_prompted'


def test_hook_without_event_exits_1(cli_env: Path) -> None:
    result = runner.invoke(app, ['hook'], input='{}')

    assert result.exit_code == 1


def test_hook_unconfigured_exits_0(cli_env: Path) -> None:
    result = runner.invoke(app, ['hook', 'Stop'], input='{"session_id": "s"}')

    assert result.exit_code == 0
    assert result.stdout == ''
