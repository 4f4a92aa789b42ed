"""Tests for the HTTP sync client, using httpx.MockTransport."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from droid_sync.config.credentials import SyncConfig
from droid_sync.exceptions import SyncTransportError
from droid_sync.schemas.sync import SessionMetadata, SyncRecord
from droid_sync.transport.client import SyncClient

CONFIG = SyncConfig(convexUrl='https://happy-otter-123.convex.cloud/', apiKey='osk_test_0123456789abcdef')


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> tuple[SyncClient, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(record))
    return SyncClient(CONFIG, http_client=http_client), requests


def ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={'ok': True})


@pytest.mark.asyncio
async def test_sync_session_posts_to_site_host() -> None:
    client, requests = make_client(ok)

    await client.sync_session(SessionMetadata(session_id='s1', title='Fix bug', project_name='webapp'))

    request = requests[0]
    assert request.method == 'POST'
    assert str(request.url) == 'https://happy-otter-123.convex.site/sync/session'
    assert request.headers['Authorization'] == 'Bearer osk_test_0123456789abcdef'
    assert json.loads(request.content) == {
        'externalId': 's1',
        'title': 'Fix bug',
        'projectName': 'webapp',
        'source': 'factory-droid',
    }


@pytest.mark.asyncio
async def test_sync_batch_payload_shape() -> None:
    client, requests = make_client(ok)
    records = [
        SyncRecord(record_id='m1', session_id='s1', role='user', kind='message', text_content='hi'),
        SyncRecord(
            record_id='m2',
            session_id='s1',
            role='assistant',
            kind='message',
            text_content='Looking',
            thinking_content='Plan first',
        ),
        SyncRecord(
            record_id='m2-tool-c1',
            session_id='s1',
            role='assistant',
            kind='tool_use',
            tool_name='Read',
            tool_args={'file_path': 'a.py'},
            tool_result='contents',
        ),
    ]

    await client.sync_batch([SessionMetadata(session_id='s1', message_count=2)], records)

    assert str(requests[0].url).endswith('/sync/batch')
    body = json.loads(requests[0].content)
    assert body['sessions'] == [{'externalId': 's1', 'source': 'factory-droid', 'messageCount': 2}]
    assert body['messages'][0] == {
        'sessionExternalId': 's1',
        'externalId': 'm1',
        'role': 'user',
        'textContent': 'hi',
        'source': 'factory-droid',
    }
    assert body['messages'][1]['parts'] == [{'type': 'thinking', 'content': {'text': 'Plan first'}}]
    assert body['messages'][2]['textContent'] == 'contents'
    assert body['messages'][2]['parts'] == [
        {'type': 'tool_use', 'content': {'toolName': 'Read', 'args': {'file_path': 'a.py'}, 'result': 'contents'}}
    ]


@pytest.mark.asyncio
async def test_error_status_raises_with_body() -> None:
    client, _ = make_client(lambda request: httpx.Response(500, text='Internal error'))

    with pytest.raises(SyncTransportError) as exc_info:
        await client.sync_session(SessionMetadata(session_id='s1'))

    assert exc_info.value.status == 500
    assert str(exc_info.value) == 'Sync failed: 500 - Internal error'


@pytest.mark.asyncio
async def test_network_error_is_wrapped() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError('connection refused', request=request)

    client, _ = make_client(refuse)

    with pytest.raises(SyncTransportError) as exc_info:
        await client.sync_batch([], [])

    assert exc_info.value.status is None
    assert 'ConnectError' in str(exc_info.value)


@pytest.mark.asyncio
@pytest.mark.parametrize(('status', 'expected'), [(200, True), (204, True), (401, False), (503, False)])
async def test_health_check_status(status: int, expected: bool) -> None:
    client, requests = make_client(lambda request: httpx.Response(status))

    assert await client.test_connection() is expected
    assert requests[0].method == 'GET'
    assert str(requests[0].url) == 'https://happy-otter-123.convex.site/health'


@pytest.mark.asyncio
async def test_health_check_never_raises() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout('timed out', request=request)

    client, _ = make_client(refuse)

    assert await client.test_connection() is False
