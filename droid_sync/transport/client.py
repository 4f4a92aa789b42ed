"""
OpenSync HTTP sync client.

Three operations against the deployment's HTTP actions host:
- POST /sync/session  upsert one session
- POST /sync/batch    upsert sessions + messages in one request
- GET  /health        connectivity probe (any 2xx is healthy)

Requests are sent sequentially with no automatic retry. A failure surfaces as
SyncTransportError so the caller can decide not to advance sync state.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import httpx

from droid_sync.config.credentials import SyncConfig
from droid_sync.exceptions import SyncTransportError
from droid_sync.protocols import LoggerProtocol, NullLogger
from droid_sync.schemas.sync import SOURCE, SessionMetadata, SyncRecord
from droid_sync.schemas.wire import BatchPayload, MessagePayload, SessionPayload


class SyncClient:
    """
    Backend client for one invocation.

    Constructed once per process and passed to handlers; the underlying
    httpx.AsyncClient is owned by the caller when injected.
    """

    def __init__(
        self,
        config: SyncConfig,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        debug: bool = False,
        logger: LoggerProtocol | None = None,
    ) -> None:
        """
        Initialize sync client.

        Args:
            config: Backend credentials
            http_client: Optional shared client (tests inject httpx.MockTransport here)
            timeout: Request timeout in seconds (None = no timeout)
            debug: Log request URLs, payloads and responses
            logger: Logger for debug output
        """
        self.config = config
        self.site_url = config.site_url
        self.http_client = http_client
        self.timeout = timeout
        self.debug = debug
        self.logger = logger or NullLogger()

    def _headers(self) -> dict[str, str]:
        return {
            'Authorization': f'Bearer {self.config.apiKey}',
            'Content-Type': 'application/json',
        }

    async def _send(self, client: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await client.request(method, url, timeout=self.timeout, **kwargs)
        except httpx.HTTPError as e:
            raise SyncTransportError(None, f'{type(e).__name__}: {e}') from e

    async def _request(self, endpoint: str, payload: dict[str, Any]) -> Any:
        url = f'{self.site_url}{endpoint}'
        if self.debug:
            await self.logger.debug(f'POST {url}')
            await self.logger.debug(f'Payload: {json.dumps(payload)}')

        if self.http_client is not None:
            response = await self._send(self.http_client, 'POST', url, headers=self._headers(), json=payload)
        else:
            async with httpx.AsyncClient() as client:
                response = await self._send(client, 'POST', url, headers=self._headers(), json=payload)

        if not response.is_success:
            if self.debug:
                await self.logger.debug(f'Error {response.status_code}: {response.text}')
            raise SyncTransportError(response.status_code, response.text)

        try:
            result = response.json()
        except ValueError:
            result = response.text
        if self.debug:
            await self.logger.debug(f'Response: {response.text}')
        return result

    async def sync_session(self, session: SessionMetadata) -> None:
        """Upsert one session record.

        Raises:
            SyncTransportError: On network failure or non-2xx response
        """
        payload = SessionPayload.from_metadata(session)
        await self._request('/sync/session', payload.model_dump(mode='json', exclude_none=True))

    async def sync_batch(self, sessions: Sequence[SessionMetadata], records: Sequence[SyncRecord]) -> None:
        """Upsert sessions and message records in one request.

        Raises:
            SyncTransportError: On network failure or non-2xx response
        """
        payload = BatchPayload(
            sessions=[SessionPayload.from_metadata(s) for s in sessions],
            messages=[MessagePayload.from_record(r, SOURCE) for r in records],
        )
        await self._request('/sync/batch', payload.model_dump(mode='json', exclude_none=True))

    async def test_connection(self) -> bool:
        """Probe GET /health. Never raises."""
        url = f'{self.site_url}/health'
        try:
            if self.http_client is not None:
                response = await self._send(self.http_client, 'GET', url)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._send(client, 'GET', url)
        except SyncTransportError as e:
            await self.logger.debug(f'Health check failed: {e}')
            return False
        return response.is_success
