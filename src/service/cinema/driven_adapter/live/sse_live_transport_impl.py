"""
SSE Live Transport

Reads Server-Sent Events from `{LIVE_UPDATE_BASE_URL}/topic/{topic}` over an
httpx stream. Each event's `data:` lines (joined with newlines) form one raw
message; `:` comment lines are heartbeats and are skipped.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import ChannelError
from src.platform.http.http_client import SessionBearerAuth, TokenProvider
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_live_update_channel import ILiveTransport


async def iter_sse_data(lines: AsyncIterator[str]) -> AsyncIterator[str]:
    data_lines: list[str] = []
    async for line in lines:
        if not line:
            if data_lines:
                yield '\n'.join(data_lines)
                data_lines = []
            continue
        if line.startswith(':'):
            continue
        field, _, value = line.partition(':')
        if field == 'data':
            data_lines.append(value[1:] if value.startswith(' ') else value)
    if data_lines:
        yield '\n'.join(data_lines)


class SseLiveTransportImpl(ILiveTransport):
    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url or settings.LIVE_UPDATE_BASE_URL
        self._token_provider = token_provider
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                # No read timeout: the stream stays open between events
                timeout=httpx.Timeout(settings.HTTP_TIMEOUT_SECONDS, read=None),
                auth=SessionBearerAuth(self._token_provider) if self._token_provider else None,
                transport=self._transport,
            )
        return self._client

    @asynccontextmanager
    async def connect(self, *, topic: str) -> AsyncIterator[AsyncIterator[str]]:
        url = f'/topic/{topic}'
        try:
            async with self._get_client().stream(
                'GET', url, headers={'Accept': 'text/event-stream'}
            ) as response:
                response.raise_for_status()
                Logger.base.info(f'📡 [LIVE-CHANNEL] Connected to {self._base_url}{url}')
                yield iter_sse_data(response.aiter_lines())
        except httpx.HTTPStatusError as e:
            raise ChannelError(f'Live stream {url} refused: {e.response.status_code}')
        except httpx.HTTPError as e:
            raise ChannelError(f'Live stream {url} lost: {e}')

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
