from typing import Callable, Generator, Optional

import httpx

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


TokenProvider = Callable[[], Optional[str]]


class SessionBearerAuth(httpx.Auth):
    """
    Attach `Authorization: Bearer <token>` from the live session on every request.

    The token is read per request through the provider, so logout or expiry
    takes effect immediately and no copy of the token is kept here.
    """

    def __init__(self, token_provider: TokenProvider) -> None:
        self._token_provider = token_provider

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        token = self._token_provider()
        if token:
            request.headers['Authorization'] = f'Bearer {token}'
        yield request


class HttpClient:
    """
    Shared httpx.AsyncClient for the REST collaborators.

    Usage:
        client = http_client.get_client()  # created lazily on first use
        await http_client.disconnect()  # on shutdown
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url or settings.API_BASE_URL
        self._token_provider = token_provider
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(settings.HTTP_TIMEOUT_SECONDS),
                auth=SessionBearerAuth(self._token_provider) if self._token_provider else None,
                headers={'Accept': 'application/json'},
                transport=self._transport,
            )
            Logger.base.info(f'🌐 HTTP client ready for {self._base_url}')
        return self._client

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

