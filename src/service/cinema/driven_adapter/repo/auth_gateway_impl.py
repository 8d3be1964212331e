from typing import Any, Optional

import httpx
import orjson
from pydantic import ValidationError

from src.platform.exception.exceptions import AuthError
from src.platform.http.http_client import HttpClient
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_auth_gateway import IAuthGateway
from src.service.cinema.domain.entity.session_entity import Session
from src.service.cinema.domain.enum.user_role import UserRole
from src.service.cinema.driven_adapter.repo.cinema_api_schema import SignInResponse, SignUpRequest
from src.service.cinema.driven_adapter.repo.http_error_mapper import error_message


ADMIN_AUTHORITY = 'ROLE_ADMIN'


class AuthGatewayImpl(IAuthGateway):
    def __init__(self, *, http_client: HttpClient) -> None:
        self.http_client = http_client

    @Logger.io
    async def sign_in(self, *, email: str, password: str) -> Session:
        response = await self._post('/auth/signin', {'email': email, 'password': password})
        try:
            body = SignInResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise AuthError(f'Unexpected sign-in response: {e.error_count()} invalid fields', 502)

        return Session(
            token=body.access_token,
            user_id=body.id,
            email=body.email,
            role=UserRole.ADMIN if ADMIN_AUTHORITY in body.roles else UserRole.USER,
            user_name=body.username,
        )

    @Logger.io
    async def sign_up(
        self, *, name: str, email: str, password: str, phone: Optional[str] = None
    ) -> dict[str, Any]:
        request = SignUpRequest(username=name, email=email, password=password)
        response = await self._post('/auth/signup', request.model_dump(by_alias=True))
        if not response.content:
            return {}
        try:
            body = orjson.loads(response.content)
        except orjson.JSONDecodeError:
            return {'message': response.text}
        return body if isinstance(body, dict) else {'message': body}

    async def _post(self, url: str, payload: dict[str, Any]) -> httpx.Response:
        try:
            response = await self.http_client.get_client().post(url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise AuthError(error_message(e.response), e.response.status_code)
        except httpx.TransportError as e:
            raise AuthError(f'Auth service unavailable: {e}', 503)
        return response
