"""
Session Service

The single writer of identity. Login writes the canonical record, logout and
token expiry clear it in one step; every other component only reads the
current Session.
"""

from typing import Any, Optional

from src.platform.exception.exceptions import DomainError, UnauthenticatedError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_auth_gateway import IAuthGateway
from src.service.cinema.app.interface.i_session_store import ISessionStore
from src.service.cinema.domain.entity.session_entity import Session
from src.service.cinema.domain.enum.user_role import UserRole
from src.service.cinema.domain.route_authorizer import authorize_route, can_access
from src.service.cinema.domain.value_object.route_decision import RouteDecision


class SessionService:
    def __init__(self, *, store: ISessionStore, auth_gateway: IAuthGateway) -> None:
        self._store = store
        self._auth_gateway = auth_gateway
        self._session: Optional[Session] = None
        self._restored = False

    @property
    def current(self) -> Optional[Session]:
        """The live session, or None. An expired session is cleared on read."""
        if not self._restored:
            self.restore()
        if self._session is not None and self._session.is_expired():
            Logger.base.info(f'⌛ [SESSION] Token expired for user {self._session.user_id}')
            self._clear()
        return self._session

    def is_valid(self) -> bool:
        session = self.current
        return session is not None and session.is_valid()

    @Logger.io
    def restore(self) -> Optional[Session]:
        """Load the persisted record (survives process restarts)."""
        self._restored = True
        record = self._store.load()
        if record is None:
            self._session = None
            return None
        try:
            self._session = Session.from_record(record)
        except DomainError:
            Logger.base.warning('⚠️ [SESSION] Discarding unreadable session record')
            self._clear()
        return self._session

    @Logger.io
    async def login(self, *, email: str, password: str) -> Session:
        """
        Raises:
            AuthError: bad credentials or auth service failure
        """
        session = await self._auth_gateway.sign_in(email=email, password=password)
        self._store.save(session.to_record())
        self._session = session
        self._restored = True
        Logger.base.info(f'🔑 [SESSION] Logged in user {session.user_id} as {session.role}')
        return session

    @Logger.io
    async def register(
        self, *, name: str, email: str, password: str, phone: Optional[str] = None
    ) -> dict[str, Any]:
        return await self._auth_gateway.sign_up(
            name=name, email=email, password=password, phone=phone
        )

    @Logger.io
    def logout(self) -> None:
        self._clear()
        self._restored = True
        Logger.base.info('👋 [SESSION] Logged out')

    def require_session(self) -> Session:
        session = self.current
        if session is None or not session.is_valid():
            raise UnauthenticatedError('Please log in first.')
        return session

    def bearer_token(self) -> Optional[str]:
        session = self.current
        return session.token if session is not None and session.is_valid() else None

    def can_access(self, required_role: UserRole | str) -> RouteDecision:
        return can_access(self.current, required_role)

    def authorize_route(self, path: str) -> RouteDecision:
        return authorize_route(self.current, path)

    def _clear(self) -> None:
        self._store.clear()
        self._session = None
