from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from src.platform.exception.exceptions import AuthError, UnauthenticatedError
from src.service.cinema.app.service.session_service import SessionService
from src.service.cinema.domain.enum.user_role import UserRole
from src.service.cinema.driven_adapter.state.file_session_store_impl import FileSessionStoreImpl


@pytest.fixture
def store(tmp_path) -> FileSessionStoreImpl:
    return FileSessionStoreImpl(path=tmp_path / 'session.json')


@pytest.fixture
def auth_gateway() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def session_service(store, auth_gateway) -> SessionService:
    return SessionService(store=store, auth_gateway=auth_gateway)


@pytest.mark.unit
class TestSessionService:
    @pytest.mark.asyncio
    async def test_login_persists_canonical_record(
        self, session_service, store, auth_gateway, user_session
    ):
        auth_gateway.sign_in.return_value = user_session

        session = await session_service.login(email='neo@cineverse.test', password='P@ssw0rd')

        assert session == user_session
        assert store.load() == user_session.to_record()
        assert session_service.is_valid()
        assert session_service.bearer_token() == user_session.token
        auth_gateway.sign_in.assert_awaited_once_with(
            email='neo@cineverse.test', password='P@ssw0rd'
        )

    @pytest.mark.asyncio
    async def test_failed_login_writes_nothing(self, session_service, store, auth_gateway):
        auth_gateway.sign_in.side_effect = AuthError('Bad credentials', 401)

        with pytest.raises(AuthError):
            await session_service.login(email='neo@cineverse.test', password='wrong')

        assert store.load() is None
        assert session_service.current is None

    def test_session_survives_restart(self, store, auth_gateway, admin_session):
        store.save(admin_session.to_record())

        restarted = SessionService(store=store, auth_gateway=auth_gateway)

        assert restarted.current == admin_session
        assert restarted.can_access(UserRole.ADMIN).allowed

    def test_logout_clears_everything(self, session_service, store, user_session):
        store.save(user_session.to_record())
        assert session_service.current is not None

        session_service.logout()

        assert store.load() is None
        assert session_service.current is None
        assert session_service.bearer_token() is None
        assert session_service.authorize_route('/booking/5').redirect_to == '/auth'

    def test_expired_session_is_cleared_on_read(self, store, auth_gateway, session_factory):
        store.save(session_factory(expires_in=timedelta(seconds=-1)).to_record())
        session_service = SessionService(store=store, auth_gateway=auth_gateway)

        assert session_service.current is None
        assert store.load() is None
        with pytest.raises(UnauthenticatedError):
            session_service.require_session()

    def test_half_written_record_is_discarded(self, store, auth_gateway, user_session):
        record = user_session.to_record()
        del record['role']
        store.save(record)

        session_service = SessionService(store=store, auth_gateway=auth_gateway)

        assert session_service.current is None
        assert store.load() is None

    @pytest.mark.asyncio
    async def test_register_does_not_sign_in(self, session_service, store, auth_gateway):
        auth_gateway.sign_up.return_value = {'message': 'User registered successfully!'}

        result = await session_service.register(
            name='neo', email='neo@cineverse.test', password='P@ssw0rd'
        )

        assert result == {'message': 'User registered successfully!'}
        assert store.load() is None
        auth_gateway.sign_in.assert_not_awaited()
