"""Shared builders for cinema unit tests."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from src.service.cinema.domain.entity.session_entity import Session
from src.service.cinema.domain.enum.user_role import UserRole
from src.service.cinema.domain.value_object.show_context import ShowContext


def _make_token(*, expires_in: timedelta = timedelta(hours=1), user_id: int = 42) -> str:
    exp = datetime.now(timezone.utc) + expires_in
    claims = {'sub': str(user_id), 'exp': int(exp.timestamp())}
    return jwt.encode(claims, 'test-secret', algorithm='HS256')


def _make_session(
    *, role: UserRole = UserRole.USER, expires_in: timedelta = timedelta(hours=1)
) -> Session:
    return Session(
        token=_make_token(expires_in=expires_in),
        user_id=42,
        email='neo@cineverse.test',
        role=role,
        user_name='neo',
    )


@pytest.fixture
def show() -> ShowContext:
    return ShowContext(
        show_id=5,
        movie_id=1,
        theater_id=2,
        unit_price=250,
        rows=3,
        seats_per_row=8,
        aisles=(4,),
        movie_title='Dune',
        theater_name='PVR Orion',
        show_date='2025-01-10',
        show_time='18:30',
    )


@pytest.fixture
def user_session() -> Session:
    return _make_session()


@pytest.fixture
def admin_session() -> Session:
    return _make_session(role=UserRole.ADMIN)


@pytest.fixture
def token_factory():
    return _make_token


@pytest.fixture
def session_factory():
    return _make_session
