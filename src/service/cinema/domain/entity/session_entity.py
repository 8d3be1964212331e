from datetime import datetime, timezone
from typing import Any, Optional

import attrs
import jwt

from src.platform.exception.exceptions import DomainError
from src.service.cinema.domain.enum.user_role import UserRole


def _token_expiry(token: str) -> Optional[datetime]:
    """Read `exp` from a JWT without verifying it; opaque tokens have no local expiry."""
    try:
        claims = jwt.decode(token, options={'verify_signature': False})
    except jwt.PyJWTError:
        return None
    exp = claims.get('exp')
    if not isinstance(exp, (int, float)):
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc)


@attrs.define(frozen=True)
class Session:
    """
    Authenticated identity of the current user.

    Created on successful login, destroyed on logout or token expiry. Only the
    session service writes it; everything else receives it read-only.
    """

    token: str = attrs.field(repr=False)  # Hide from repr for security
    user_id: int
    email: str
    role: UserRole = attrs.field(converter=UserRole)
    user_name: Optional[str] = None
    expires_at: Optional[datetime] = attrs.field(
        default=attrs.Factory(lambda self: _token_expiry(self.token), takes_self=True)
    )

    def is_expired(self, *, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or datetime.now(timezone.utc)) >= self.expires_at

    def is_valid(self, *, now: Optional[datetime] = None) -> bool:
        return bool(self.token) and bool(self.role) and not self.is_expired(now=now)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def to_record(self) -> dict[str, Any]:
        """The canonical persisted record: {token, role, email, userId, userName}."""
        return {
            'token': self.token,
            'role': self.role.value,
            'email': self.email,
            'userId': self.user_id,
            'userName': self.user_name,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> 'Session':
        # A record missing token or role is a partial write; refuse it rather than half-restore
        try:
            return cls(
                token=record['token'],
                user_id=int(record['userId']),
                email=record['email'],
                role=record['role'],
                user_name=record.get('userName'),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DomainError(f'Invalid session record: {e}')
