"""
Route Authorizer

The one decision table for role-gated routes. Every protected entry point
asks `can_access`; nothing else compares roles to routes.

| session           | required | decision              |
|-------------------|----------|-----------------------|
| invalid           | any      | redirect -> auth      |
| valid, user       | user     | allow                 |
| valid, user       | admin    | redirect -> user home |
| valid, admin      | admin    | allow                 |
| valid, admin      | user     | redirect -> admin home|
"""

from datetime import datetime
from typing import Optional

import attrs

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.service.cinema.domain.entity.session_entity import Session
from src.service.cinema.domain.enum.user_role import UserRole
from src.service.cinema.domain.value_object.route_decision import RouteDecision


@attrs.define(frozen=True)
class RouteTargets:
    auth: str
    guest_home: str
    user_home: str
    admin_home: str

    @classmethod
    def from_settings(cls) -> 'RouteTargets':
        return cls(
            auth=settings.AUTH_ROUTE,
            guest_home=settings.GUEST_HOME_ROUTE,
            user_home=settings.USER_HOME_ROUTE,
            admin_home=settings.ADMIN_HOME_ROUTE,
        )

    def home_for(self, role: UserRole) -> str:
        return self.admin_home if role == UserRole.ADMIN else self.user_home


@Logger.io
def can_access(
    session: Optional[Session],
    required_role: UserRole | str,
    *,
    targets: Optional[RouteTargets] = None,
    now: Optional[datetime] = None,
) -> RouteDecision:
    targets = targets or RouteTargets.from_settings()
    if session is None or not session.is_valid(now=now):
        return RouteDecision.redirect(targets.auth)
    if session.role == UserRole(required_role):
        return RouteDecision.allow()
    return RouteDecision.redirect(targets.home_for(session.role))


@Logger.io
def resolve_landing(
    session: Optional[Session],
    *,
    targets: Optional[RouteTargets] = None,
    now: Optional[datetime] = None,
) -> str:
    """Where `/` and the auth page send a visitor: their role's home, or the guest home."""
    targets = targets or RouteTargets.from_settings()
    if session is None or not session.is_valid(now=now):
        return targets.guest_home
    return targets.home_for(session.role)


# Role-gated routes of the client; paths not listed are public
PROTECTED_ROUTES: tuple[tuple[str, UserRole], ...] = (
    ('/home', UserRole.USER),
    ('/movies', UserRole.USER),
    ('/movie/{movie_id}', UserRole.USER),
    ('/booking/{show_id}', UserRole.USER),
    ('/payment', UserRole.USER),
    ('/confirmation', UserRole.USER),
    ('/profile', UserRole.USER),
    ('/admin', UserRole.ADMIN),
)


def _matches(pattern: str, path: str) -> bool:
    pattern_parts = pattern.strip('/').split('/')
    path_parts = path.split('?', 1)[0].strip('/').split('/')
    if len(pattern_parts) != len(path_parts):
        return False
    return all(
        (p.startswith('{') and p.endswith('}') and bool(actual)) or p == actual
        for p, actual in zip(pattern_parts, path_parts, strict=True)
    )


def required_role_for(path: str) -> Optional[UserRole]:
    for pattern, role in PROTECTED_ROUTES:
        if _matches(pattern, path):
            return role
    return None


@Logger.io
def authorize_route(
    session: Optional[Session],
    path: str,
    *,
    targets: Optional[RouteTargets] = None,
    now: Optional[datetime] = None,
) -> RouteDecision:
    required_role = required_role_for(path)
    if required_role is None:
        return RouteDecision.allow()
    decision = can_access(session, required_role, targets=targets, now=now)
    if not decision.allowed:
        Logger.base.info(f'🚧 [ROUTE-AUTH] {path} requires {required_role} -> {decision.redirect_to}')
    return decision
