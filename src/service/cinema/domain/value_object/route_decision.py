from typing import Optional

import attrs


@attrs.define(frozen=True)
class RouteDecision:
    allowed: bool
    redirect_to: Optional[str] = None

    @classmethod
    def allow(cls) -> 'RouteDecision':
        return cls(allowed=True)

    @classmethod
    def redirect(cls, route: str) -> 'RouteDecision':
        return cls(allowed=False, redirect_to=route)
