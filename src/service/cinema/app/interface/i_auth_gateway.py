from abc import ABC, abstractmethod
from typing import Any, Optional

from src.service.cinema.domain.entity.session_entity import Session


class IAuthGateway(ABC):
    @abstractmethod
    async def sign_in(self, *, email: str, password: str) -> Session:
        """
        Exchange credentials for a session

        Raises:
            AuthError: bad credentials or auth service failure
        """
        pass

    @abstractmethod
    async def sign_up(
        self, *, name: str, email: str, password: str, phone: Optional[str] = None
    ) -> dict[str, Any]:
        """
        Register a user account (does not sign in)

        Raises:
            AuthError: registration rejected or auth service failure
        """
        pass
