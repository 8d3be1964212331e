from abc import ABC, abstractmethod
from typing import Any, Optional


class ISessionStore(ABC):
    """
    Durable storage for the single canonical session record.

    Writes and clears are all-or-nothing: a reader never observes a record
    with a token but no role.
    """

    @abstractmethod
    def load(self) -> Optional[dict[str, Any]]:
        pass

    @abstractmethod
    def save(self, record: dict[str, Any]) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass
