"""
Live Update Channel Interface

One long-lived subscription per show topic, delivering parsed seat-change
events to a single consumer in receipt order.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import AsyncIterator, Awaitable, Callable, Optional, Protocol

from anyio.abc import TaskGroup

from src.service.cinema.domain.value_object.live_event import ChannelReconnected, LiveEvent


OnLiveEvent = Callable[[LiveEvent], Awaitable[None]]
OnReconnect = Callable[[ChannelReconnected], Awaitable[None]]


class LiveChannelHandle(Protocol):
    show_id: int
    topic: str

    @property
    def is_closed(self) -> bool: ...


class ILiveTransport(ABC):
    """Raw message transport for one topic (SSE in production)."""

    @abstractmethod
    def connect(self, *, topic: str) -> AbstractAsyncContextManager[AsyncIterator[str]]:
        """
        Open a connection; entering the context means connected.

        The yielded iterator produces raw message payloads and ends (or raises)
        when the connection is lost.
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Release network resources held by the transport."""
        pass


class ILiveUpdateChannel(ABC):
    @abstractmethod
    async def open(
        self,
        *,
        show_id: int,
        on_event: OnLiveEvent,
        task_group: TaskGroup,
        on_reconnect: Optional[OnReconnect] = None,
    ) -> LiveChannelHandle:
        """
        Subscribe to the show topic

        Args:
            show_id: Show whose seat topic to follow
            on_event: Awaited once per event, FIFO, never concurrently
            task_group: Owner of the reader/consumer tasks
            on_reconnect: Awaited, in order with events, after each re-established connection
        """
        pass

    @abstractmethod
    async def close(self, handle: LiveChannelHandle) -> None:
        """Tear down the subscription. Closing an already-closed handle is a no-op."""
        pass
