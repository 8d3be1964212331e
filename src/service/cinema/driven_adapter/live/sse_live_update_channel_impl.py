"""
Live Update Channel

One subscription per show. A reader task pulls raw messages off the
transport, decodes them and pushes them into a bounded memory stream; a
single consumer task drains that stream and awaits the callbacks, so events
reach the seat inventory one at a time in receipt order.

[Reconnection]
- Any transport loss is followed by a fixed delay, then a new connection
- After every re-established connection a ChannelReconnected marker is queued
  behind the events received so far; missed events are never synthesized
- close() cancels the handle's scope (reader, consumer and any pending
  reconnect sleep) and disconnects the transport exactly once
"""

from typing import Optional

import anyio
from anyio.abc import TaskGroup
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
import attrs

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import ChannelError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_live_update_channel import (
    ILiveTransport,
    ILiveUpdateChannel,
    LiveChannelHandle,
    OnLiveEvent,
    OnReconnect,
)
from src.service.cinema.domain.value_object.live_event import ChannelReconnected, LiveEvent
from src.service.cinema.driven_adapter.live.live_event_codec import decode_live_event


ChannelItem = LiveEvent | ChannelReconnected


def topic_for(show_id: int) -> str:
    return f'seats/{show_id}'


@attrs.define
class SseChannelHandle:
    show_id: int
    topic: str
    send_stream: MemoryObjectSendStream[ChannelItem] = attrs.field(repr=False)
    receive_stream: MemoryObjectReceiveStream[ChannelItem] = attrs.field(repr=False)
    cancel_scope: anyio.CancelScope = attrs.field(factory=anyio.CancelScope, repr=False)
    closed: bool = False
    reconnects: int = 0
    dropped_messages: int = 0

    @property
    def is_closed(self) -> bool:
        return self.closed


class SseLiveUpdateChannelImpl(ILiveUpdateChannel):
    def __init__(
        self,
        *,
        transport: ILiveTransport,
        reconnect_delay: Optional[float] = None,
        buffer_size: Optional[int] = None,
    ) -> None:
        self.transport = transport
        self._reconnect_delay = (
            settings.LIVE_RECONNECT_DELAY_SECONDS if reconnect_delay is None else reconnect_delay
        )
        self._buffer_size = settings.LIVE_EVENT_BUFFER_SIZE if buffer_size is None else buffer_size

    @Logger.io
    async def open(
        self,
        *,
        show_id: int,
        on_event: OnLiveEvent,
        task_group: TaskGroup,
        on_reconnect: Optional[OnReconnect] = None,
    ) -> SseChannelHandle:
        send_stream, receive_stream = anyio.create_memory_object_stream[ChannelItem](
            max_buffer_size=self._buffer_size
        )
        handle = SseChannelHandle(
            show_id=show_id,
            topic=topic_for(show_id),
            send_stream=send_stream,
            receive_stream=receive_stream,
        )
        task_group.start_soon(self._run, handle, on_event, on_reconnect)  # pyrefly: ignore[bad-argument-type]
        Logger.base.info(f'🔔 [LIVE-CHANNEL] Opened {handle.topic}')
        return handle

    @Logger.io
    async def close(self, handle: LiveChannelHandle) -> None:
        if not isinstance(handle, SseChannelHandle):
            raise TypeError(f'Not a handle of this channel: {handle!r}')
        if handle.closed:
            return
        handle.closed = True
        handle.cancel_scope.cancel()
        await self.transport.disconnect()
        Logger.base.info(
            f'🔕 [LIVE-CHANNEL] Closed {handle.topic} '
            f'(reconnects={handle.reconnects}, dropped={handle.dropped_messages})'
        )

    async def _run(
        self,
        handle: SseChannelHandle,
        on_event: OnLiveEvent,
        on_reconnect: Optional[OnReconnect],
    ) -> None:
        try:
            with handle.cancel_scope:
                async with anyio.create_task_group() as tg:
                    tg.start_soon(self._read_loop, handle)
                    tg.start_soon(self._consume, handle, on_event, on_reconnect)
        finally:
            handle.send_stream.close()
            handle.receive_stream.close()

    async def _read_loop(self, handle: SseChannelHandle) -> None:
        """Main subscription loop with automatic reconnection"""
        attempt = 0
        while True:
            try:
                async with self.transport.connect(topic=handle.topic) as messages:
                    if attempt:
                        handle.reconnects += 1
                        await handle.send_stream.send(
                            ChannelReconnected(show_id=handle.show_id, attempt=attempt)
                        )
                    async for raw in messages:
                        try:
                            event = decode_live_event(raw)
                        except ChannelError as e:
                            handle.dropped_messages += 1
                            Logger.base.warning(f'⚠️ [LIVE-CHANNEL] Dropped message: {e.message}')
                            continue
                        await handle.send_stream.send(event)
                Logger.base.warning(f'⚠️ [LIVE-CHANNEL] {handle.topic} stream ended')
            except ChannelError as e:
                Logger.base.warning(f'⚠️ [LIVE-CHANNEL] {handle.topic}: {e.message}')

            attempt += 1
            Logger.base.info(
                f'🔄 [LIVE-CHANNEL] Reconnecting {handle.topic} in {self._reconnect_delay}s...'
            )
            await anyio.sleep(self._reconnect_delay)

    async def _consume(
        self,
        handle: SseChannelHandle,
        on_event: OnLiveEvent,
        on_reconnect: Optional[OnReconnect],
    ) -> None:
        async for item in handle.receive_stream:
            if isinstance(item, ChannelReconnected):
                Logger.base.info(f'🔗 [LIVE-CHANNEL] {handle.topic} reconnected (#{item.attempt})')
                if on_reconnect is not None:
                    await on_reconnect(item)
            else:
                await on_event(item)
