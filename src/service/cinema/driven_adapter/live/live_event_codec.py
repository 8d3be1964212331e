"""
Live message codec

Wire format on the seat topic:
    {"type": "SEAT_BOOKED", "seats": ["A1", "A2"]}
"""

import orjson

from src.platform.exception.exceptions import ChannelError
from src.service.cinema.domain.enum.live_event_type import LiveEventType
from src.service.cinema.domain.value_object.live_event import LiveEvent


def decode_live_event(raw: str | bytes) -> LiveEvent:
    """
    Raises:
        ChannelError: payload is not a well-formed seat-change message
    """
    try:
        payload = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise ChannelError(f'Live message is not JSON: {e}')

    if not isinstance(payload, dict):
        raise ChannelError('Live message must be an object')

    try:
        event_type = LiveEventType(payload.get('type'))
    except ValueError:
        raise ChannelError(f'Unknown live event type: {payload.get("type")!r}')

    seats = payload.get('seats')
    if not isinstance(seats, list) or not all(isinstance(s, str) and s for s in seats):
        raise ChannelError('Live message seats must be a list of seat numbers')

    return LiveEvent(type=event_type, seat_ids=tuple(seats))

