"""
Live Event Value Object

A transient seat-change notification received on the show topic.
Never persisted; only ever applied to seat statuses.
"""

import attrs

from src.service.cinema.domain.enum.live_event_type import LiveEventType
from src.service.cinema.domain.enum.seat_status import SeatStatus


def _dedupe(seat_ids: tuple[str, ...] | list[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(seat_ids))


@attrs.define(frozen=True)
class LiveEvent:
    type: LiveEventType
    seat_ids: tuple[str, ...] = attrs.field(converter=_dedupe)

    @property
    def target_status(self) -> SeatStatus:
        return self.type.target_status

    @property
    def demotes_selection(self) -> bool:
        """Booked/locked by someone else: a local SELECTED seat must give way."""
        return self.target_status in (SeatStatus.BOOKED, SeatStatus.LOCKED)


@attrs.define(frozen=True)
class ChannelReconnected:
    """Marker queued after the transport re-establishes a dropped connection."""

    show_id: int
    attempt: int
