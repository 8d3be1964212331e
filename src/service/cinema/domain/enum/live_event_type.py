"""Live Event Type Enum - seat change notifications pushed on the show topic"""

from enum import StrEnum

from src.service.cinema.domain.enum.seat_status import SeatStatus


class LiveEventType(StrEnum):
    SEAT_BOOKED = 'SEAT_BOOKED'
    SEAT_LOCKED = 'SEAT_LOCKED'
    SEAT_RELEASED = 'SEAT_RELEASED'

    @property
    def target_status(self) -> SeatStatus:
        return _TARGET_STATUS[self]


_TARGET_STATUS = {
    LiveEventType.SEAT_BOOKED: SeatStatus.BOOKED,
    LiveEventType.SEAT_LOCKED: SeatStatus.LOCKED,
    LiveEventType.SEAT_RELEASED: SeatStatus.AVAILABLE,
}
