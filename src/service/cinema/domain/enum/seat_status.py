"""Seat Status Enum"""

from enum import StrEnum


class SeatStatus(StrEnum):
    """
    Exactly one status per seat at any instant.

    SELECTED is local-only: the server never reports it, it marks seats in the
    current user's in-progress selection.
    """

    AVAILABLE = 'AVAILABLE'
    SELECTED = 'SELECTED'
    LOCKED = 'LOCKED'
    BOOKED = 'BOOKED'

    @property
    def is_selectable(self) -> bool:
        return self in (SeatStatus.AVAILABLE, SeatStatus.SELECTED)
