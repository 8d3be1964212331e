"""Booking Stage Enum - states of the booking session state machine"""

from enum import StrEnum


class BookingStage(StrEnum):
    BROWSING = 'browsing'
    SEAT_SELECTING = 'seat_selecting'
    RESERVING = 'reserving'
    AWAITING_PAYMENT = 'awaiting_payment'
    CONFIRMED = 'confirmed'
    FAILED = 'failed'
