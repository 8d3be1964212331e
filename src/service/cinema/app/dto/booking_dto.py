from typing import Optional

import attrs

from src.service.cinema.domain.enum.payment_status import PaymentStatus


@attrs.define(frozen=True)
class BookingRecordDto:
    """Server copy of a booking as returned by the booking collaborator."""

    id: int
    payment_status: PaymentStatus
    seat_ids: Optional[tuple[str, ...]] = None
    total_amount: Optional[float] = None
    show_id: Optional[int] = None
    movie_id: Optional[int] = None
    theater_id: Optional[int] = None
    user_id: Optional[int] = None
