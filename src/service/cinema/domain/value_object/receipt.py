from typing import Optional

import attrs

from src.service.cinema.domain.enum.payment_status import PaymentStatus


@attrs.define(frozen=True)
class Receipt:
    """Finalized booking handed to the presentation layer (PDF/QR rendering lives there)."""

    booking_id: int
    show_id: int
    movie_id: int
    theater_id: int
    seat_ids: tuple[str, ...]
    total_amount: float
    payment_status: PaymentStatus
    movie_title: Optional[str] = None
    theater_name: Optional[str] = None
    show_time: str = 'N/A'

    @property
    def seats(self) -> str:
        return ','.join(self.seat_ids)
