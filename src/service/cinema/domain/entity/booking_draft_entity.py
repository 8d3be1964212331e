from datetime import datetime, timezone
from typing import Any, Iterable, Optional

import attrs

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.domain.enum.payment_status import PaymentStatus


@attrs.define(frozen=True)
class BookingDraft:
    """
    In-progress, not-yet-paid record of a seat reservation attempt.

    While payment_status is NONE the draft follows the selection and
    total_amount is always unit_price x len(seat_ids). Submission (-> PENDING)
    freezes seat_ids and total_amount; after that only the server's copy is
    carried forward.
    """

    user_id: int
    show_id: int
    movie_id: int
    theater_id: int
    unit_price: float
    user_email: str
    seat_ids: tuple[str, ...] = ()
    total_amount: float = 0
    payment_status: PaymentStatus = PaymentStatus.NONE
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        user_id: int,
        show_id: int,
        movie_id: int,
        theater_id: int,
        unit_price: float,
        user_email: str,
        seat_ids: Iterable[str] = (),
    ) -> 'BookingDraft':
        seats = tuple(seat_ids)
        now = datetime.now(timezone.utc)
        return cls(
            user_id=user_id,
            show_id=show_id,
            movie_id=movie_id,
            theater_id=theater_id,
            unit_price=unit_price,
            user_email=user_email,
            seat_ids=seats,
            total_amount=unit_price * len(seats),
            payment_status=PaymentStatus.NONE,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_frozen(self) -> bool:
        return self.payment_status != PaymentStatus.NONE

    @property
    def seat_numbers(self) -> str:
        return ','.join(self.seat_ids)

    def with_seats(self, seat_ids: Iterable[str]) -> 'BookingDraft':
        if self.is_frozen:
            raise DomainError('Seats cannot change once the draft is submitted')
        seats = tuple(seat_ids)
        return attrs.evolve(
            self,
            seat_ids=seats,
            total_amount=self.unit_price * len(seats),
            updated_at=datetime.now(timezone.utc),
        )

    @Logger.io
    def mark_as_pending(self) -> 'BookingDraft':
        if self.is_frozen:
            raise DomainError('Draft already submitted')
        if not self.seat_ids:
            raise DomainError('No seats selected for booking')
        return attrs.evolve(
            self,
            payment_status=PaymentStatus.PENDING,
            updated_at=datetime.now(timezone.utc),
        )

    def to_request_payload(self) -> dict[str, Any]:
        if self.payment_status != PaymentStatus.PENDING:
            raise DomainError('Only a pending draft can be submitted')
        return {
            'userId': self.user_id,
            'showId': self.show_id,
            'movieId': self.movie_id,
            'theaterId': self.theater_id,
            'seatNumbers': self.seat_numbers,
            'totalAmount': self.total_amount,
            'paymentStatus': PaymentStatus.PENDING.value,
            'userEmail': self.user_email,
        }

    @Logger.io
    def accept_server_copy(
        self,
        *,
        booking_id: int,
        payment_status: PaymentStatus,
        seat_ids: Optional[tuple[str, ...]] = None,
        total_amount: Optional[float] = None,
    ) -> 'BookingDraft':
        """
        Carry the server's copy forward verbatim.

        Fields the server omitted keep the submitted (frozen) values; nothing is
        re-derived from the local selection.
        """
        if not self.is_frozen:
            raise DomainError('Draft must be submitted before accepting the server copy')
        if self.id is not None and self.id != booking_id:
            raise DomainError(f'Booking id mismatch: {self.id} != {booking_id}')
        if payment_status == PaymentStatus.NONE:
            raise DomainError('Server copy cannot reopen a submitted draft')
        return attrs.evolve(
            self,
            id=booking_id,
            payment_status=payment_status,
            seat_ids=self.seat_ids if seat_ids is None else seat_ids,
            total_amount=self.total_amount if total_amount is None else total_amount,
            updated_at=datetime.now(timezone.utc),
        )

    @Logger.io
    def validate_can_confirm(self) -> None:
        if self.id is None:
            raise DomainError('Draft has no server-assigned id')
        if self.payment_status == PaymentStatus.PAID:
            raise DomainError('Booking already paid')
        if self.payment_status not in (PaymentStatus.PENDING, PaymentStatus.FAILED):
            raise DomainError('Booking is not in a payable state')

    def mark_as_failed(self) -> 'BookingDraft':
        return attrs.evolve(
            self, payment_status=PaymentStatus.FAILED, updated_at=datetime.now(timezone.utc)
        )
