"""
Booking Command Repository Interface

The booking/payment REST collaborator. Lock ownership and conflict
resolution are the server's; this port only submits and confirms.
"""

from abc import ABC, abstractmethod
from typing import List

from src.service.cinema.app.dto.booking_dto import BookingRecordDto
from src.service.cinema.domain.entity.booking_draft_entity import BookingDraft


class IBookingCommandRepo(ABC):
    @abstractmethod
    async def create_booking(self, *, draft: BookingDraft) -> BookingRecordDto:
        """
        Submit a PENDING draft (POST /bookings)

        Raises:
            UnauthenticatedError: no bearer token available, or 401/403
            SeatConflictError: a chosen seat was taken meanwhile
            BookingSubmissionError: any other failure
        """
        pass

    @abstractmethod
    async def confirm_payment(self, *, booking_id: int) -> BookingRecordDto:
        """
        Mark the booking PAID (PUT /bookings/{id}/confirm)

        Raises:
            UnauthenticatedError: 401/403
            PaymentConfirmationError: any other failure; safe to retry with the same id
        """
        pass

    @abstractmethod
    async def list_user_bookings(self, *, user_id: int) -> List[BookingRecordDto]:
        """
        Booking history of a user (GET /bookings/user/{userId})

        Raises:
            UnauthenticatedError: 401/403
            SnapshotError: any other failure
        """
        pass
