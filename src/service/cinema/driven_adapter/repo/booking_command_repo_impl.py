from typing import Any, List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from src.platform.exception.exceptions import (
    BookingSubmissionError,
    PaymentConfirmationError,
    SeatConflictError,
    SnapshotError,
    UnauthenticatedError,
)
from src.platform.http.http_client import HttpClient, TokenProvider
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.dto.booking_dto import BookingRecordDto
from src.service.cinema.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.cinema.domain.entity.booking_draft_entity import BookingDraft
from src.service.cinema.driven_adapter.repo.cinema_api_schema import BookingResponse
from src.service.cinema.driven_adapter.repo.http_error_mapper import (
    error_message,
    raise_if_unauthenticated,
)


_BOOKING_LIST = TypeAdapter(list[BookingResponse])


def _to_record(booking: BookingResponse) -> BookingRecordDto:
    return BookingRecordDto(
        id=booking.id,
        payment_status=booking.payment_status,
        seat_ids=booking.seat_ids,
        total_amount=booking.total_amount,
        show_id=booking.show_id,
        movie_id=booking.movie_id,
        theater_id=booking.theater_id,
        user_id=booking.user_id,
    )


class BookingCommandRepoImpl(IBookingCommandRepo):
    def __init__(
        self, *, http_client: HttpClient, token_provider: Optional[TokenProvider] = None
    ) -> None:
        self.http_client = http_client
        self.token_provider = token_provider

    @Logger.io
    async def create_booking(self, *, draft: BookingDraft) -> BookingRecordDto:
        if self.token_provider is not None and not self.token_provider():
            raise UnauthenticatedError('No bearer token for booking submission')

        payload = draft.to_request_payload()
        try:
            response = await self._send('POST', '/bookings', json=payload)
            booking = BookingResponse.model_validate_json(response.content)
        except httpx.HTTPStatusError as e:
            raise_if_unauthenticated(e.response)
            if e.response.status_code == 409:
                raise SeatConflictError(error_message(e.response), seat_ids=draft.seat_ids)
            raise BookingSubmissionError(error_message(e.response), e.response.status_code)
        except httpx.TransportError as e:
            raise BookingSubmissionError(f'Booking service unavailable: {e}')
        except ValidationError as e:
            raise BookingSubmissionError(f'Malformed booking response: {e.error_count()} errors')

        Logger.base.info(f'📦 [BOOKING-SESSION] Created booking {booking.id} ({booking.payment_status})')
        return _to_record(booking)

    @Logger.io
    async def confirm_payment(self, *, booking_id: int) -> BookingRecordDto:
        try:
            response = await self._send('PUT', f'/bookings/{booking_id}/confirm')
            booking = BookingResponse.model_validate_json(response.content)
        except httpx.HTTPStatusError as e:
            raise_if_unauthenticated(e.response)
            raise PaymentConfirmationError(error_message(e.response), e.response.status_code)
        except httpx.TransportError as e:
            raise PaymentConfirmationError(f'Payment service unavailable: {e}')
        except ValidationError as e:
            raise PaymentConfirmationError(f'Malformed booking response: {e.error_count()} errors')

        return _to_record(booking)

    @Logger.io
    async def list_user_bookings(self, *, user_id: int) -> List[BookingRecordDto]:
        try:
            response = await self._send('GET', f'/bookings/user/{user_id}')
            bookings = _BOOKING_LIST.validate_json(response.content)
        except httpx.HTTPStatusError as e:
            raise_if_unauthenticated(e.response)
            raise SnapshotError(
                f'Bookings of user {user_id} unavailable: {error_message(e.response)}'
            )
        except httpx.TransportError as e:
            raise SnapshotError(f'Booking service unavailable: {e}')
        except ValidationError as e:
            raise SnapshotError(f'Malformed booking list: {e.error_count()} errors', 502)

        return [_to_record(booking) for booking in bookings]

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        response = await self.http_client.get_client().request(method, url, **kwargs)
        response.raise_for_status()
        return response
