from unittest.mock import AsyncMock, Mock

import pytest

from src.platform.exception.exceptions import UnauthenticatedError
from src.service.cinema.app.dto.booking_dto import BookingRecordDto
from src.service.cinema.app.query.list_user_bookings_use_case import ListUserBookingsUseCase
from src.service.cinema.domain.enum.payment_status import PaymentStatus


@pytest.mark.unit
class TestListUserBookingsUseCase:
    @pytest.mark.asyncio
    async def test_lists_bookings_of_current_user(self, user_session):
        session_service = Mock()
        session_service.require_session.return_value = user_session
        booking_command_repo = AsyncMock()
        booking_command_repo.list_user_bookings.return_value = [
            BookingRecordDto(id=77, payment_status=PaymentStatus.PAID)
        ]

        bookings = await ListUserBookingsUseCase(
            session_service=session_service, booking_command_repo=booking_command_repo
        ).execute()

        assert [b.id for b in bookings] == [77]
        booking_command_repo.list_user_bookings.assert_awaited_once_with(user_id=42)

    @pytest.mark.asyncio
    async def test_requires_session(self):
        session_service = Mock()
        session_service.require_session.side_effect = UnauthenticatedError('Please log in first.')
        booking_command_repo = AsyncMock()

        with pytest.raises(UnauthenticatedError):
            await ListUserBookingsUseCase(
                session_service=session_service, booking_command_repo=booking_command_repo
            ).execute()

        booking_command_repo.list_user_bookings.assert_not_awaited()
