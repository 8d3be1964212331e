from typing import List

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.dto.booking_dto import BookingRecordDto
from src.service.cinema.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.cinema.app.service.session_service import SessionService


class ListUserBookingsUseCase:
    def __init__(
        self, *, session_service: SessionService, booking_command_repo: IBookingCommandRepo
    ) -> None:
        self.session_service = session_service
        self.booking_command_repo = booking_command_repo

    @Logger.io
    async def execute(self) -> List[BookingRecordDto]:
        session = self.session_service.require_session()
        return await self.booking_command_repo.list_user_bookings(user_id=session.user_id)
