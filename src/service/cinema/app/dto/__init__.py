"""Application layer DTOs"""

from src.service.cinema.app.dto.booking_dto import BookingRecordDto
from src.service.cinema.app.dto.catalog_dto import (
    MovieDto,
    SeatingLayoutDto,
    ShowDto,
    TheaterDto,
)

__all__ = ['BookingRecordDto', 'MovieDto', 'SeatingLayoutDto', 'ShowDto', 'TheaterDto']
