"""Wire shapes of the cinema REST API (camelCase JSON)."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from src.service.cinema.domain.enum.payment_status import PaymentStatus
from src.service.cinema.domain.enum.seat_status import SeatStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')


class SignInResponse(CamelModel):
    access_token: str
    id: int
    email: str
    username: Optional[str] = None
    roles: List[str] = []


class SignUpRequest(CamelModel):
    username: str
    email: str
    password: str
    role: List[str] = ['user']

    def __repr__(self) -> str:
        return f"SignUpRequest(username='{self.username}', email='{self.email}', password='********')"


class ShowResponse(CamelModel):
    id: int
    movie_id: int
    theater_id: int
    price: float
    show_date: Optional[str] = None
    show_time: Optional[str] = None
    screen_number: Optional[int] = None
    available_seats: Optional[int] = None


class MovieResponse(CamelModel):
    id: int
    title: str
    genre: Optional[str] = None
    language: Optional[str] = None
    duration: Optional[int] = None


class SeatingLayoutResponse(CamelModel):
    rows: int
    seats_per_row: int
    aisles: List[int] = []


class TheaterResponse(CamelModel):
    id: int
    name: str
    location: Optional[str] = None
    seating_layout: Optional[SeatingLayoutResponse] = None


class SeatResponse(CamelModel):
    seat_number: str
    status: SeatStatus

    @field_validator('status', mode='before')
    @classmethod
    def normalize_status(cls, v: object) -> SeatStatus:
        # Only a server-side hold makes a seat unavailable
        status = str(v or '').upper()
        if status in (SeatStatus.BOOKED, SeatStatus.LOCKED):
            return SeatStatus(status)
        return SeatStatus.AVAILABLE


class BookingResponse(CamelModel):
    id: int
    payment_status: PaymentStatus
    seat_numbers: Optional[str] = None
    total_amount: Optional[float] = None
    show_id: Optional[int] = None
    movie_id: Optional[int] = None
    theater_id: Optional[int] = None
    user_id: Optional[int] = None

    @field_validator('payment_status', mode='before')
    @classmethod
    def normalize_payment_status(cls, v: object) -> PaymentStatus:
        status = str(v or '').upper()
        if status == 'COMPLETED':
            return PaymentStatus.PAID
        if status in ('', 'UNPAID'):
            return PaymentStatus.NONE
        return PaymentStatus(status)

    @property
    def seat_ids(self) -> Optional[tuple[str, ...]]:
        if self.seat_numbers is None:
            return None
        return tuple(s.strip() for s in self.seat_numbers.split(',') if s.strip())
