"""Cinema Domain Enums"""

from src.service.cinema.domain.enum.booking_stage import BookingStage
from src.service.cinema.domain.enum.live_event_type import LiveEventType
from src.service.cinema.domain.enum.payment_status import PaymentStatus
from src.service.cinema.domain.enum.seat_status import SeatStatus
from src.service.cinema.domain.enum.user_role import UserRole

__all__ = ['BookingStage', 'LiveEventType', 'PaymentStatus', 'SeatStatus', 'UserRole']
