"""Cinema Domain Value Objects"""

from src.service.cinema.domain.value_object.live_event import ChannelReconnected, LiveEvent
from src.service.cinema.domain.value_object.receipt import Receipt
from src.service.cinema.domain.value_object.route_decision import RouteDecision
from src.service.cinema.domain.value_object.selection_result import MergeOutcome, SelectionResult
from src.service.cinema.domain.value_object.show_context import ShowContext, seat_id_for

__all__ = [
    'ChannelReconnected',
    'LiveEvent',
    'MergeOutcome',
    'Receipt',
    'RouteDecision',
    'SelectionResult',
    'ShowContext',
    'seat_id_for',
]
