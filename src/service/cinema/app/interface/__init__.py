"""Application layer interfaces (Ports)"""

from src.service.cinema.app.interface.i_auth_gateway import IAuthGateway
from src.service.cinema.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.cinema.app.interface.i_live_update_channel import (
    ILiveTransport,
    ILiveUpdateChannel,
    LiveChannelHandle,
)
from src.service.cinema.app.interface.i_seat_snapshot_query_repo import ISeatSnapshotQueryRepo
from src.service.cinema.app.interface.i_session_store import ISessionStore
from src.service.cinema.app.interface.i_show_catalog_query_repo import IShowCatalogQueryRepo

__all__ = [
    'IAuthGateway',
    'IBookingCommandRepo',
    'ILiveTransport',
    'ILiveUpdateChannel',
    'ISeatSnapshotQueryRepo',
    'ISessionStore',
    'IShowCatalogQueryRepo',
    'LiveChannelHandle',
]
