"""
https://python-dependency-injector.ets-labs.org/index.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.http.http_client import HttpClient
from src.service.cinema.app.command.booking_session import BookingSession
from src.service.cinema.app.query.list_user_bookings_use_case import ListUserBookingsUseCase
from src.service.cinema.app.query.load_show_context_use_case import LoadShowContextUseCase
from src.service.cinema.app.service.session_service import SessionService
from src.service.cinema.driven_adapter.live.sse_live_transport_impl import SseLiveTransportImpl
from src.service.cinema.driven_adapter.live.sse_live_update_channel_impl import (
    SseLiveUpdateChannelImpl,
)
from src.service.cinema.driven_adapter.repo.auth_gateway_impl import AuthGatewayImpl
from src.service.cinema.driven_adapter.repo.booking_command_repo_impl import (
    BookingCommandRepoImpl,
)
from src.service.cinema.driven_adapter.repo.seat_snapshot_query_repo_impl import (
    SeatSnapshotQueryRepoImpl,
)
from src.service.cinema.driven_adapter.repo.show_catalog_query_repo_impl import (
    ShowCatalogQueryRepoImpl,
)
from src.service.cinema.driven_adapter.state.file_session_store_impl import FileSessionStoreImpl


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Identity (single writer: session_service)
    session_store = providers.Singleton(FileSessionStoreImpl)
    # Sign-in/sign-up never carry a bearer token
    public_http_client = providers.Singleton(HttpClient)
    auth_gateway = providers.Singleton(AuthGatewayImpl, http_client=public_http_client)
    session_service = providers.Singleton(
        SessionService, store=session_store, auth_gateway=auth_gateway
    )

    # REST collaborators (bearer token read from the live session per request)
    http_client = providers.Singleton(
        HttpClient, token_provider=session_service.provided.bearer_token
    )
    show_catalog_query_repo = providers.Singleton(ShowCatalogQueryRepoImpl, http_client=http_client)
    seat_snapshot_query_repo = providers.Singleton(
        SeatSnapshotQueryRepoImpl, http_client=http_client
    )
    booking_command_repo = providers.Singleton(
        BookingCommandRepoImpl,
        http_client=http_client,
        token_provider=session_service.provided.bearer_token,
    )

    # Live channel (one transport per booking session)
    live_transport = providers.Factory(
        SseLiveTransportImpl, token_provider=session_service.provided.bearer_token
    )
    live_update_channel = providers.Factory(SseLiveUpdateChannelImpl, transport=live_transport)

    # Use cases
    load_show_context_use_case = providers.Singleton(
        LoadShowContextUseCase, show_catalog_query_repo=show_catalog_query_repo
    )
    list_user_bookings_use_case = providers.Singleton(
        ListUserBookingsUseCase,
        session_service=session_service,
        booking_command_repo=booking_command_repo,
    )
    booking_session = providers.Factory(
        BookingSession,
        session_service=session_service,
        load_show_context_use_case=load_show_context_use_case,
        seat_snapshot_query_repo=seat_snapshot_query_repo,
        booking_command_repo=booking_command_repo,
        live_update_channel=live_update_channel,
    )


container = Container()


def setup() -> None:
    container.config_service()
    container.session_service().restore()


async def cleanup() -> None:
    await container.http_client().disconnect()
    await container.public_http_client().disconnect()
    container.reset_singletons()
