import httpx
from pydantic import TypeAdapter, ValidationError

from src.platform.exception.exceptions import SnapshotError
from src.platform.http.http_client import HttpClient
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_seat_snapshot_query_repo import ISeatSnapshotQueryRepo
from src.service.cinema.domain.enum.seat_status import SeatStatus
from src.service.cinema.driven_adapter.repo.cinema_api_schema import SeatResponse
from src.service.cinema.driven_adapter.repo.http_error_mapper import error_message


_SEAT_LIST = TypeAdapter(list[SeatResponse])


class SeatSnapshotQueryRepoImpl(ISeatSnapshotQueryRepo):
    def __init__(self, *, http_client: HttpClient) -> None:
        self.http_client = http_client

    @Logger.io
    async def get_seat_snapshot(self, *, show_id: int) -> dict[str, SeatStatus]:
        try:
            response = await self.http_client.get_client().get(f'/seats/show/{show_id}')
            response.raise_for_status()
            seats = _SEAT_LIST.validate_json(response.content)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise SnapshotError(f'Show {show_id} not found', 404)
            raise SnapshotError(f'Seats for show {show_id} unavailable: {error_message(e.response)}')
        except httpx.TransportError as e:
            raise SnapshotError(f'Seats for show {show_id} unavailable: {e}')
        except ValidationError as e:
            raise SnapshotError(f'Malformed seat snapshot: {e.error_count()} errors', 502)

        return {seat.seat_number: seat.status for seat in seats}
