from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from src.platform.exception.exceptions import SnapshotError
from src.platform.http.http_client import HttpClient
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.dto.catalog_dto import (
    MovieDto,
    SeatingLayoutDto,
    ShowDto,
    TheaterDto,
)
from src.service.cinema.app.interface.i_show_catalog_query_repo import IShowCatalogQueryRepo
from src.service.cinema.driven_adapter.repo.cinema_api_schema import (
    MovieResponse,
    ShowResponse,
    TheaterResponse,
)
from src.service.cinema.driven_adapter.repo.http_error_mapper import error_message


ResponseT = TypeVar('ResponseT', bound=BaseModel)


class ShowCatalogQueryRepoImpl(IShowCatalogQueryRepo):
    def __init__(self, *, http_client: HttpClient) -> None:
        self.http_client = http_client

    @Logger.io
    async def get_show(self, *, show_id: int) -> ShowDto:
        show = await self._get(f'/shows/{show_id}', ShowResponse, label=f'Show {show_id}')
        return ShowDto(
            id=show.id,
            movie_id=show.movie_id,
            theater_id=show.theater_id,
            price=show.price,
            show_date=show.show_date,
            show_time=show.show_time,
            screen_number=show.screen_number,
            available_seats=show.available_seats,
        )

    @Logger.io
    async def get_movie(self, *, movie_id: int) -> MovieDto:
        movie = await self._get(f'/movies/{movie_id}', MovieResponse, label=f'Movie {movie_id}')
        return MovieDto(
            id=movie.id,
            title=movie.title,
            genre=movie.genre,
            language=movie.language,
            duration=movie.duration,
        )

    @Logger.io
    async def get_theater(self, *, theater_id: int) -> TheaterDto:
        theater = await self._get(
            f'/theaters/{theater_id}', TheaterResponse, label=f'Theater {theater_id}'
        )
        layout = theater.seating_layout
        return TheaterDto(
            id=theater.id,
            name=theater.name,
            location=theater.location,
            seating_layout=SeatingLayoutDto(
                rows=layout.rows, seats_per_row=layout.seats_per_row, aisles=tuple(layout.aisles)
            )
            if layout and layout.rows > 0 and layout.seats_per_row > 0
            else None,
        )

    async def _get(self, url: str, model: type[ResponseT], *, label: str) -> ResponseT:
        try:
            response = await self.http_client.get_client().get(url)
            response.raise_for_status()
            return model.model_validate_json(response.content)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise SnapshotError(f'{label} not found', 404)
            raise SnapshotError(f'{label} unavailable: {error_message(e.response)}')
        except httpx.TransportError as e:
            raise SnapshotError(f'{label} unavailable: {e}')
        except ValidationError as e:
            raise SnapshotError(f'{label} returned malformed data: {e.error_count()} errors', 502)
