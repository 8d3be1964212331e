from typing import Optional

import anyio

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import DomainError, SnapshotError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.dto.catalog_dto import MovieDto, ShowDto, TheaterDto
from src.service.cinema.app.interface.i_show_catalog_query_repo import IShowCatalogQueryRepo
from src.service.cinema.domain.value_object.show_context import ShowContext


class LoadShowContextUseCase:
    def __init__(self, *, show_catalog_query_repo: IShowCatalogQueryRepo) -> None:
        self.show_catalog_query_repo = show_catalog_query_repo

    @Logger.io
    async def execute(self, *, show_id: int) -> ShowContext:
        """
        Look up the show, then its movie and theater concurrently.

        Raises:
            SnapshotError: any lookup failed (status 404 when the show does not exist)
        """
        show = await self.show_catalog_query_repo.get_show(show_id=show_id)

        movie: Optional[MovieDto] = None
        theater: Optional[TheaterDto] = None
        errors: list[SnapshotError] = []

        async def _load_movie() -> None:
            nonlocal movie
            try:
                movie = await self.show_catalog_query_repo.get_movie(movie_id=show.movie_id)
            except SnapshotError as e:
                errors.append(e)

        async def _load_theater() -> None:
            nonlocal theater
            try:
                theater = await self.show_catalog_query_repo.get_theater(
                    theater_id=show.theater_id
                )
            except SnapshotError as e:
                errors.append(e)

        async with anyio.create_task_group() as tg:
            tg.start_soon(_load_movie)
            tg.start_soon(_load_theater)

        if errors:
            raise errors[0]
        assert movie is not None and theater is not None
        return self._build(show=show, movie=movie, theater=theater)

    @staticmethod
    def _build(*, show: ShowDto, movie: MovieDto, theater: TheaterDto) -> ShowContext:
        layout = theater.seating_layout
        try:
            return ShowContext(
                show_id=show.id,
                movie_id=show.movie_id,
                theater_id=show.theater_id,
                unit_price=show.price,
                rows=layout.rows if layout else settings.DEFAULT_ROWS,
                seats_per_row=layout.seats_per_row if layout else settings.DEFAULT_SEATS_PER_ROW,
                aisles=layout.aisles if layout else tuple(settings.DEFAULT_AISLES),
                movie_title=movie.title,
                theater_name=theater.name,
                show_date=show.show_date,
                show_time=show.show_time,
            )
        except DomainError as e:
            raise SnapshotError(f'Show {show.id} has invalid data: {e.message}')
