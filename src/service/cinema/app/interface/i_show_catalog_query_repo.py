from abc import ABC, abstractmethod

from src.service.cinema.app.dto.catalog_dto import MovieDto, ShowDto, TheaterDto


class IShowCatalogQueryRepo(ABC):
    """
    Read-only catalog lookups (GET /shows/{id}, /movies/{id}, /theaters/{id}).

    All methods raise SnapshotError (status 404 when the entity does not exist).
    """

    @abstractmethod
    async def get_show(self, *, show_id: int) -> ShowDto:
        pass

    @abstractmethod
    async def get_movie(self, *, movie_id: int) -> MovieDto:
        pass

    @abstractmethod
    async def get_theater(self, *, theater_id: int) -> TheaterDto:
        pass
