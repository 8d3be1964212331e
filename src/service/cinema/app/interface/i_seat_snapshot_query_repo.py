from abc import ABC, abstractmethod

from src.service.cinema.domain.enum.seat_status import SeatStatus


class ISeatSnapshotQueryRepo(ABC):
    @abstractmethod
    async def get_seat_snapshot(self, *, show_id: int) -> dict[str, SeatStatus]:
        """
        Point-in-time read of seat statuses for a show (GET /seats/show/{showId})

        Returns:
            seat number -> status, in server order

        Raises:
            SnapshotError: network failure, 5xx, or unknown show
        """
        pass
