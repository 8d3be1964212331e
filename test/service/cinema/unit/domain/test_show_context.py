import pytest

from src.platform.exception.exceptions import DomainError
from src.service.cinema.domain.value_object.show_context import ShowContext, seat_id_for


@pytest.mark.unit
class TestShowContext:
    @pytest.mark.parametrize(
        ('row_index', 'seat_index', 'seat_id'),
        [(0, 0, 'A1'), (2, 6, 'C7'), (9, 11, 'J12')],
    )
    def test_seat_id_for(self, row_index, seat_index, seat_id):
        assert seat_id_for(row_index=row_index, seat_index=seat_index) == seat_id

    def test_seat_ids_are_row_major(self, show):
        seat_ids = show.seat_ids()

        assert seat_ids[:3] == ('A1', 'A2', 'A3')
        assert seat_ids[8] == 'B1'
        assert len(seat_ids) == 24
        assert show.seat_rows()[2][-1] == 'C8'

    def test_aisles_and_labels(self, show):
        assert show.is_aisle_before(4)
        assert not show.is_aisle_before(3)
        assert show.formatted_show_time == '2025-01-10 18:30'
        assert show.amount_for(2) == 500

    def test_missing_show_time_formats_as_na(self):
        show = ShowContext(
            show_id=1, movie_id=1, theater_id=1, unit_price=100, rows=1, seats_per_row=1
        )

        assert show.formatted_show_time == 'N/A'

    @pytest.mark.parametrize(
        'overrides',
        [{'unit_price': -1}, {'rows': 0}, {'seats_per_row': -3}],
    )
    def test_invalid_geometry_or_price(self, overrides):
        fields = {
            'show_id': 1,
            'movie_id': 1,
            'theater_id': 1,
            'unit_price': 100,
            'rows': 2,
            'seats_per_row': 2,
        }

        with pytest.raises(DomainError):
            ShowContext(**{**fields, **overrides})
