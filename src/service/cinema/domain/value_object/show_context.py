"""
Show Context Value Object

Everything a booking session needs to know about the screening it books:
identifiers, unit price, seating geometry and the labels printed on the receipt.
Immutable for the lifetime of a booking session.
"""

from typing import Optional

import attrs

from src.platform.exception.exceptions import DomainError


def _validate_positive(instance: object, attribute: attrs.Attribute, value: int) -> None:
    if value <= 0:
        raise DomainError(f'ShowContext {attribute.name} must be positive')


def _validate_price(instance: object, attribute: attrs.Attribute, value: float) -> None:
    if value < 0:
        raise DomainError('Ticket price must not be negative')


def seat_id_for(*, row_index: int, seat_index: int) -> str:
    """Row letter + 1-based seat number: (0, 0) -> 'A1', (2, 6) -> 'C7'."""
    return f'{chr(65 + row_index)}{seat_index + 1}'


@attrs.define(frozen=True)
class ShowContext:
    show_id: int
    movie_id: int
    theater_id: int
    unit_price: float = attrs.field(validator=_validate_price)
    rows: int = attrs.field(validator=_validate_positive)
    seats_per_row: int = attrs.field(validator=_validate_positive)
    aisles: tuple[int, ...] = attrs.field(default=(), converter=tuple)
    movie_title: Optional[str] = None
    theater_name: Optional[str] = None
    show_date: Optional[str] = None
    show_time: Optional[str] = None

    def seat_rows(self) -> tuple[tuple[str, ...], ...]:
        return tuple(
            tuple(
                seat_id_for(row_index=row, seat_index=seat) for seat in range(self.seats_per_row)
            )
            for row in range(self.rows)
        )

    def seat_ids(self) -> tuple[str, ...]:
        """All seat ids in row-major order."""
        return tuple(seat_id for row in self.seat_rows() for seat_id in row)

    def is_aisle_before(self, seat_index: int) -> bool:
        return seat_index in self.aisles

    @property
    def formatted_show_time(self) -> str:
        if self.show_date and self.show_time:
            return f'{self.show_date} {self.show_time}'
        return 'N/A'

    def amount_for(self, seat_count: int) -> float:
        return self.unit_price * seat_count
