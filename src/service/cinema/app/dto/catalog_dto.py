"""Read-only catalog lookups feeding ShowContext."""

from typing import Optional

import attrs


@attrs.define(frozen=True)
class ShowDto:
    id: int
    movie_id: int
    theater_id: int
    price: float
    show_date: Optional[str] = None
    show_time: Optional[str] = None
    screen_number: Optional[int] = None
    available_seats: Optional[int] = None


@attrs.define(frozen=True)
class MovieDto:
    id: int
    title: str
    genre: Optional[str] = None
    language: Optional[str] = None
    duration: Optional[int] = None


@attrs.define(frozen=True)
class SeatingLayoutDto:
    rows: int
    seats_per_row: int
    aisles: tuple[int, ...] = ()


@attrs.define(frozen=True)
class TheaterDto:
    id: int
    name: str
    location: Optional[str] = None
    seating_layout: Optional[SeatingLayoutDto] = None
