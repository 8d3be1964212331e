"""
Seat Inventory Aggregate - Aggregate Root for one show's seat map

[Business Invariants]
- Every tracked seat has exactly one SeatStatus; the seat set is partitioned by status
- selection lists exactly the SELECTED seats, in the order the user picked them
- Live events merge last-write-wins per seat id and are idempotent
- A seat booked/locked by the server always beats a local SELECTED

Every operation returns a new aggregate; an operation that changes nothing
returns the same instance.
"""

from types import MappingProxyType
from typing import Mapping

import attrs

from src.platform.exception.exceptions import SeatUnavailableError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.domain.enum.seat_status import SeatStatus
from src.service.cinema.domain.value_object.live_event import LiveEvent
from src.service.cinema.domain.value_object.selection_result import MergeOutcome, SelectionResult
from src.service.cinema.domain.value_object.show_context import ShowContext


def _freeze(statuses: Mapping[str, SeatStatus]) -> Mapping[str, SeatStatus]:
    return MappingProxyType(dict(statuses))


@attrs.define(frozen=True)
class SeatInventory:
    show_id: int
    statuses: Mapping[str, SeatStatus] = attrs.field(converter=_freeze, repr=False)
    selection: tuple[str, ...] = ()

    @classmethod
    def from_snapshot(
        cls, *, show: ShowContext, snapshot: Mapping[str, SeatStatus]
    ) -> 'SeatInventory':
        """
        Every seat of the geometry starts AVAILABLE, then the server's statuses
        are laid over it. Snapshot seats outside the geometry are still tracked.
        """
        statuses: dict[str, SeatStatus] = dict.fromkeys(show.seat_ids(), SeatStatus.AVAILABLE)
        for seat_id, status in snapshot.items():
            # SELECTED is a local-only state; the server cannot own it
            statuses[seat_id] = SeatStatus.AVAILABLE if status == SeatStatus.SELECTED else status
        return cls(show_id=show.show_id, statuses=statuses)

    # =========================================================================
    # Queries
    # =========================================================================

    def status_of(self, seat_id: str) -> SeatStatus | None:
        return self.statuses.get(seat_id)

    def seats_with(self, status: SeatStatus) -> tuple[str, ...]:
        return tuple(seat_id for seat_id, s in self.statuses.items() if s == status)

    def partition(self) -> dict[SeatStatus, frozenset[str]]:
        return {status: frozenset(self.seats_with(status)) for status in SeatStatus}

    @property
    def unavailable_seats(self) -> tuple[str, ...]:
        return tuple(
            seat_id
            for seat_id, status in self.statuses.items()
            if status in (SeatStatus.BOOKED, SeatStatus.LOCKED)
        )

    # =========================================================================
    # Transitions
    # =========================================================================

    @Logger.io
    def toggle_select(self, seat_id: str) -> tuple['SeatInventory', SelectionResult]:
        """
        AVAILABLE <-> SELECTED.

        Raises:
            SeatUnavailableError: seat is LOCKED, BOOKED or unknown (no state change)
        """
        status = self.statuses.get(seat_id)
        if status is None or not status.is_selectable:
            raise SeatUnavailableError(seat_id)

        statuses = dict(self.statuses)
        if status == SeatStatus.SELECTED:
            statuses[seat_id] = SeatStatus.AVAILABLE
            selection = tuple(s for s in self.selection if s != seat_id)
            selected = False
        else:
            statuses[seat_id] = SeatStatus.SELECTED
            selection = (*self.selection, seat_id)
            selected = True

        inventory = attrs.evolve(self, statuses=statuses, selection=selection)
        return inventory, SelectionResult(seat_id=seat_id, selected=selected, selection=selection)

    @Logger.io
    def apply_live_event(self, event: LiveEvent) -> tuple['SeatInventory', MergeOutcome]:
        target = event.target_status
        statuses = dict(self.statuses)
        changed: list[str] = []
        evicted: list[str] = []

        for seat_id in event.seat_ids:
            current = statuses.get(seat_id)
            if current == target:
                continue
            if event.demotes_selection:
                if current == SeatStatus.SELECTED:
                    evicted.append(seat_id)
            elif current in (SeatStatus.SELECTED, SeatStatus.AVAILABLE):
                # Release only lifts a server-side hold
                continue
            statuses[seat_id] = target
            changed.append(seat_id)

        if not changed:
            return self, MergeOutcome()

        selection = tuple(s for s in self.selection if s not in evicted)
        inventory = attrs.evolve(self, statuses=statuses, selection=selection)
        return inventory, MergeOutcome(changed=tuple(changed), evicted=tuple(evicted))

    @Logger.io
    def reconcile_snapshot(
        self, *, show: ShowContext, snapshot: Mapping[str, SeatStatus]
    ) -> tuple['SeatInventory', MergeOutcome]:
        """
        Replace statuses with a fresh snapshot, keeping every selected seat that
        is still AVAILABLE on the server and evicting the rest.
        """
        fresh = SeatInventory.from_snapshot(show=show, snapshot=snapshot)
        statuses = dict(fresh.statuses)
        kept: list[str] = []
        evicted: list[str] = []
        for seat_id in self.selection:
            if statuses.get(seat_id) == SeatStatus.AVAILABLE:
                statuses[seat_id] = SeatStatus.SELECTED
                kept.append(seat_id)
            else:
                evicted.append(seat_id)

        changed = tuple(
            seat_id
            for seat_id in dict.fromkeys((*self.statuses, *statuses))
            if self.statuses.get(seat_id) != statuses.get(seat_id)
        )
        inventory = attrs.evolve(self, statuses=statuses, selection=tuple(kept))
        return inventory, MergeOutcome(changed=changed, evicted=tuple(evicted))

    def clear_selection(self) -> 'SeatInventory':
        if not self.selection:
            return self
        statuses = dict(self.statuses)
        for seat_id in self.selection:
            statuses[seat_id] = SeatStatus.AVAILABLE
        return attrs.evolve(self, statuses=statuses, selection=())
