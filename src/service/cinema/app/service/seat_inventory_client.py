"""
Seat Inventory Client

Client-side source of truth for one show's seat statuses. Holds the current
SeatInventory snapshot and swaps it for a new one on every change; all
mutations are synchronous so they never interleave on the event loop.

While a snapshot fetch is outstanding, live events are buffered and applied
in arrival order on top of the fresh snapshot once it lands.
"""

from typing import Callable, Optional

from src.platform.exception.exceptions import SnapshotError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_seat_snapshot_query_repo import ISeatSnapshotQueryRepo
from src.service.cinema.domain.aggregate.seat_inventory_aggregate import SeatInventory
from src.service.cinema.domain.enum.seat_status import SeatStatus
from src.service.cinema.domain.value_object.live_event import ChannelReconnected, LiveEvent
from src.service.cinema.domain.value_object.selection_result import MergeOutcome, SelectionResult
from src.service.cinema.domain.value_object.show_context import ShowContext


OnSelectionChanged = Callable[[MergeOutcome], None]


class SeatInventoryClient:
    def __init__(
        self,
        *,
        show: ShowContext,
        snapshot_repo: ISeatSnapshotQueryRepo,
        on_selection_changed: Optional[OnSelectionChanged] = None,
    ) -> None:
        self.show = show
        self.snapshot_repo = snapshot_repo
        self._on_selection_changed = on_selection_changed
        self._inventory: Optional[SeatInventory] = None
        self._fetches_in_flight = 0
        self._pending_events: list[LiveEvent] = []

    @property
    def inventory(self) -> SeatInventory:
        if self._inventory is None:
            raise SnapshotError(f'Seats for show {self.show.show_id} are not loaded')
        return self._inventory

    @property
    def is_loaded(self) -> bool:
        return self._inventory is not None

    @property
    def pending_event_count(self) -> int:
        return len(self._pending_events)

    def status_of(self, seat_id: str) -> Optional[SeatStatus]:
        return self.inventory.status_of(seat_id)

    def current_selection(self) -> tuple[str, ...]:
        return self._inventory.selection if self._inventory is not None else ()

    # =========================================================================
    # Snapshot
    # =========================================================================

    @Logger.io
    async def load_snapshot(self) -> SeatInventory:
        """
        Fetch the seat snapshot and replace the local view with it.

        Fetches may overlap (reconnect resync vs. conflict resync). Live events stay
        buffered until the last outstanding fetch has landed, then replay in order,
        so no snapshot can overwrite an event that arrived after it was requested.

        Raises:
            SnapshotError: fetch failed; the previous view (if any) is kept, no retry
        """
        self._fetches_in_flight += 1
        try:
            snapshot = await self.snapshot_repo.get_seat_snapshot(show_id=self.show.show_id)
            if self._inventory is None:
                self._inventory = SeatInventory.from_snapshot(show=self.show, snapshot=snapshot)
            else:
                self._inventory, outcome = self._inventory.reconcile_snapshot(
                    show=self.show, snapshot=snapshot
                )
                self._notify(outcome)
        finally:
            self._fetches_in_flight -= 1
            if self._fetches_in_flight == 0:
                self._replay_pending()

        Logger.base.info(
            f'🎬 [SEAT-INVENTORY] Show {self.show.show_id}: '
            f'{len(self.inventory.unavailable_seats)} unavailable of {len(self.inventory.statuses)}'
        )
        return self.inventory

    async def resync(self) -> SeatInventory:
        """Reconcile against a fresh snapshot, keeping selections still AVAILABLE."""
        Logger.base.info(f'🔁 [SEAT-INVENTORY] Resync show {self.show.show_id}')
        return await self.load_snapshot()

    async def on_reconnect(self, marker: ChannelReconnected) -> None:
        """Events missed during an outage are never replayed, so re-read the snapshot."""
        try:
            await self.resync()
        except SnapshotError as e:
            Logger.base.warning(
                f'⚠️ [SEAT-INVENTORY] Resync after reconnect #{marker.attempt} failed: {e.message}'
            )

    def _replay_pending(self) -> None:
        events, self._pending_events = self._pending_events, []
        if events:
            Logger.base.debug(f'⏪ [SEAT-INVENTORY] Replaying {len(events)} buffered events')
        for event in events:
            self.apply_live_event(event)

    # =========================================================================
    # Mutations
    # =========================================================================

    def apply_live_event(self, event: LiveEvent) -> MergeOutcome:
        if self._fetches_in_flight or self._inventory is None:
            self._pending_events.append(event)
            return MergeOutcome()

        self._inventory, outcome = self._inventory.apply_live_event(event)
        if outcome.evicted:
            Logger.base.warning(
                f'🚫 [SEAT-INVENTORY] {event.type} took selected seats {list(outcome.evicted)}'
            )
        self._notify(outcome)
        return outcome

    def toggle_select(self, seat_id: str) -> SelectionResult:
        """
        Raises:
            SeatUnavailableError: seat is LOCKED, BOOKED or unknown; nothing changes
            SnapshotError: seats not loaded yet
        """
        self._inventory, result = self.inventory.toggle_select(seat_id)
        return result

    def clear_selection(self) -> None:
        if self._inventory is not None:
            self._inventory = self._inventory.clear_selection()

    def _notify(self, outcome: MergeOutcome) -> None:
        if outcome.evicted and self._on_selection_changed is not None:
            self._on_selection_changed(outcome)
