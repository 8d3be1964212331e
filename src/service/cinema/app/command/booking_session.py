"""
Booking Session - state machine for one booking attempt

    BROWSING -> SEAT_SELECTING -> RESERVING -> AWAITING_PAYMENT -> CONFIRMED
                      ^               |              |    ^
                      +- conflict ----+              v    | retry
                                                   FAILED-+
    any stage -> BROWSING on cancel

[Guarantees]
- At most one submission per draft: submit is only accepted in SEAT_SELECTING
- After RESERVING the server's copy of the draft is carried forward verbatim
- The live channel is closed exactly once when the session leaves seat selection
"""

from typing import Callable, Optional

from anyio.abc import TaskGroup

from src.platform.exception.exceptions import (
    BookingSubmissionError,
    DomainError,
    InvalidTransitionError,
    PaymentConfirmationError,
    SeatConflictError,
    SnapshotError,
    UnauthenticatedError,
)
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.cinema.app.interface.i_live_update_channel import (
    ILiveUpdateChannel,
    LiveChannelHandle,
)
from src.service.cinema.app.interface.i_seat_snapshot_query_repo import ISeatSnapshotQueryRepo
from src.service.cinema.app.query.load_show_context_use_case import LoadShowContextUseCase
from src.service.cinema.app.service.seat_inventory_client import SeatInventoryClient
from src.service.cinema.app.service.session_service import SessionService
from src.service.cinema.domain.entity.booking_draft_entity import BookingDraft
from src.service.cinema.domain.enum.booking_stage import BookingStage
from src.service.cinema.domain.enum.payment_status import PaymentStatus
from src.service.cinema.domain.value_object.live_event import ChannelReconnected, LiveEvent
from src.service.cinema.domain.value_object.receipt import Receipt
from src.service.cinema.domain.value_object.selection_result import MergeOutcome, SelectionResult
from src.service.cinema.domain.value_object.show_context import ShowContext


class BookingSession:
    def __init__(
        self,
        *,
        session_service: SessionService,
        load_show_context_use_case: LoadShowContextUseCase,
        seat_snapshot_query_repo: ISeatSnapshotQueryRepo,
        booking_command_repo: IBookingCommandRepo,
        live_update_channel: ILiveUpdateChannel,
        on_selection_evicted: Optional[Callable[[tuple[str, ...]], None]] = None,
    ) -> None:
        self.session_service = session_service
        self.load_show_context_use_case = load_show_context_use_case
        self.seat_snapshot_query_repo = seat_snapshot_query_repo
        self.booking_command_repo = booking_command_repo
        self.live_update_channel = live_update_channel
        self._on_selection_evicted = on_selection_evicted

        self._stage = BookingStage.BROWSING
        self._show: Optional[ShowContext] = None
        self._seats: Optional[SeatInventoryClient] = None
        self._channel: Optional[LiveChannelHandle] = None
        self._draft: Optional[BookingDraft] = None
        self._receipt: Optional[Receipt] = None

    # =========================================================================
    # Read side
    # =========================================================================

    @property
    def stage(self) -> BookingStage:
        return self._stage

    @property
    def show(self) -> ShowContext:
        if self._show is None:
            raise InvalidTransitionError('No show entered')
        return self._show

    @property
    def seats(self) -> SeatInventoryClient:
        if self._seats is None:
            raise InvalidTransitionError('No show entered')
        return self._seats

    @property
    def draft(self) -> Optional[BookingDraft]:
        return self._draft

    @property
    def receipt(self) -> Optional[Receipt]:
        return self._receipt

    @property
    def channel(self) -> Optional[LiveChannelHandle]:
        return self._channel

    def current_selection(self) -> tuple[str, ...]:
        return self._seats.current_selection() if self._seats is not None else ()

    @property
    def total_amount(self) -> float:
        return self._draft.total_amount if self._draft is not None else 0

    # =========================================================================
    # BROWSING -> SEAT_SELECTING
    # =========================================================================

    @Logger.io
    async def enter_show(self, show_id: int, *, task_group: TaskGroup) -> ShowContext:
        """
        Open the booking view of a show: subscribe to its seat topic, then load
        the snapshot (events that arrive meanwhile are applied on top of it).

        Raises:
            InvalidTransitionError: a booking is already in progress
            UnauthenticatedError: no valid session
            SnapshotError: show or seats could not be loaded; stage stays BROWSING
        """
        self._require_stage(BookingStage.BROWSING)
        session = self.session_service.require_session()

        show = await self.load_show_context_use_case.execute(show_id=show_id)
        seats = SeatInventoryClient(
            show=show,
            snapshot_repo=self.seat_snapshot_query_repo,
            on_selection_changed=self._on_seats_evicted,
        )
        self._show, self._seats = show, seats
        self._draft = BookingDraft.create(
            user_id=session.user_id,
            show_id=show.show_id,
            movie_id=show.movie_id,
            theater_id=show.theater_id,
            unit_price=show.unit_price,
            user_email=session.email,
        )
        self._receipt = None

        self._channel = await self.live_update_channel.open(
            show_id=show.show_id,
            on_event=self._on_live_event,
            task_group=task_group,
            on_reconnect=self._on_reconnect,
        )
        try:
            await seats.load_snapshot()
        except SnapshotError:
            await self._reset()
            raise

        self._stage = BookingStage.SEAT_SELECTING
        Logger.base.info(f'🎟️ [BOOKING-SESSION] Entered show {show.show_id}')
        return show

    # =========================================================================
    # SEAT_SELECTING
    # =========================================================================

    def toggle_seat(self, seat_id: str) -> SelectionResult:
        """
        Raises:
            SeatUnavailableError: seat is not AVAILABLE/SELECTED
        """
        self._require_stage(BookingStage.SEAT_SELECTING)
        result = self.seats.toggle_select(seat_id)
        self._sync_draft()
        return result

    async def _on_live_event(self, event: LiveEvent) -> None:
        if self._seats is not None:
            self._seats.apply_live_event(event)

    async def _on_reconnect(self, marker: ChannelReconnected) -> None:
        if self._seats is not None:
            await self._seats.on_reconnect(marker)

    def _on_seats_evicted(self, outcome: MergeOutcome) -> None:
        self._sync_draft()
        if self._on_selection_evicted is not None:
            self._on_selection_evicted(outcome.evicted)

    def _sync_draft(self) -> None:
        if self._draft is not None and not self._draft.is_frozen:
            self._draft = self._draft.with_seats(self.current_selection())

    # =========================================================================
    # SEAT_SELECTING -> RESERVING -> AWAITING_PAYMENT
    # =========================================================================

    @Logger.io
    async def submit(self) -> BookingDraft:
        """
        Raises:
            InvalidTransitionError: not selecting seats (including a submit already in flight),
                or the booking came back after the session was cancelled
            UnauthenticatedError: no valid session; draft discarded, back to BROWSING
            SeatConflictError: seat taken meanwhile; seats re-synced, back to SEAT_SELECTING
            BookingSubmissionError: other failure (including a response that is not
                PENDING); selection kept, back to SEAT_SELECTING
        """
        self._require_stage(BookingStage.SEAT_SELECTING)
        if not self.current_selection():
            raise InvalidTransitionError('Select at least one seat')
        if not self.session_service.is_valid():
            await self._discard('session expired before submission')
            raise UnauthenticatedError('Please log in to book seats.')

        assert self._draft is not None
        self._sync_draft()
        draft = self._draft
        pending = draft.mark_as_pending()
        self._draft, self._stage = pending, BookingStage.RESERVING
        Logger.base.info(
            f'📝 [BOOKING-SESSION] Submitting {pending.seat_numbers} '
            f'for show {pending.show_id} ({pending.total_amount})'
        )

        try:
            record = await self.booking_command_repo.create_booking(draft=pending)
            if record.payment_status != PaymentStatus.PENDING:
                raise BookingSubmissionError(
                    f'Booking {record.id} came back {record.payment_status}, expected PENDING'
                )
        except (UnauthenticatedError, SeatConflictError, BookingSubmissionError) as e:
            if self._is_current(pending, BookingStage.RESERVING):
                await self._recover_submission(e, draft=draft)
            raise

        if not self._is_current(pending, BookingStage.RESERVING):
            raise InvalidTransitionError(f'Booking {record.id} returned after cancellation')

        self._draft = pending.accept_server_copy(
            booking_id=record.id,
            payment_status=record.payment_status,
            seat_ids=record.seat_ids,
            total_amount=record.total_amount,
        )
        await self._close_channel()
        self._stage = BookingStage.AWAITING_PAYMENT
        Logger.base.info(f'⏳ [BOOKING-SESSION] Booking {record.id} awaiting payment')
        return self._draft

    async def _recover_submission(self, error: Exception, *, draft: BookingDraft) -> None:
        if isinstance(error, UnauthenticatedError):
            await self._discard('booking rejected as unauthenticated')
            return

        # Back to the unsubmitted draft; seats evicted while reserving drop out here
        self._draft, self._stage = draft, BookingStage.SEAT_SELECTING
        if isinstance(error, SeatConflictError):
            Logger.base.warning(f'⚔️ [BOOKING-SESSION] Seat conflict: {error.message}')
            try:
                await self.seats.resync()
            except SnapshotError as snapshot_error:
                Logger.base.warning(
                    f'⚠️ [BOOKING-SESSION] Resync after conflict failed: {snapshot_error.message}'
                )
        self._sync_draft()

    # =========================================================================
    # AWAITING_PAYMENT | FAILED -> CONFIRMED | FAILED
    # =========================================================================

    @Logger.io
    async def confirm_payment(self) -> Receipt:
        """
        Confirm the submitted booking by id. Retrying after a failure reuses the
        same booking id; nothing is re-selected or re-submitted.

        Raises:
            InvalidTransitionError: nothing awaiting payment, or the session was
                cancelled while the confirmation was outstanding
            PaymentConfirmationError / UnauthenticatedError: stage becomes FAILED (retryable)
        """
        self._require_stage(BookingStage.AWAITING_PAYMENT, BookingStage.FAILED)
        draft = self._draft
        assert draft is not None and draft.id is not None
        try:
            draft.validate_can_confirm()
        except DomainError as e:
            raise InvalidTransitionError(e.message)

        booking_id = draft.id
        self._stage = BookingStage.AWAITING_PAYMENT
        try:
            record = await self.booking_command_repo.confirm_payment(booking_id=booking_id)
            if record.payment_status != PaymentStatus.PAID:
                raise PaymentConfirmationError(
                    f'Booking {booking_id} is {record.payment_status} after confirmation'
                )
        except (PaymentConfirmationError, UnauthenticatedError) as e:
            if self._is_current(draft, BookingStage.AWAITING_PAYMENT):
                self._draft = draft.mark_as_failed()
                self._stage = BookingStage.FAILED
            Logger.base.warning(f'💳 [BOOKING-SESSION] Payment for {booking_id} failed: {e.message}')
            raise

        if not self._is_current(draft, BookingStage.AWAITING_PAYMENT):
            Logger.base.warning(
                f'💳 [BOOKING-SESSION] Booking {booking_id} paid after cancellation'
            )
            raise InvalidTransitionError(f'Booking {booking_id} confirmed after cancellation')

        self._draft = draft.accept_server_copy(
            booking_id=record.id,
            payment_status=record.payment_status,
            seat_ids=record.seat_ids,
            total_amount=record.total_amount,
        )
        self._receipt = self._build_receipt(self._draft)
        self._stage = BookingStage.CONFIRMED
        Logger.base.info(f'✅ [BOOKING-SESSION] Booking {booking_id} paid')
        return self._receipt

    def _build_receipt(self, draft: BookingDraft) -> Receipt:
        assert draft.id is not None
        show = self.show
        return Receipt(
            booking_id=draft.id,
            show_id=draft.show_id,
            movie_id=draft.movie_id,
            theater_id=draft.theater_id,
            seat_ids=draft.seat_ids,
            total_amount=draft.total_amount,
            payment_status=draft.payment_status,
            movie_title=show.movie_title,
            theater_name=show.theater_name,
            show_time=show.formatted_show_time,
        )

    # =========================================================================
    # any -> BROWSING
    # =========================================================================

    @Logger.io
    async def cancel(self) -> None:
        """Leave the booking view from any stage. Safe to call repeatedly."""
        if self._stage == BookingStage.BROWSING and self._channel is None:
            return
        await self._discard('cancelled')

    async def _discard(self, reason: str) -> None:
        Logger.base.info(f'↩️ [BOOKING-SESSION] Back to browsing: {reason}')
        await self._reset()

    async def _reset(self) -> None:
        await self._close_channel()
        self._stage = BookingStage.BROWSING
        self._show = None
        self._seats = None
        self._draft = None

    async def _close_channel(self) -> None:
        handle, self._channel = self._channel, None
        if handle is not None:
            await self.live_update_channel.close(handle)

    def _require_stage(self, *allowed: BookingStage) -> None:
        if self._stage not in allowed:
            raise InvalidTransitionError(
                f'Operation not allowed while {self._stage} (expected {", ".join(allowed)})'
            )

    def _is_current(self, draft: BookingDraft, stage: BookingStage) -> bool:
        """False once a cancel (or a new booking) replaced the draft an await started with."""
        return self._draft is draft and self._stage == stage
