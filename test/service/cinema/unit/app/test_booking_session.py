"""
Unit tests for BookingSession

Drives the state machine with mocked ports:
- happy path: select A1,A2 at 250 -> booking 77 PENDING -> PAID receipt
- conflict, unauthenticated and payment-failure recovery paths
- channel teardown on every way out of seat selection
"""

from unittest.mock import AsyncMock, Mock

import anyio
import pytest

from src.platform.exception.exceptions import (
    BookingSubmissionError,
    InvalidTransitionError,
    PaymentConfirmationError,
    SeatConflictError,
    SnapshotError,
    UnauthenticatedError,
)
from src.service.cinema.app.command.booking_session import BookingSession
from src.service.cinema.app.dto.booking_dto import BookingRecordDto
from src.service.cinema.domain.enum.booking_stage import BookingStage
from src.service.cinema.domain.enum.live_event_type import LiveEventType
from src.service.cinema.domain.enum.payment_status import PaymentStatus
from src.service.cinema.domain.enum.seat_status import SeatStatus
from src.service.cinema.domain.value_object.live_event import ChannelReconnected, LiveEvent


@pytest.fixture
def session_service(user_session) -> Mock:
    service = Mock()
    service.require_session.return_value = user_session
    service.is_valid.return_value = True
    return service


@pytest.fixture
def load_show_context_use_case(show) -> AsyncMock:
    use_case = AsyncMock()
    use_case.execute.return_value = show
    return use_case


@pytest.fixture
def seat_snapshot_query_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.get_seat_snapshot.return_value = {'B1': SeatStatus.BOOKED}
    return repo


@pytest.fixture
def booking_command_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.create_booking.return_value = BookingRecordDto(
        id=77, payment_status=PaymentStatus.PENDING
    )
    repo.confirm_payment.return_value = BookingRecordDto(id=77, payment_status=PaymentStatus.PAID)
    return repo


@pytest.fixture
def live_update_channel() -> AsyncMock:
    channel = AsyncMock()
    channel.open.return_value = Mock(show_id=5, topic='seats/5', is_closed=False)
    return channel


@pytest.fixture
def on_selection_evicted() -> Mock:
    return Mock()


@pytest.fixture
def booking_session(
    session_service,
    load_show_context_use_case,
    seat_snapshot_query_repo,
    booking_command_repo,
    live_update_channel,
    on_selection_evicted,
) -> BookingSession:
    return BookingSession(
        session_service=session_service,
        load_show_context_use_case=load_show_context_use_case,
        seat_snapshot_query_repo=seat_snapshot_query_repo,
        booking_command_repo=booking_command_repo,
        live_update_channel=live_update_channel,
        on_selection_evicted=on_selection_evicted,
    )


async def _select(booking_session: BookingSession, *seat_ids: str) -> None:
    await booking_session.enter_show(5, task_group=Mock())
    for seat_id in seat_ids:
        booking_session.toggle_seat(seat_id)


@pytest.mark.unit
class TestEnterShow:
    @pytest.mark.asyncio
    async def test_enter_show_subscribes_and_loads_seats(
        self, booking_session, live_update_channel
    ):
        show = await booking_session.enter_show(5, task_group=Mock())

        assert booking_session.stage == BookingStage.SEAT_SELECTING
        assert show.show_id == 5
        assert booking_session.seats.status_of('B1') == SeatStatus.BOOKED
        assert live_update_channel.open.await_args.kwargs['show_id'] == 5
        assert booking_session.draft.payment_status == PaymentStatus.NONE

    @pytest.mark.asyncio
    async def test_snapshot_failure_closes_channel(
        self, booking_session, seat_snapshot_query_repo, live_update_channel
    ):
        seat_snapshot_query_repo.get_seat_snapshot.side_effect = SnapshotError('down')

        with pytest.raises(SnapshotError):
            await booking_session.enter_show(5, task_group=Mock())

        assert booking_session.stage == BookingStage.BROWSING
        live_update_channel.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_requires_session(self, booking_session, session_service):
        session_service.require_session.side_effect = UnauthenticatedError('Please log in first.')

        with pytest.raises(UnauthenticatedError):
            await booking_session.enter_show(5, task_group=Mock())

        assert booking_session.stage == BookingStage.BROWSING

    @pytest.mark.asyncio
    async def test_cannot_enter_twice(self, booking_session):
        await booking_session.enter_show(5, task_group=Mock())

        with pytest.raises(InvalidTransitionError):
            await booking_session.enter_show(6, task_group=Mock())


@pytest.mark.unit
class TestSeatSelection:
    @pytest.mark.asyncio
    async def test_amount_follows_selection(self, booking_session):
        await _select(booking_session, 'A1', 'A2', 'A3')
        assert booking_session.total_amount == 750

        booking_session.toggle_seat('A2')

        assert booking_session.current_selection() == ('A1', 'A3')
        assert booking_session.total_amount == 500

    @pytest.mark.asyncio
    async def test_live_booking_evicts_selected_seat(
        self, booking_session, live_update_channel, on_selection_evicted
    ):
        await _select(booking_session, 'C7', 'C8')
        on_event = live_update_channel.open.await_args.kwargs['on_event']

        await on_event(LiveEvent(type=LiveEventType.SEAT_BOOKED, seat_ids=('C7',)))

        assert booking_session.seats.status_of('C7') == SeatStatus.BOOKED
        assert booking_session.current_selection() == ('C8',)
        assert booking_session.total_amount == 250
        assert booking_session.draft.seat_ids == ('C8',)
        on_selection_evicted.assert_called_once_with(('C7',))

    @pytest.mark.asyncio
    async def test_reconnect_reconciles_seats_booked_during_gap(
        self, booking_session, live_update_channel, seat_snapshot_query_repo
    ):
        await _select(booking_session, 'A4', 'A5')
        on_reconnect = live_update_channel.open.await_args.kwargs['on_reconnect']
        seat_snapshot_query_repo.get_seat_snapshot.return_value = {
            'B1': SeatStatus.BOOKED,
            'A5': SeatStatus.BOOKED,
        }

        await on_reconnect(ChannelReconnected(show_id=5, attempt=1))

        assert booking_session.current_selection() == ('A4',)
        assert booking_session.total_amount == 250

    @pytest.mark.asyncio
    async def test_toggle_outside_selection_stage(self, booking_session):
        with pytest.raises(InvalidTransitionError):
            booking_session.toggle_seat('A1')


@pytest.mark.unit
class TestBookingFlow:
    @pytest.mark.asyncio
    async def test_end_to_end_receipt(
        self, booking_session, booking_command_repo, live_update_channel
    ):
        await _select(booking_session, 'A1', 'A2')
        assert booking_session.total_amount == 500

        draft = await booking_session.submit()

        assert draft.id == 77
        assert draft.payment_status == PaymentStatus.PENDING
        assert booking_session.stage == BookingStage.AWAITING_PAYMENT
        submitted = booking_command_repo.create_booking.await_args.kwargs['draft']
        assert submitted.to_request_payload()['seatNumbers'] == 'A1,A2'
        assert submitted.to_request_payload()['totalAmount'] == 500
        live_update_channel.close.assert_awaited_once()

        receipt = await booking_session.confirm_payment()

        assert booking_session.stage == BookingStage.CONFIRMED
        booking_command_repo.confirm_payment.assert_awaited_once_with(booking_id=77)
        assert receipt.booking_id == 77
        assert receipt.seats == 'A1,A2'
        assert receipt.total_amount == 500
        assert receipt.payment_status == PaymentStatus.PAID
        assert (receipt.show_id, receipt.movie_id, receipt.theater_id) == (5, 1, 2)
        assert receipt.movie_title == 'Dune'
        assert receipt.show_time == '2025-01-10 18:30'
        assert booking_session.receipt == receipt

    @pytest.mark.asyncio
    async def test_empty_selection_cannot_be_submitted(self, booking_session, booking_command_repo):
        await _select(booking_session)

        with pytest.raises(InvalidTransitionError):
            await booking_session.submit()

        booking_command_repo.create_booking.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_submit_while_reserving_is_rejected(self, booking_session, booking_command_repo):
        await _select(booking_session, 'A1')
        started = anyio.Event()
        release = anyio.Event()

        async def slow_create(*, draft):
            started.set()
            await release.wait()
            return BookingRecordDto(id=77, payment_status=PaymentStatus.PENDING)

        booking_command_repo.create_booking.side_effect = slow_create

        async with anyio.create_task_group() as tg:
            tg.start_soon(booking_session.submit)
            await started.wait()
            assert booking_session.stage == BookingStage.RESERVING
            with pytest.raises(InvalidTransitionError):
                await booking_session.submit()
            release.set()

        assert booking_command_repo.create_booking.await_count == 1
        assert booking_session.stage == BookingStage.AWAITING_PAYMENT

    @pytest.mark.asyncio
    async def test_seat_conflict_resyncs_and_returns_to_selection(
        self, booking_session, booking_command_repo, seat_snapshot_query_repo
    ):
        await _select(booking_session, 'A1', 'A2')
        booking_command_repo.create_booking.side_effect = SeatConflictError(
            'Seat A1 already booked', seat_ids=('A1', 'A2')
        )
        seat_snapshot_query_repo.get_seat_snapshot.return_value = {'A1': SeatStatus.BOOKED}

        with pytest.raises(SeatConflictError):
            await booking_session.submit()

        assert booking_session.stage == BookingStage.SEAT_SELECTING
        assert booking_session.current_selection() == ('A2',)
        assert booking_session.seats.status_of('A1') == SeatStatus.BOOKED
        assert booking_session.draft.payment_status == PaymentStatus.NONE
        assert booking_session.total_amount == 250

    @pytest.mark.asyncio
    async def test_expired_session_discards_draft(
        self, booking_session, session_service, booking_command_repo, live_update_channel
    ):
        await _select(booking_session, 'A1')
        session_service.is_valid.return_value = False

        with pytest.raises(UnauthenticatedError):
            await booking_session.submit()

        assert booking_session.stage == BookingStage.BROWSING
        assert booking_session.draft is None
        booking_command_repo.create_booking.assert_not_awaited()
        live_update_channel.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_server_rejects_token(self, booking_session, booking_command_repo):
        await _select(booking_session, 'A1')
        booking_command_repo.create_booking.side_effect = UnauthenticatedError('Unauthorized')

        with pytest.raises(UnauthenticatedError):
            await booking_session.submit()

        assert booking_session.stage == BookingStage.BROWSING
        assert booking_session.draft is None

    @pytest.mark.asyncio
    async def test_submission_failure_keeps_selection(self, booking_session, booking_command_repo):
        await _select(booking_session, 'A1', 'A2')
        booking_command_repo.create_booking.side_effect = BookingSubmissionError('Bad gateway')

        with pytest.raises(BookingSubmissionError):
            await booking_session.submit()

        assert booking_session.stage == BookingStage.SEAT_SELECTING
        assert booking_session.current_selection() == ('A1', 'A2')
        assert booking_session.total_amount == 500

    @pytest.mark.asyncio
    async def test_create_response_that_is_not_pending_is_rejected(
        self, booking_session, booking_command_repo, live_update_channel
    ):
        await _select(booking_session, 'A1', 'A2')
        booking_command_repo.create_booking.return_value = BookingRecordDto(
            id=77, payment_status=PaymentStatus.NONE
        )

        with pytest.raises(BookingSubmissionError):
            await booking_session.submit()

        assert booking_session.stage == BookingStage.SEAT_SELECTING
        assert booking_session.draft.payment_status == PaymentStatus.NONE
        assert booking_session.draft.id is None
        assert booking_session.current_selection() == ('A1', 'A2')
        live_update_channel.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_seats_evicted_while_reserving_leave_the_draft(
        self, booking_session, booking_command_repo, live_update_channel
    ):
        await _select(booking_session, 'A1', 'A2')
        on_event = live_update_channel.open.await_args.kwargs['on_event']

        async def failing_create(*, draft):
            await on_event(LiveEvent(type=LiveEventType.SEAT_LOCKED, seat_ids=('A2',)))
            raise BookingSubmissionError('Bad gateway')

        booking_command_repo.create_booking.side_effect = failing_create

        with pytest.raises(BookingSubmissionError):
            await booking_session.submit()

        assert booking_session.draft.seat_ids == ('A1',)
        assert booking_session.total_amount == 250

    @pytest.mark.asyncio
    async def test_payment_failure_is_retryable_with_same_id(
        self, booking_session, booking_command_repo
    ):
        await _select(booking_session, 'A1', 'A2')
        await booking_session.submit()
        booking_command_repo.confirm_payment.side_effect = [
            PaymentConfirmationError('Card declined'),
            BookingRecordDto(id=77, payment_status=PaymentStatus.PAID),
        ]

        with pytest.raises(PaymentConfirmationError):
            await booking_session.confirm_payment()

        assert booking_session.stage == BookingStage.FAILED
        assert booking_session.draft.payment_status == PaymentStatus.FAILED
        assert booking_session.draft.id == 77

        receipt = await booking_session.confirm_payment()

        assert receipt.booking_id == 77
        assert booking_session.stage == BookingStage.CONFIRMED
        assert booking_command_repo.create_booking.await_count == 1
        assert [c.kwargs for c in booking_command_repo.confirm_payment.await_args_list] == [
            {'booking_id': 77},
            {'booking_id': 77},
        ]

    @pytest.mark.asyncio
    async def test_unpaid_confirmation_response_fails(self, booking_session, booking_command_repo):
        await _select(booking_session, 'A1')
        await booking_session.submit()
        booking_command_repo.confirm_payment.return_value = BookingRecordDto(
            id=77, payment_status=PaymentStatus.PENDING
        )

        with pytest.raises(PaymentConfirmationError):
            await booking_session.confirm_payment()

        assert booking_session.stage == BookingStage.FAILED

    @pytest.mark.asyncio
    async def test_confirm_before_submit_is_rejected(self, booking_session):
        await _select(booking_session, 'A1')

        with pytest.raises(InvalidTransitionError):
            await booking_session.confirm_payment()


@pytest.mark.unit
class TestCancel:
    @pytest.mark.asyncio
    async def test_cancel_closes_channel_once(self, booking_session, live_update_channel):
        await _select(booking_session, 'A1')

        await booking_session.cancel()
        await booking_session.cancel()

        assert booking_session.stage == BookingStage.BROWSING
        assert booking_session.draft is None
        live_update_channel.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cancel_while_awaiting_payment(self, booking_session, live_update_channel):
        await _select(booking_session, 'A1')
        await booking_session.submit()

        await booking_session.cancel()

        assert booking_session.stage == BookingStage.BROWSING
        live_update_channel.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_can_enter_again_after_cancel(self, booking_session, live_update_channel):
        await _select(booking_session, 'A1')
        await booking_session.cancel()

        await booking_session.enter_show(5, task_group=Mock())

        assert booking_session.stage == BookingStage.SEAT_SELECTING
        assert booking_session.current_selection() == ()
        assert live_update_channel.open.await_count == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'error',
        [
            SeatConflictError('Seat A1 already booked', seat_ids=('A1',)),
            BookingSubmissionError('Bad gateway'),
            UnauthenticatedError('Unauthorized'),
        ],
    )
    async def test_cancel_while_reserving_then_submission_fails(
        self,
        booking_session,
        booking_command_repo,
        seat_snapshot_query_repo,
        live_update_channel,
        error,
    ):
        await _select(booking_session, 'A1')
        started = anyio.Event()
        release = anyio.Event()
        raised: list[Exception] = []

        async def slow_create(*, draft):
            started.set()
            await release.wait()
            raise error

        async def submit():
            try:
                await booking_session.submit()
            except type(error) as e:
                raised.append(e)

        booking_command_repo.create_booking.side_effect = slow_create

        async with anyio.create_task_group() as tg:
            tg.start_soon(submit)
            await started.wait()
            await booking_session.cancel()
            release.set()

        assert raised == [error]
        assert booking_session.stage == BookingStage.BROWSING
        assert booking_session.draft is None
        assert seat_snapshot_query_repo.get_seat_snapshot.await_count == 1
        live_update_channel.close.assert_awaited_once()

        await booking_session.enter_show(5, task_group=Mock())
        assert booking_session.stage == BookingStage.SEAT_SELECTING

    @pytest.mark.asyncio
    async def test_booking_returning_after_cancel_is_rejected(
        self, booking_session, booking_command_repo
    ):
        await _select(booking_session, 'A1')
        started = anyio.Event()
        release = anyio.Event()
        raised: list[Exception] = []

        async def slow_create(*, draft):
            started.set()
            await release.wait()
            return BookingRecordDto(id=77, payment_status=PaymentStatus.PENDING)

        async def submit():
            try:
                await booking_session.submit()
            except InvalidTransitionError as e:
                raised.append(e)

        booking_command_repo.create_booking.side_effect = slow_create

        async with anyio.create_task_group() as tg:
            tg.start_soon(submit)
            await started.wait()
            await booking_session.cancel()
            release.set()

        assert len(raised) == 1
        assert booking_session.stage == BookingStage.BROWSING
        assert booking_session.draft is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'outcome',
        [
            BookingRecordDto(id=77, payment_status=PaymentStatus.PAID),
            PaymentConfirmationError('Card declined'),
        ],
    )
    async def test_cancel_while_confirming_payment(
        self, booking_session, booking_command_repo, outcome
    ):
        await _select(booking_session, 'A1')
        await booking_session.submit()
        started = anyio.Event()
        release = anyio.Event()
        raised: list[Exception] = []

        async def slow_confirm(*, booking_id):
            started.set()
            await release.wait()
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        async def confirm():
            try:
                await booking_session.confirm_payment()
            except (InvalidTransitionError, PaymentConfirmationError) as e:
                raised.append(e)

        booking_command_repo.confirm_payment.side_effect = slow_confirm

        async with anyio.create_task_group() as tg:
            tg.start_soon(confirm)
            await started.wait()
            await booking_session.cancel()
            release.set()

        assert len(raised) == 1
        assert booking_session.stage == BookingStage.BROWSING
        assert booking_session.draft is None
        assert booking_session.receipt is None
