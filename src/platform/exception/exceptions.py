class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class ConflictError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class AuthenticationError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 401)


class LoginError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


# =============================================================================
# Booking client taxonomy
# =============================================================================


class SnapshotError(CustomBaseError):
    """Seat snapshot or show lookup failed; the caller shows an unavailable view, no retry."""

    def __init__(self, message: str, status_code: int = 503) -> None:
        super().__init__(message, status_code)


class SeatUnavailableError(DomainError):
    """Local selection of a seat that is not AVAILABLE/SELECTED. No network call is made."""

    def __init__(self, seat_id: str) -> None:
        self.seat_id = seat_id
        super().__init__(f'Seat {seat_id} is not available', 409)


class SeatConflictError(ConflictError):
    """Server rejected the draft because a chosen seat was taken meanwhile."""

    def __init__(self, message: str, seat_ids: tuple[str, ...] = ()) -> None:
        self.seat_ids = seat_ids
        super().__init__(message)


class UnauthenticatedError(AuthenticationError):
    pass


class AuthError(LoginError):
    pass


class PaymentConfirmationError(CustomBaseError):
    """Confirmation failed; retry against the same booking id."""

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message, status_code)


class BookingSubmissionError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message, status_code)


class ChannelError(CustomBaseError):
    """Malformed live message or transport loss. Logged only, never surfaced."""

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message, status_code)


class InvalidTransitionError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 400)
