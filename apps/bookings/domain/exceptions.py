"""
Booking engine exceptions.

Every exception carries a short machine-readable ``code`` that the API
layer returns alongside the human readable message.
"""

from __future__ import annotations


class BookingError(Exception):
    code = "booking_error"

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def __str__(self) -> str:
        return self.message


class InvalidStayError(BookingError):
    """Rejected before any pricing or availability work happens."""

    code = "invalid_stay"


class RoomNotFoundError(BookingError):
    code = "room_not_found"


class RoomUnavailableError(BookingError):
    """The room has no free unit for the requested nights."""

    code = "room_unavailable"

    def __init__(self, message: str = "Room is not available for the selected dates", *,
                 available_units: int = 0, code: str | None = None):
        super().__init__(message, code=code)
        self.available_units = available_units


class BookingCommitConflictError(BookingError):
    """
    Capacity was exceeded by a competing booking between the check and
    the commit. Callers should fetch fresh availability and try again.
    """

    code = "commit_conflict"


class RatesUnavailableError(BookingError):
    code = "rates_unavailable"


class BookingStateError(BookingError):
    """The booking's lifecycle state does not allow the operation."""

    code = "invalid_booking_state"


class BookingNotFoundError(BookingError):
    code = "booking_not_found"
