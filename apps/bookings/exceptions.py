"""HTTP mapping of booking engine errors."""

from __future__ import annotations

from rest_framework import status  # type: ignore
from rest_framework.exceptions import APIException  # type: ignore

from .domain.exceptions import (
    BookingCommitConflictError,
    BookingError,
    BookingNotFoundError,
    BookingStateError,
    InvalidStayError,
    RatesUnavailableError,
    RoomNotFoundError,
    RoomUnavailableError,
)


STATUS_BY_ERROR = (
    (InvalidStayError, status.HTTP_400_BAD_REQUEST),
    (BookingStateError, status.HTTP_400_BAD_REQUEST),
    (RoomNotFoundError, status.HTTP_404_NOT_FOUND),
    (BookingNotFoundError, status.HTTP_404_NOT_FOUND),
    (RoomUnavailableError, status.HTTP_409_CONFLICT),
    (BookingCommitConflictError, status.HTTP_409_CONFLICT),
    (RatesUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


class BookingAPIError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Booking request failed."
    default_code = "booking_error"

    def __init__(self, payload: dict, status_code: int):
        super().__init__(detail=payload.get("detail"), code=payload.get("code"))
        # kept as a plain dict so booleans and counts stay JSON-native
        self.detail = payload
        self.status_code = status_code


def to_api_error(exc: BookingError) -> BookingAPIError:
    """Response body is ``{"detail", "code"}`` plus error-specific fields."""
    status_code = status.HTTP_400_BAD_REQUEST
    for error_class, mapped_status in STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            status_code = mapped_status
            break

    payload = {"detail": exc.message, "code": exc.code}
    if isinstance(exc, RoomUnavailableError):
        payload["available"] = False
        payload["available_units"] = exc.available_units
    return BookingAPIError(payload, status_code)
