"""Domain event handlers, registered on the message bus at startup."""

from __future__ import annotations

import logging

from shared.application.message_bus import message_bus
from shared.domain.base import DomainEvent

from .domain.events import (
    BookingAddOnsChanged,
    BookingCancelled,
    BookingCreated,
    BookingRetried,
    BookingsAbandoned,
)

logger = logging.getLogger("apps.bookings.events")


@message_bus.subscribe(
    BookingCreated, BookingCancelled, BookingAddOnsChanged, BookingRetried, BookingsAbandoned
)
def log_booking_event(event: DomainEvent) -> None:
    """Structured record for downstream notification and audit consumers."""
    logger.info("%s", event.event_type, extra={"event": event.to_dict()})


@message_bus.subscribe(BookingCreated, BookingRetried)
def schedule_cart_expiry(event: DomainEvent) -> None:
    from .models import Booking
    from .tasks import abandon_cart_if_expired

    expires_at = (
        Booking.objects.filter(pk=event.booking_id).values_list("expires_at", flat=True).first()
    )
    if expires_at is None:
        return
    abandon_cart_if_expired.apply_async(args=[event.booking_id], eta=expires_at)
