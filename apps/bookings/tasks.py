"""Celery tasks for bookings."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.uow import DjangoUnitOfWork

from .domain.events import BookingsAbandoned
from .models import Booking

logger = logging.getLogger(__name__)


def _abandon(booking: Booking) -> None:
    booking.status = Booking.Status.CART_ABANDONED
    booking.save(update_fields=["status", "updated_at"])


@shared_task(name="bookings.abandon_cart_if_expired")
def abandon_cart_if_expired(booking_id: int) -> bool:
    """Release one pending booking once its hold has run out."""

    with transaction.atomic():
        booking = Booking.objects.select_for_update().filter(pk=booking_id).first()
        if booking is None or not booking.should_expire():
            return False
        _abandon(booking)

    logger.info("Booking %s abandoned after hold expiry", booking.reference)
    return True


# ============================================================================
# PERIODIC TASKS (Celery Beat)
# ============================================================================

@shared_task(name="bookings.abandon_expired_carts")
def abandon_expired_carts() -> dict[str, int]:
    """
    Move pending bookings whose hold expired to cart_abandoned.

    Abandoned bookings stop blocking inventory and become eligible for
    the retry flow.

    Returns:
        dict: {"abandoned": number of released bookings}
    """
    now = timezone.now()
    abandoned = []

    with DjangoUnitOfWork() as uow:
        expired = Booking.objects.select_for_update().filter(
            status=Booking.Status.PENDING,
            expires_at__lte=now,
        )
        for booking in expired:
            _abandon(booking)
            abandoned.append(booking.pk)
            logger.info("Booking %s abandoned (hold expired at %s)", booking.reference, booking.expires_at)

        if abandoned:
            uow.add_event(BookingsAbandoned(booking_ids=abandoned, as_of=now.date()))

    if abandoned:
        logger.info("Abandoned %d expired pending bookings", len(abandoned))

    return {"abandoned": len(abandoned)}


@shared_task(name="bookings.complete_checked_out_bookings")
def complete_checked_out_bookings() -> dict[str, int]:
    """
    Close bookings whose stay is over.

    Returns:
        dict: {"completed": number of completed bookings}
    """
    today = timezone.localdate()
    completed = Booking.objects.filter(
        status__in=[Booking.Status.CHECKED_IN, Booking.Status.CHECKED_OUT],
        check_out__lte=today,
    ).update(status=Booking.Status.COMPLETED, updated_at=timezone.now())

    if completed:
        logger.info("Completed %d bookings", completed)

    return {"completed": completed}
