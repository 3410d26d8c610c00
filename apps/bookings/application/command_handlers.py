"""
Booking Command Handlers

Use cases of the booking engine. Each handler runs inside one
DjangoUnitOfWork; writes lock the room (or the booking) row first so
the availability check and the write see the same state.

Commands:
- CreateBookingCommand: price and persist a new booking
- CancelBookingCommand: cancel and release inventory
- ConfirmPaymentCommand: mark a pending booking confirmed and paid
- ModifyBookingAddOnsCommand: replace add-ons before check-in
- RetryBookingCommand: re-book a failed or abandoned booking

Queries:
- CheckRetryAvailabilityQuery: can a failed booking be retried, and at what price
"""

from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import List, Optional
import logging

from django.db import OperationalError  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.uow import DjangoUnitOfWork
from shared.domain.value_objects import Money
from apps.bookings import services
from apps.bookings.domain.entities import BookingStatus
from apps.bookings.domain.events import (
    BookingAddOnsChanged,
    BookingCancelled,
    BookingRetried,
)
from apps.bookings.domain.exceptions import (
    BookingCommitConflictError,
    BookingNotFoundError,
    BookingStateError,
    RoomUnavailableError,
)
from apps.bookings.domain.pricing import Quote, make_stay, rebuild_quote
from apps.bookings.domain.stay_request import StayRequest
from apps.bookings.models import Booking

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    tenant_id: int
    room_id: int
    check_in: object
    check_out: object
    guest_name: str
    guest_email: str
    guest_phone: str = ''
    guests: int = 1
    addons: List[dict] = field(default_factory=list)
    special_requests: str = ''


@dataclass
class CancelBookingCommand:
    tenant_id: int
    booking_id: int
    reason: str = ''


@dataclass
class ConfirmPaymentCommand:
    tenant_id: int
    booking_id: int


@dataclass
class ModifyBookingAddOnsCommand:
    tenant_id: int
    booking_id: int
    addons: List[dict] = field(default_factory=list)


@dataclass
class RetryBookingCommand:
    tenant_id: int
    booking_id: int


@dataclass
class CheckRetryAvailabilityQuery:
    tenant_id: int
    booking_id: int


# ===== Helpers =====

def _today():
    return timezone.localdate()


def _hold_expiry():
    return timezone.now() + timedelta(minutes=int(services.engine_setting("PENDING_HOLD_MINUTES")))


def _get_booking(tenant_id, booking_id, *, lock: bool = False) -> Booking:
    queryset = Booking.objects.select_related("room", "tenant").filter(
        tenant_id=tenant_id, pk=booking_id
    )
    if lock:
        queryset = services._lock_queryset_if_possible(queryset)
    booking = queryset.first()
    if booking is None:
        raise BookingNotFoundError(f"Booking {booking_id} not found")
    return booking


def _apply_quote(booking: Booking, quote: Quote) -> List[str]:
    booking.base_total = quote.base_total.amount
    booking.addons_total = quote.addons_total.amount
    booking.total_amount = quote.grand_total.amount
    booking.currency = quote.currency
    booking.price_breakdown = [line.to_record() for line in quote.nights]
    booking.addons = [line.to_record() for line in quote.addons]
    return ["base_total", "addons_total", "total_amount", "currency", "price_breakdown", "addons"]


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Availability check, pricing and insert in one transaction.

    1. Lock the room row (SELECT ... FOR UPDATE)
    2. Count blocking bookings per night against total_units
    3. Resolve nightly prices and add-ons into a quote
    4. Insert the booking
    5. Recount; more bookings than units means a concurrent writer got
       through, so roll back with BookingCommitConflictError
    6. Publish BookingCreated after commit
    """

    def handle(self, command: CreateBookingCommand) -> Booking:
        stay = make_stay(command.check_in, command.check_out)
        logger.info(
            "Creating booking for room %s (tenant %s), %s",
            command.room_id, command.tenant_id, stay,
        )
        request = StayRequest(tenant_id=command.tenant_id, room_id=command.room_id, stay=stay)

        try:
            with DjangoUnitOfWork() as uow:
                room = services.get_room(command.tenant_id, command.room_id, lock=True)
                services.ensure_stay_rules(room, stay, guests=command.guests, today=_today())

                inventory = services.load_room_inventory(room, stay)
                if not inventory.can_allocate(stay):
                    request.reject("Room is not available for the selected dates")
                    logger.warning("Room %s unavailable for %s", room.pk, stay)
                    raise RoomUnavailableError(request.rejection_reason, available_units=0)

                addons = services.resolve_addons(
                    room, command.addons, nights=len(stay), guests=command.guests
                )
                request.price(services.quote_stay(room, stay.check_in, stay.check_out, addons=addons))

                booking = Booking(
                    tenant_id=command.tenant_id,
                    room=room,
                    guest_name=command.guest_name,
                    guest_email=command.guest_email,
                    guest_phone=command.guest_phone,
                    guests=command.guests,
                    check_in=stay.check_in,
                    check_out=stay.check_out,
                    special_requests=command.special_requests,
                    expires_at=_hold_expiry(),
                )
                _apply_quote(booking, request.quote)
                booking.save()

                services.ensure_capacity_not_exceeded(room, stay)

                request.book(booking.pk, booking.reference)
                uow.collect_events(request)
        except OperationalError as exc:
            logger.warning("Booking write for room %s failed: %s", command.room_id, exc)
            raise BookingCommitConflictError(
                "The booking could not be saved because of a concurrent update. Try again."
            ) from exc

        logger.info("Booking %s created (total %s)", booking.reference, request.quote.grand_total)
        return booking


class CancelBookingHandler:

    def handle(self, command: CancelBookingCommand) -> Booking:
        with DjangoUnitOfWork() as uow:
            booking = _get_booking(command.tenant_id, command.booking_id, lock=True)
            if not booking.blocks_inventory:
                raise BookingStateError(f"Booking in status {booking.status} cannot be cancelled")

            booking.mark_cancelled(command.reason)
            uow.add_event(BookingCancelled(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                tenant_id=booking.tenant_id,
                room_id=booking.room_id,
                stay=booking.stay,
                reason=command.reason,
            ))

        logger.info("Booking %s cancelled", booking.reference)
        return booking


class ConfirmPaymentHandler:
    """
    Pending -> confirmed and paid.

    Takes the booking row lock first, so the cart expiry sweep either runs
    before (and the confirmation is refused) or after (and skips it).
    """

    def handle(self, command: ConfirmPaymentCommand) -> Booking:
        with DjangoUnitOfWork():
            booking = _get_booking(command.tenant_id, command.booking_id, lock=True)
            if booking.status != Booking.Status.PENDING:
                raise BookingStateError(f"Booking in status {booking.status} cannot be confirmed")
            if booking.expires_at is not None and booking.expires_at <= timezone.now():
                raise BookingStateError("The hold on this booking has expired")
            booking.mark_confirmed()

        logger.info("Booking %s confirmed and paid", booking.reference)
        return booking


class ModifyBookingAddOnsHandler:
    """
    Replace the add-ons of a booking that has not started yet.

    Nights keep the prices frozen on the booking; only the add-on lines
    and the totals change.
    """

    def handle(self, command: ModifyBookingAddOnsCommand) -> Booking:
        with DjangoUnitOfWork() as uow:
            booking = _get_booking(command.tenant_id, command.booking_id, lock=True)
            if booking.status not in {status.value for status in BookingStatus.editable()}:
                raise BookingStateError(f"Add-ons cannot be changed for a {booking.status} booking")
            if booking.check_in <= _today():
                raise BookingStateError("Add-ons can only be changed before check-in")

            addons = services.resolve_addons(
                booking.room, command.addons, nights=booking.nights, guests=booking.guests
            )
            quote = rebuild_quote(
                room_id=booking.room_id,
                room_name=booking.room.name,
                check_in=booking.check_in,
                check_out=booking.check_out,
                currency=booking.currency,
                base_total=booking.base_total,
                breakdown=booking.price_breakdown,
                addons=addons,
            )
            previous_total = booking.total_amount
            update_fields = _apply_quote(booking, quote)
            booking.save(update_fields=update_fields + ["updated_at"])

            uow.add_event(BookingAddOnsChanged(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                tenant_id=booking.tenant_id,
                previous_total=previous_total,
                total_amount=booking.total_amount,
                currency=booking.currency,
            ))

        logger.info(
            "Booking %s add-ons updated: %s -> %s", booking.reference, previous_total, booking.total_amount
        )
        return booking


@dataclass
class RetryAvailability:
    booking: Booking
    available: bool
    available_units: int
    quote: Optional[Quote]
    original_total: Decimal
    new_total: Optional[Decimal]
    pricing_changed: bool
    unavailable_rooms: List[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "booking_id": self.booking.pk,
            "available": self.available,
            "available_units": self.available_units,
            "unavailable_rooms": self.unavailable_rooms,
            "pricing_changed": self.pricing_changed,
            "original_total": self.original_total,
            "new_total": self.new_total,
            "currency": self.booking.currency,
            "retry_count": self.booking.retry_count,
            "max_retries": int(services.engine_setting("MAX_RETRY_COUNT")),
        }


def _ensure_retryable(booking: Booking):
    if booking.status not in {status.value for status in BookingStatus.retryable()}:
        raise BookingStateError(f"Booking in status {booking.status} cannot be retried")
    if booking.check_in < _today():
        raise BookingStateError("Check-in date has already passed")
    max_retries = int(services.engine_setting("MAX_RETRY_COUNT"))
    if booking.retry_count >= max_retries:
        raise BookingStateError(
            f"Maximum retry attempts ({max_retries}) reached", code="retry_limit_reached"
        )


def _assess_retry(booking: Booking) -> RetryAvailability:
    original_total = booking.total_amount
    room = booking.room
    if not room.is_active:
        return RetryAvailability(
            booking=booking,
            available=False,
            available_units=0,
            quote=None,
            original_total=original_total,
            new_total=None,
            pricing_changed=False,
            unavailable_rooms=[{"room_id": room.pk, "room_name": room.name, "reason": "inactive"}],
        )

    result = services.check_availability(
        room, booking.check_in, booking.check_out, exclude_booking_id=booking.pk
    )
    quote = services.quote_stay(
        room, booking.check_in, booking.check_out, addons=services.stored_addons(booking.addons)
    )
    tolerance = Decimal(str(services.engine_setting("PRICE_CHANGE_TOLERANCE")))
    pricing_changed = quote.grand_total.differs_from(Money(original_total, quote.currency), tolerance)
    unavailable = [] if result.available else [
        {"room_id": room.pk, "room_name": room.name, "reason": "booked"}
    ]
    return RetryAvailability(
        booking=booking,
        available=result.available,
        available_units=result.available_units,
        quote=quote,
        original_total=original_total,
        new_total=quote.grand_total.amount,
        pricing_changed=pricing_changed,
        unavailable_rooms=unavailable,
    )


class CheckRetryAvailabilityHandler:
    """Read-only: whether a failed booking could be placed again, and the new price"""

    def handle(self, query: CheckRetryAvailabilityQuery) -> RetryAvailability:
        booking = _get_booking(query.tenant_id, query.booking_id)
        _ensure_retryable(booking)
        return _assess_retry(booking)


class RetryBookingHandler:

    def handle(self, command: RetryBookingCommand) -> RetryAvailability:
        try:
            with DjangoUnitOfWork() as uow:
                booking = _get_booking(command.tenant_id, command.booking_id, lock=True)
                _ensure_retryable(booking)
                services.get_room(booking.tenant_id, booking.room_id, lock=True)

                assessment = _assess_retry(booking)
                if not assessment.available:
                    raise RoomUnavailableError(
                        "Room is no longer available for the selected dates",
                        available_units=assessment.available_units,
                    )

                update_fields = _apply_quote(booking, assessment.quote)
                booking.status = Booking.Status.PENDING
                booking.payment_status = Booking.PaymentStatus.UNPAID
                booking.retry_count += 1
                booking.expires_at = _hold_expiry()
                booking.save(update_fields=update_fields + [
                    "status", "payment_status", "retry_count", "expires_at", "updated_at",
                ])

                services.ensure_capacity_not_exceeded(booking.room, booking.stay)

                uow.add_event(BookingRetried(
                    aggregate_id=booking.pk,
                    booking_id=booking.pk,
                    tenant_id=booking.tenant_id,
                    retry_count=booking.retry_count,
                    pricing_changed=assessment.pricing_changed,
                    total_amount=booking.total_amount,
                ))
        except OperationalError as exc:
            logger.warning("Retry of booking %s failed: %s", command.booking_id, exc)
            raise BookingCommitConflictError(
                "The booking could not be saved because of a concurrent update. Try again."
            ) from exc

        logger.info("Booking %s retried (attempt %d)", booking.reference, booking.retry_count)
        return assessment
