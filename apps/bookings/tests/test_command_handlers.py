"""Tests for booking use cases."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from unittest import mock

import pytest
from django.db import OperationalError
from django.test import override_settings
from django.utils import timezone

from apps.bookings import services
from apps.bookings.application.command_handlers import (
    ConfirmPaymentCommand,
    ConfirmPaymentHandler,
    CancelBookingCommand,
    CancelBookingHandler,
    CheckRetryAvailabilityHandler,
    CheckRetryAvailabilityQuery,
    CreateBookingCommand,
    CreateBookingHandler,
    ModifyBookingAddOnsCommand,
    ModifyBookingAddOnsHandler,
    RetryBookingCommand,
    RetryBookingHandler,
)
from apps.bookings.domain.events import BookingCreated
from apps.bookings.domain.exceptions import (
    BookingCommitConflictError,
    BookingNotFoundError,
    BookingStateError,
    InvalidStayError,
    RoomNotFoundError,
    RoomUnavailableError,
)
from apps.bookings.models import Booking
from apps.rooms.models import AddOn, SeasonalRate
from apps.tenants.models import Tenant
from shared.application.message_bus import message_bus


def _create(room, check_in, check_out, **extra) -> Booking:
    command = CreateBookingCommand(
        tenant_id=room.tenant_id,
        room_id=room.pk,
        check_in=check_in,
        check_out=check_out,
        guest_name=extra.pop("guest_name", "Lindiwe Dube"),
        guest_email="lindiwe@example.com",
        **extra,
    )
    return CreateBookingHandler().handle(command)


@pytest.mark.django_db
def test_create_booking_freezes_prices(tenant, room, future_date) -> None:
    SeasonalRate.objects.create(
        room=room, name="Peak", start_date=future_date(11), end_date=future_date(11),
        price_per_night=Decimal("1800"),
    )
    breakfast = AddOn.objects.create(tenant=tenant, name="Breakfast", price=Decimal("150"))

    booking = _create(
        room, future_date(10), future_date(13), guests=2, addons=[{"id": breakfast.pk, "quantity": 2}],
    )

    booking.refresh_from_db()
    assert booking.status == Booking.Status.PENDING
    assert booking.reference.startswith("BK-")
    assert booking.base_total == Decimal("3800.00")
    assert booking.addons_total == Decimal("300.00")
    assert booking.total_amount == Decimal("4100.00")
    assert booking.currency == "ZAR"
    assert [line["price"] for line in booking.price_breakdown] == ["1000.00", "1800.00", "1000.00"]
    assert booking.price_breakdown[1]["rate_name"] == "Peak"
    assert booking.addons[0]["name"] == "Breakfast"
    assert booking.expires_at is not None


@pytest.mark.django_db
def test_create_booking_publishes_created_event_after_commit(room, future_date, django_capture_on_commit_callbacks) -> None:
    received = []
    handler = received.append
    message_bus.register_event_handler(BookingCreated, handler)
    try:
        with django_capture_on_commit_callbacks(execute=True):
            booking = _create(room, future_date(3), future_date(5))
    finally:
        message_bus.unregister_event_handler(BookingCreated, handler)

    assert [event.booking_id for event in received] == [booking.pk]
    assert received[0].reference == booking.reference


@pytest.mark.django_db
def test_create_rejects_overlap_but_allows_back_to_back(room, future_date) -> None:
    _create(room, future_date(10), future_date(12))

    with pytest.raises(RoomUnavailableError):
        _create(room, future_date(11), future_date(13))
    _create(room, future_date(12), future_date(14))
    _create(room, future_date(8), future_date(10))

    assert Booking.objects.filter(room=room).count() == 3


@pytest.mark.django_db
def test_room_type_accepts_two_overlapping_bookings_and_rejects_third(room_type, future_date) -> None:
    _create(room_type, future_date(20), future_date(23))
    _create(room_type, future_date(21), future_date(24))

    with pytest.raises(RoomUnavailableError):
        _create(room_type, future_date(22), future_date(23))
    assert Booking.objects.filter(room=room_type).count() == 2


@pytest.mark.django_db
def test_create_validates_dates_and_room(tenant, room, future_date) -> None:
    with pytest.raises(InvalidStayError):
        _create(room, future_date(5), future_date(5))
    with pytest.raises(InvalidStayError):
        _create(room, future_date(-2), future_date(1))

    other = Tenant.objects.create(name="Coastal Inn", slug="coastal-inn")
    with pytest.raises(RoomNotFoundError):
        CreateBookingHandler().handle(CreateBookingCommand(
            tenant_id=other.pk, room_id=room.pk, check_in=future_date(1), check_out=future_date(2),
            guest_name="X", guest_email="x@example.com",
        ))


@pytest.mark.django_db
def test_capacity_exceeded_at_commit_rolls_back(room, future_date) -> None:
    # a competing writer slipped in between the check and the insert
    conflict = BookingCommitConflictError("capacity exceeded")
    with mock.patch.object(services, "ensure_capacity_not_exceeded", side_effect=conflict):
        with pytest.raises(BookingCommitConflictError):
            _create(room, future_date(4), future_date(6))

    assert not Booking.objects.exists()


@pytest.mark.django_db
def test_lock_failure_maps_to_commit_conflict(room, future_date) -> None:
    with mock.patch.object(services, "get_room", side_effect=OperationalError("database is locked")):
        with pytest.raises(BookingCommitConflictError):
            _create(room, future_date(4), future_date(6))


@pytest.mark.django_db
def test_cancel_releases_inventory(room, future_date) -> None:
    booking = _create(room, future_date(10), future_date(12))

    cancelled = CancelBookingHandler().handle(
        CancelBookingCommand(tenant_id=room.tenant_id, booking_id=booking.pk, reason="Change of plans")
    )

    assert cancelled.status == Booking.Status.CANCELLED
    assert cancelled.cancelled_at is not None
    _create(room, future_date(10), future_date(12))

    with pytest.raises(BookingStateError):
        CancelBookingHandler().handle(CancelBookingCommand(tenant_id=room.tenant_id, booking_id=booking.pk))


@pytest.mark.django_db
def test_cancel_is_tenant_scoped(room, future_date) -> None:
    booking = _create(room, future_date(10), future_date(12))
    other = Tenant.objects.create(name="Coastal Inn", slug="coastal-inn")

    with pytest.raises(BookingNotFoundError):
        CancelBookingHandler().handle(CancelBookingCommand(tenant_id=other.pk, booking_id=booking.pk))


@pytest.mark.django_db
def test_modify_addons_keeps_frozen_nightly_prices(tenant, room, future_date) -> None:
    booking = _create(room, future_date(10), future_date(12))
    # rates changing after the booking must not move its base total
    SeasonalRate.objects.create(
        room=room, name="Surge", start_date=future_date(10), end_date=future_date(12),
        price_per_night=Decimal("5000"),
    )
    transfer = AddOn.objects.create(tenant=tenant, name="Airport transfer", price=Decimal("450"))

    updated = ModifyBookingAddOnsHandler().handle(ModifyBookingAddOnsCommand(
        tenant_id=tenant.pk, booking_id=booking.pk, addons=[{"id": transfer.pk, "quantity": 1}],
    ))

    assert updated.base_total == Decimal("2000.00")
    assert updated.addons_total == Decimal("450.00")
    assert updated.total_amount == Decimal("2450.00")

    cleared = ModifyBookingAddOnsHandler().handle(ModifyBookingAddOnsCommand(
        tenant_id=tenant.pk, booking_id=booking.pk, addons=[],
    ))
    assert cleared.total_amount == Decimal("2000.00")
    assert cleared.addons == []


@pytest.mark.django_db
def test_modify_addons_refused_after_cancellation(tenant, room, future_date) -> None:
    booking = _create(room, future_date(10), future_date(12))
    booking.mark_cancelled()

    with pytest.raises(BookingStateError):
        ModifyBookingAddOnsHandler().handle(
            ModifyBookingAddOnsCommand(tenant_id=tenant.pk, booking_id=booking.pk, addons=[])
        )


@pytest.mark.django_db
def test_retry_availability_reports_price_change(room, future_date) -> None:
    booking = _create(room, future_date(10), future_date(12))
    booking.mark_payment_failed()
    SeasonalRate.objects.create(
        room=room, name="Peak", start_date=future_date(10), end_date=future_date(10),
        price_per_night=Decimal("1500"),
    )

    result = CheckRetryAvailabilityHandler().handle(
        CheckRetryAvailabilityQuery(tenant_id=room.tenant_id, booking_id=booking.pk)
    )

    data = result.to_dict()
    assert data["available"] is True
    assert data["pricing_changed"] is True
    assert data["original_total"] == Decimal("2000.00")
    assert data["new_total"] == Decimal("2500.00")
    assert data["max_retries"] == 3


@pytest.mark.django_db
def test_retry_rebooks_failed_booking(room, future_date) -> None:
    booking = _create(room, future_date(10), future_date(12))
    booking.mark_payment_failed()

    result = RetryBookingHandler().handle(RetryBookingCommand(tenant_id=room.tenant_id, booking_id=booking.pk))

    booking.refresh_from_db()
    assert booking.status == Booking.Status.PENDING
    assert booking.payment_status == Booking.PaymentStatus.UNPAID
    assert booking.retry_count == 1
    assert result.pricing_changed is False


@pytest.mark.django_db
def test_retry_refused_when_room_was_taken(room, future_date) -> None:
    booking = _create(room, future_date(10), future_date(12))
    booking.mark_payment_failed()
    _create(room, future_date(11), future_date(13))

    check = CheckRetryAvailabilityHandler().handle(
        CheckRetryAvailabilityQuery(tenant_id=room.tenant_id, booking_id=booking.pk)
    )
    assert check.available is False
    assert check.unavailable_rooms[0]["reason"] == "booked"

    with pytest.raises(RoomUnavailableError):
        RetryBookingHandler().handle(RetryBookingCommand(tenant_id=room.tenant_id, booking_id=booking.pk))


@pytest.mark.django_db
@override_settings(BOOKING_ENGINE={"MAX_RETRY_COUNT": 1})
def test_retry_limit(room, future_date) -> None:
    booking = _create(room, future_date(10), future_date(12))
    booking.mark_payment_failed()
    RetryBookingHandler().handle(RetryBookingCommand(tenant_id=room.tenant_id, booking_id=booking.pk))
    booking.refresh_from_db()
    booking.mark_payment_failed()

    with pytest.raises(BookingStateError) as excinfo:
        RetryBookingHandler().handle(RetryBookingCommand(tenant_id=room.tenant_id, booking_id=booking.pk))
    assert excinfo.value.code == "retry_limit_reached"


@pytest.mark.django_db
def test_only_failed_or_abandoned_bookings_can_be_retried(room, future_date) -> None:
    booking = _create(room, future_date(10), future_date(12))

    with pytest.raises(BookingStateError):
        CheckRetryAvailabilityHandler().handle(
            CheckRetryAvailabilityQuery(tenant_id=room.tenant_id, booking_id=booking.pk)
        )


@pytest.mark.django_db
def test_confirm_payment_marks_pending_booking_paid(room, future_date) -> None:
    booking = _create(room, future_date(6), future_date(8))

    confirmed = ConfirmPaymentHandler().handle(
        ConfirmPaymentCommand(tenant_id=room.tenant_id, booking_id=booking.pk)
    )

    booking.refresh_from_db()
    assert confirmed.status == Booking.Status.CONFIRMED
    assert booking.payment_status == Booking.PaymentStatus.PAID
    assert booking.expires_at is None
    with pytest.raises(BookingStateError):
        ConfirmPaymentHandler().handle(
            ConfirmPaymentCommand(tenant_id=room.tenant_id, booking_id=booking.pk)
        )


@pytest.mark.django_db
def test_confirm_payment_refused_once_the_hold_ran_out(room, future_date) -> None:
    expired = _create(room, future_date(6), future_date(8))
    Booking.objects.filter(pk=expired.pk).update(expires_at=timezone.now() - timedelta(minutes=1))
    abandoned = _create(room, future_date(10), future_date(12))
    Booking.objects.filter(pk=abandoned.pk).update(status=Booking.Status.CART_ABANDONED)

    for booking in (expired, abandoned):
        with pytest.raises(BookingStateError):
            ConfirmPaymentHandler().handle(
                ConfirmPaymentCommand(tenant_id=room.tenant_id, booking_id=booking.pk)
            )
    assert Booking.objects.get(pk=expired.pk).status == Booking.Status.PENDING


@pytest.mark.django_db
def test_confirm_payment_is_tenant_scoped(room, future_date) -> None:
    booking = _create(room, future_date(6), future_date(8))
    other = Tenant.objects.create(name="Coastal Inn", slug="coastal-inn")

    with pytest.raises(BookingNotFoundError):
        ConfirmPaymentHandler().handle(ConfirmPaymentCommand(tenant_id=other.pk, booking_id=booking.pk))
