"""Tests for the booking engine's data access helpers."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import mock

import pytest
from django.db import DatabaseError
from django.test import override_settings

from apps.bookings import services
from apps.bookings.domain.exceptions import (
    InvalidStayError,
    RatesUnavailableError,
    RoomNotFoundError,
)
from apps.bookings.models import Booking
from apps.rooms.models import AddOn, Room, SeasonalRate
from apps.tenants.models import Tenant
from shared.domain.value_objects import StayRange


def _booking(room, check_in, check_out, status=Booking.Status.CONFIRMED, **extra):
    return Booking.objects.create(
        tenant=room.tenant,
        room=room,
        guest_name=extra.pop("guest_name", "Thandi Nkosi"),
        guest_email="thandi@example.com",
        check_in=check_in,
        check_out=check_out,
        status=status,
        currency="ZAR",
        **extra,
    )


@pytest.mark.django_db
def test_get_room_is_scoped_by_tenant(room) -> None:
    other = Tenant.objects.create(name="Coastal Inn", slug="coastal-inn")

    assert services.get_room(room.tenant_id, room.pk) == room
    with pytest.raises(RoomNotFoundError):
        services.get_room(other.pk, room.pk)


@pytest.mark.django_db
def test_get_room_rejects_inactive_rooms(room) -> None:
    room.deactivate()

    with pytest.raises(RoomNotFoundError):
        services.get_room(room.tenant_id, room.pk)
    assert services.get_room(room.tenant_id, room.pk, active_only=False) == room
    with pytest.raises(RoomNotFoundError):
        services.check_availability(room, date(2030, 1, 1), date(2030, 1, 3))
    with pytest.raises(RoomNotFoundError):
        services.quote_stay(room, date(2030, 1, 1), date(2030, 1, 3))


@pytest.mark.django_db
def test_zar_scenario_through_the_database(tenant) -> None:
    room = Room.objects.create(tenant=tenant, name="Garden Suite", base_price_per_night=Decimal("1000"))
    SeasonalRate.objects.create(
        room=room, name="Holiday", start_date=date(2024, 12, 24), end_date=date(2024, 12, 31),
        price_per_night=Decimal("1500"), priority=1,
    )
    SeasonalRate.objects.create(
        room=room, name="Christmas", start_date=date(2024, 12, 24), end_date=date(2024, 12, 26),
        price_per_night=Decimal("2500"), priority=5,
    )

    quote = services.quote_stay(room, date(2024, 12, 23), date(2024, 12, 27))

    assert [line.price.amount for line in quote.nights] == [
        Decimal("1000.00"), Decimal("2500.00"), Decimal("2500.00"), Decimal("2500.00"),
    ]
    assert quote.base_total.amount == Decimal("8500.00")
    assert quote.currency == "ZAR"


@pytest.mark.django_db
def test_rates_of_other_rooms_are_ignored(tenant, room) -> None:
    other_room = Room.objects.create(tenant=tenant, name="Loft", base_price_per_night=Decimal("600"))
    SeasonalRate.objects.create(
        room=other_room, name="Peak", start_date=date(2025, 1, 1), end_date=date(2025, 1, 31),
        price_per_night=Decimal("3000"),
    )

    quote = services.quote_stay(room, date(2025, 1, 10), date(2025, 1, 12))

    assert quote.base_total.amount == Decimal("2000.00")


@pytest.mark.django_db
def test_rate_lookup_failure_falls_back_to_base_price(room) -> None:
    with mock.patch.object(services, "_query_seasonal_rates", side_effect=DatabaseError("boom")):
        quote = services.quote_stay(room, date(2025, 1, 10), date(2025, 1, 12))

    assert [line.price.amount for line in quote.nights] == [Decimal("1000.00"), Decimal("1000.00")]


@pytest.mark.django_db
@override_settings(BOOKING_ENGINE={"RATE_LOOKUP_FAIL_CLOSED": True})
def test_rate_lookup_failure_can_fail_closed(room) -> None:
    with mock.patch.object(services, "_query_seasonal_rates", side_effect=DatabaseError("boom")):
        with pytest.raises(RatesUnavailableError):
            services.quote_stay(room, date(2025, 1, 10), date(2025, 1, 12))


@pytest.mark.django_db
def test_check_availability_counts_only_blocking_bookings(room_type, future_date) -> None:
    _booking(room_type, future_date(10), future_date(13))
    _booking(room_type, future_date(10), future_date(13), status=Booking.Status.CANCELLED)

    result = services.check_availability(room_type, future_date(11), future_date(12))

    assert result.available
    assert result.available_units == 1
    assert result.to_dict()["total_units"] == 2


@pytest.mark.django_db
def test_find_conflicts_lists_overlapping_bookings(room, future_date) -> None:
    booking = _booking(room, future_date(5), future_date(8), guest_name="Pieter")
    _booking(room, future_date(8), future_date(9))

    conflicts = services.find_conflicts(room, future_date(6), future_date(8))

    assert conflicts == [{
        "id": booking.pk,
        "guest": "Pieter",
        "dates": f"{future_date(5).isoformat()} to {future_date(8).isoformat()}",
        "status": "confirmed",
    }]
    assert services.find_conflicts(room, future_date(6), future_date(8), exclude_booking_id=booking.pk) == []


@pytest.mark.django_db
def test_ensure_stay_rules(room, future_date) -> None:
    room.min_stay_nights = 2
    room.max_stay_nights = 5
    room.save()

    services.ensure_stay_rules(room, StayRange(future_date(1), future_date(3)), guests=2)
    with pytest.raises(InvalidStayError):
        services.ensure_stay_rules(room, StayRange(future_date(1), future_date(2)))
    with pytest.raises(InvalidStayError):
        services.ensure_stay_rules(room, StayRange(future_date(1), future_date(8)))
    with pytest.raises(InvalidStayError):
        services.ensure_stay_rules(room, StayRange(future_date(1), future_date(3)), guests=9)
    with pytest.raises(InvalidStayError):
        services.ensure_stay_rules(
            room, StayRange(future_date(-1), future_date(2)), today=future_date(0)
        )


@pytest.mark.django_db
def test_resolve_addons_prices_from_catalog(tenant, room) -> None:
    breakfast = AddOn.objects.create(
        tenant=tenant, name="Breakfast", price=Decimal("150"), pricing_type=AddOn.PricingType.PER_NIGHT,
        max_quantity=4,
    )

    [selection] = services.resolve_addons(room, [{"id": breakfast.pk, "quantity": 2}], nights=3)

    assert selection.price == Decimal("450")
    assert selection.quantity == 2


@pytest.mark.django_db
def test_resolve_addons_rejects_foreign_inactive_and_excess(tenant, room) -> None:
    other = Tenant.objects.create(name="Coastal Inn", slug="coastal-inn")
    foreign = AddOn.objects.create(tenant=other, name="Kayak", price=Decimal("200"))
    inactive = AddOn.objects.create(tenant=tenant, name="Spa", price=Decimal("500"), is_active=False)
    limited = AddOn.objects.create(tenant=tenant, name="Picnic", price=Decimal("90"), max_quantity=1)
    elsewhere = AddOn.objects.create(tenant=tenant, name="Cot", price=Decimal("0"))
    elsewhere.rooms.add(Room.objects.create(tenant=tenant, name="Loft", base_price_per_night=Decimal("600")))

    for addon, quantity in ((foreign, 1), (inactive, 1), (limited, 2), (elsewhere, 1)):
        with pytest.raises(InvalidStayError):
            services.resolve_addons(room, [{"id": addon.pk, "quantity": quantity}], nights=1)

    breakfast = AddOn.objects.create(tenant=tenant, name="Breakfast", price=Decimal("150"), max_quantity=2)
    with pytest.raises(InvalidStayError):
        services.resolve_addons(
            room, [{"id": breakfast.pk, "quantity": 2}, {"id": breakfast.pk, "quantity": 2}], nights=1
        )
    with pytest.raises(InvalidStayError):
        services.resolve_addons(room, [{"id": breakfast.pk, "quantity": 0}], nights=1)

    merged = services.resolve_addons(
        room, [{"id": breakfast.pk, "quantity": 1}, {"id": breakfast.pk}], nights=1
    )
    assert [(line.id, line.quantity) for line in merged] == [(breakfast.pk, 2)]


@pytest.mark.django_db
def test_recount_detects_overbooking(room, future_date) -> None:
    _booking(room, future_date(5), future_date(8))
    _booking(room, future_date(7), future_date(9), status=Booking.Status.PENDING)

    with pytest.raises(services.BookingCommitConflictError):
        services.ensure_capacity_not_exceeded(room, StayRange(future_date(7), future_date(9)))
    services.ensure_capacity_not_exceeded(room, StayRange(future_date(9), future_date(10)))
