"""Data access for the booking engine.

Every query here filters by tenant. The pure engine in ``domain`` never
touches the database; these helpers load its inputs and map its results
back to rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Sequence

from django.conf import settings  # type: ignore
from django.db import DatabaseError, transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from apps.rooms.models import AddOn, Room, SeasonalRate
from shared.domain.value_objects import StayRange

from .domain.entities import AddOnSelection, SeasonalRateSnapshot
from .domain.exceptions import (
    BookingCommitConflictError,
    InvalidStayError,
    RatesUnavailableError,
    RoomNotFoundError,
)
from .domain.inventory import RoomInventory
from .domain.pricing import Quote, addon_unit_price, build_quote, make_stay
from .models import Booking

logger = logging.getLogger(__name__)

ENGINE_DEFAULTS = {
    "RATE_LOOKUP_FAIL_CLOSED": False,
    "MAX_RETRY_COUNT": 3,
    "PENDING_HOLD_MINUTES": 30,
    "PRICE_CHANGE_TOLERANCE": "1.00",
}


def engine_setting(name: str):
    return getattr(settings, "BOOKING_ENGINE", {}).get(name, ENGINE_DEFAULTS[name])


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def get_room(tenant_id, room_id, *, lock: bool = False, active_only: bool = True) -> Room:
    """
    Load a tenant's room.

    With ``lock=True`` the row stays locked until the surrounding
    transaction ends; booking writes for the room queue behind it.
    """
    queryset = Room.objects.select_related("tenant").filter(tenant_id=tenant_id, pk=room_id)
    if lock:
        queryset = _lock_queryset_if_possible(queryset)
    room = queryset.first()
    if room is None:
        raise RoomNotFoundError(f"Room {room_id} not found")
    if active_only and not room.is_active:
        raise RoomNotFoundError(f"Room {room_id} is not active")
    return room


def ensure_room_active(room: Room) -> Room:
    if not room.is_active:
        raise RoomNotFoundError(f"Room {room.pk} is not active")
    return room


def _query_seasonal_rates(room: Room, stay: StayRange) -> List[SeasonalRateSnapshot]:
    rates = SeasonalRate.objects.filter(tenant_id=room.tenant_id, room=room).touching(
        stay.check_in, stay.check_out
    )
    return [rate.to_snapshot() for rate in rates]


def load_seasonal_rates(room: Room, stay: StayRange) -> List[SeasonalRateSnapshot]:
    """
    Rates of ``room`` touching ``stay``.

    A failed lookup falls back to the base price unless
    BOOKING_ENGINE["RATE_LOOKUP_FAIL_CLOSED"] is set.
    """
    try:
        # savepoint keeps an outer transaction usable after a failed query
        with transaction.atomic():
            return _query_seasonal_rates(room, stay)
    except DatabaseError as exc:
        if engine_setting("RATE_LOOKUP_FAIL_CLOSED"):
            logger.error("Seasonal rate lookup failed for room %s: %s", room.pk, exc)
            raise RatesUnavailableError("Pricing is temporarily unavailable") from exc
        logger.warning(
            "Seasonal rate lookup failed for room %s, using base price: %s", room.pk, exc
        )
        return []


def load_room_inventory(room: Room, stay: StayRange, *, exclude_booking_id=None) -> RoomInventory:
    """Blocking bookings of ``room`` overlapping ``stay``"""
    queryset = (
        Booking.objects.filter(tenant_id=room.tenant_id, room=room)
        .blocking()
        .overlapping(stay.check_in, stay.check_out)
        .order_by("check_in", "pk")
    )
    if exclude_booking_id is not None:
        queryset = queryset.exclude(pk=exclude_booking_id)
    return RoomInventory(
        room_id=room.pk,
        total_units=room.total_units,
        bookings=[booking.to_booked_stay() for booking in queryset],
    )


def ensure_capacity_not_exceeded(room: Room, stay: StayRange) -> None:
    """Recount after an insert, inside the same transaction."""
    inventory = load_room_inventory(room, stay)
    if inventory.is_overbooked(stay):
        logger.warning("Capacity exceeded for room %s on %s", room.pk, stay)
        raise BookingCommitConflictError(
            "The room was booked by someone else while this booking was being saved. "
            "Check availability again."
        )


def resolve_addons(
    room: Room, selections: Iterable[dict], *, nights: int, guests: int = 1
) -> List[AddOnSelection]:
    """
    Turn ``[{"id", "quantity"}]`` into priced selections from the catalog.

    Prices always come from the catalog, never from the request.
    """
    selections = list(selections or [])
    if not selections:
        return []

    # the same add-on listed twice counts as one line
    quantities: dict = {}
    for item in selections:
        quantity = item.get("quantity", 1)
        if quantity is None or int(quantity) < 1:
            raise InvalidStayError(f"Quantity for add-on {item['id']} must be at least 1")
        quantities[item["id"]] = quantities.get(item["id"], 0) + int(quantity)

    catalog = {
        addon.pk: addon
        for addon in AddOn.objects.available_for(room).filter(pk__in=list(quantities))
    }

    resolved = []
    for addon_id, quantity in quantities.items():
        addon = catalog.get(addon_id)
        if addon is None:
            raise InvalidStayError(f"Add-on {addon_id} is not available for this room")
        if quantity < 1 or quantity > addon.max_quantity:
            raise InvalidStayError(
                f"Quantity for {addon.name} must be between 1 and {addon.max_quantity}"
            )
        resolved.append(
            AddOnSelection(
                id=addon.pk,
                name=addon.name,
                price=addon_unit_price(addon.price, addon.pricing_type, nights, guests),
                quantity=quantity,
            )
        )
    return resolved


def stored_addons(records: Sequence[dict]) -> List[AddOnSelection]:
    """Add-on lines saved on a booking, back as selections"""
    return [
        AddOnSelection(
            id=record.get("id"),
            name=record.get("name", ""),
            price=record["price"],
            quantity=record.get("quantity", 1),
        )
        for record in records or []
    ]


def quote_stay(
    room: Room,
    check_in,
    check_out,
    *,
    addons: Iterable[AddOnSelection] = (),
) -> Quote:
    ensure_room_active(room)
    stay = make_stay(check_in, check_out)
    return build_quote(
        room.to_snapshot(),
        stay.check_in,
        stay.check_out,
        load_seasonal_rates(room, stay),
        addons,
    )


@dataclass(frozen=True)
class AvailabilityResult:
    room: Room
    stay: StayRange
    available_units: int

    @property
    def available(self) -> bool:
        return self.available_units > 0

    @property
    def nights(self) -> int:
        return len(self.stay)

    @property
    def meets_min_stay(self) -> bool:
        return self.room.to_snapshot().meets_min_stay(self.nights)

    @property
    def meets_max_stay(self) -> bool:
        return self.room.to_snapshot().meets_max_stay(self.nights)

    def to_dict(self) -> dict:
        return {
            "available": self.available,
            "available_units": self.available_units,
            "total_units": self.room.total_units,
            "nights": self.nights,
            "min_stay_nights": self.room.min_stay_nights,
            "max_stay_nights": self.room.max_stay_nights,
            "meets_min_stay": self.meets_min_stay,
            "meets_max_stay": self.meets_max_stay,
        }


def check_availability(room: Room, check_in, check_out, *, exclude_booking_id=None) -> AvailabilityResult:
    ensure_room_active(room)
    stay = make_stay(check_in, check_out)
    inventory = load_room_inventory(room, stay, exclude_booking_id=exclude_booking_id)
    return AvailabilityResult(
        room=room,
        stay=stay,
        available_units=inventory.available_units(stay),
    )


def find_conflicts(room: Room, check_in, check_out, *, exclude_booking_id=None) -> List[dict]:
    stay = make_stay(check_in, check_out)
    inventory = load_room_inventory(room, stay, exclude_booking_id=exclude_booking_id)
    return [
        {
            "id": booked.booking_id,
            "guest": booked.guest_name,
            "dates": f"{booked.stay.check_in.isoformat()} to {booked.stay.check_out.isoformat()}",
            "status": booked.status,
        }
        for booked in inventory.competing(stay)
    ]


def ensure_stay_rules(room: Room, stay: StayRange, *, guests: int = 1, today: date | None = None) -> None:
    """Stay-length, guest count and past-date checks for new bookings"""
    if today is not None and stay.check_in < today:
        raise InvalidStayError("Check-in date cannot be in the past")
    nights = len(stay)
    if nights < (room.min_stay_nights or 1):
        raise InvalidStayError(f"Minimum stay for {room.name} is {room.min_stay_nights} nights")
    if room.max_stay_nights is not None and nights > room.max_stay_nights:
        raise InvalidStayError(f"Maximum stay for {room.name} is {room.max_stay_nights} nights")
    if guests > room.max_guests:
        raise InvalidStayError(
            f"Guests count ({guests}) exceeds room capacity ({room.max_guests})"
        )
