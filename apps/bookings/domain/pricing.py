"""
Rate resolution and quote aggregation.

Pure functions over the snapshots in ``entities``: no database access,
no clock. Every caller that needs a price goes through
``resolve_nightly_prices`` / ``build_quote``.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from shared.domain.base import ValueObject
from shared.domain.value_objects import Money, StayRange, normalize_date, to_decimal

from .entities import AddOnSelection, RoomSnapshot, SeasonalRateSnapshot
from .exceptions import InvalidStayError


PER_BOOKING = "per_booking"
PER_NIGHT = "per_night"
PER_GUEST = "per_guest"
PER_GUEST_PER_NIGHT = "per_guest_per_night"


@dataclass(frozen=True)
class NightlyPriceLine(ValueObject):
    date: date
    price: Money
    rate_name: Optional[str] = None
    rate_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "price": self.price.amount,
            "rate_name": self.rate_name,
        }

    def to_record(self) -> dict:
        """Form stored on the booking row"""
        return {
            "date": self.date.isoformat(),
            "price": str(self.price.amount),
            "rate_name": self.rate_name,
            "rate_id": self.rate_id,
        }

    @classmethod
    def from_record(cls, record: dict, currency: str) -> "NightlyPriceLine":
        return cls(
            date=normalize_date(record["date"]),
            price=Money(to_decimal(record["price"]), currency),
            rate_name=record.get("rate_name"),
            rate_id=record.get("rate_id"),
        )


@dataclass(frozen=True)
class AddOnLine(ValueObject):
    id: Optional[int]
    name: str
    price: Money
    quantity: int
    total: Money

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price.amount,
            "quantity": self.quantity,
            "total": self.total.amount,
        }

    def to_record(self) -> dict:
        record = self.to_dict()
        record["price"] = str(self.price.amount)
        record["total"] = str(self.total.amount)
        return record


@dataclass(frozen=True)
class Quote(ValueObject):
    room_id: Optional[int]
    room_name: str
    stay: StayRange
    currency: str
    nights: Tuple[NightlyPriceLine, ...] = ()
    addons: Tuple[AddOnLine, ...] = ()
    base_total: Money = field(default=None)
    addons_total: Money = field(default=None)
    grand_total: Money = field(default=None)

    @property
    def night_count(self) -> int:
        return len(self.stay)

    @property
    def subtotal(self) -> Money:
        return self.base_total

    def with_addons(self, addons: Iterable[AddOnSelection]) -> "Quote":
        """Same nights and base total, add-ons summed again"""
        lines = tuple(price_addons(addons, self.currency))
        addons_total = _sum((line.total for line in lines), self.currency)
        return replace(
            self,
            addons=lines,
            addons_total=addons_total,
            grand_total=self.base_total + addons_total,
        )

    def to_pricing_dict(self) -> dict:
        return {
            "room_name": self.room_name,
            "nights": [line.to_dict() for line in self.nights],
            "subtotal": self.base_total.amount,
            "currency": self.currency,
            "night_count": self.night_count,
        }

    def to_totals_dict(self) -> dict:
        return {
            "base_total": self.base_total.amount,
            "addons_total": self.addons_total.amount,
            "total_amount": self.grand_total.amount,
            "currency": self.currency,
        }

    def to_dict(self) -> dict:
        data = self.to_pricing_dict()
        data.update(self.to_totals_dict())
        data["check_in"] = self.stay.check_in.isoformat()
        data["check_out"] = self.stay.check_out.isoformat()
        data["addons"] = [line.to_dict() for line in self.addons]
        return data


def _sum(amounts: Iterable[Money], currency: str) -> Money:
    total = Money.zero(currency)
    for amount in amounts:
        total = total + amount
    return total


def make_stay(check_in, check_out) -> StayRange:
    try:
        return StayRange(check_in, check_out)
    except (TypeError, ValueError) as exc:
        raise InvalidStayError(str(exc)) from exc


def select_rate(
    seasonal_rates: Iterable[SeasonalRateSnapshot], night: date
) -> Optional[SeasonalRateSnapshot]:
    """Winning rate for one night, or None when the base price applies"""
    covering = [rate for rate in seasonal_rates if rate.window.contains(night)]
    if not covering:
        return None
    return max(covering, key=SeasonalRateSnapshot.precedence)


def resolve_nightly_prices(
    room: RoomSnapshot,
    seasonal_rates: Iterable[SeasonalRateSnapshot],
    check_in,
    check_out,
) -> List[NightlyPriceLine]:
    """
    Decompose a stay into one price line per night.

    Each night [check_in, check_out) takes the price of the winning rate
    whose inclusive window covers it, or the room's base price. Rates
    that do not touch the stay are ignored.
    """
    stay = make_stay(check_in, check_out)
    candidates = [rate for rate in seasonal_rates if rate.window.intersects(stay)]

    lines = []
    for night in stay.nights():
        rate = select_rate(candidates, night)
        if rate is None:
            lines.append(NightlyPriceLine(night, room.base_price))
        else:
            lines.append(
                NightlyPriceLine(
                    night,
                    Money(rate.price_per_night, room.currency),
                    rate_name=rate.name,
                    rate_id=rate.id,
                )
            )
    return lines


def effective_price(
    room: RoomSnapshot, seasonal_rates: Iterable[SeasonalRateSnapshot], night
) -> NightlyPriceLine:
    night = normalize_date(night)
    rate = select_rate(seasonal_rates, night)
    if rate is None:
        return NightlyPriceLine(night, room.base_price)
    return NightlyPriceLine(
        night, Money(rate.price_per_night, room.currency), rate.name, rate.id
    )


def addon_unit_price(price, pricing_type: str, nights: int, guests: int = 1) -> Decimal:
    """Catalog price scaled by the add-on's pricing type"""
    price = to_decimal(price)
    guests = max(int(guests or 1), 1)
    if pricing_type == PER_NIGHT:
        return price * nights
    if pricing_type == PER_GUEST:
        return price * guests
    if pricing_type == PER_GUEST_PER_NIGHT:
        return price * guests * nights
    return price


def price_addons(addons: Iterable[AddOnSelection], currency: str) -> List[AddOnLine]:
    lines = []
    for addon in addons:
        unit = Money(addon.price, currency)
        lines.append(
            AddOnLine(
                id=addon.id,
                name=addon.name,
                price=unit,
                quantity=int(addon.quantity),
                total=unit * int(addon.quantity),
            )
        )
    return lines


def build_quote(
    room: RoomSnapshot,
    check_in,
    check_out,
    seasonal_rates: Iterable[SeasonalRateSnapshot] = (),
    addons: Iterable[AddOnSelection] = (),
) -> Quote:
    """
    Nightly breakdown plus add-ons.

    base_total is the sum of the nights, addons_total the sum of
    price * quantity over the add-ons, grand_total their sum. The
    currency always comes from the room.
    """
    stay = make_stay(check_in, check_out)
    nights = tuple(resolve_nightly_prices(room, seasonal_rates, stay.check_in, stay.check_out))
    quote = Quote(
        room_id=room.id,
        room_name=room.name,
        stay=stay,
        currency=room.currency,
        nights=nights,
        base_total=_sum((line.price for line in nights), room.currency),
    )
    return quote.with_addons(addons)


def rebuild_quote(
    *,
    room_id: Optional[int],
    room_name: str,
    check_in,
    check_out,
    currency: str,
    base_total,
    breakdown: Sequence[dict] = (),
    addons: Iterable[AddOnSelection] = (),
) -> Quote:
    """
    Quote for an existing booking from the values frozen on it.

    The stored base total is authoritative; seasonal rates that changed
    after the booking was made do not affect it.
    """
    stay = make_stay(check_in, check_out)
    quote = Quote(
        room_id=room_id,
        room_name=room_name,
        stay=stay,
        currency=currency,
        nights=tuple(NightlyPriceLine.from_record(record, currency) for record in breakdown),
        base_total=Money(to_decimal(base_total), currency),
    )
    return quote.with_addons(addons)
