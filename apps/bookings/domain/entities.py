"""
Engine inputs.

Plain snapshots of the rows the engine reads. The data layer builds them
from Django models; tests build them directly.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from shared.domain.base import ValueObject
from shared.domain.value_objects import Money, RateWindow, StayRange, to_decimal


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    PAYMENT_FAILED = "payment_failed"
    CART_ABANDONED = "cart_abandoned"

    @classmethod
    def blocking(cls) -> frozenset:
        """Statuses that occupy a unit of inventory"""
        return frozenset({cls.PENDING, cls.CONFIRMED, cls.CHECKED_IN})

    @classmethod
    def retryable(cls) -> frozenset:
        return frozenset({cls.PAYMENT_FAILED, cls.CART_ABANDONED})

    @classmethod
    def editable(cls) -> frozenset:
        return frozenset({cls.PENDING, cls.CONFIRMED})


BLOCKING_STATUSES = frozenset(status.value for status in BookingStatus.blocking())


@dataclass(frozen=True)
class RoomSnapshot(ValueObject):
    id: int
    tenant_id: int
    name: str
    base_price_per_night: Decimal
    currency: str = "ZAR"
    total_units: int = 1
    is_active: bool = True
    min_stay_nights: int = 1
    max_stay_nights: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "base_price_per_night", to_decimal(self.base_price_per_night))
        if self.total_units < 1:
            raise ValueError("A room must have at least one unit")

    @property
    def base_price(self) -> Money:
        return Money(self.base_price_per_night, self.currency)

    def meets_min_stay(self, nights: int) -> bool:
        return nights >= (self.min_stay_nights or 1)

    def meets_max_stay(self, nights: int) -> bool:
        return self.max_stay_nights is None or nights <= self.max_stay_nights


@dataclass(frozen=True)
class SeasonalRateSnapshot(ValueObject):
    id: Optional[int]
    name: str
    start_date: date
    end_date: date
    price_per_night: Decimal
    priority: int = 0
    created_at: Optional[datetime] = None

    def __post_init__(self):
        window = RateWindow(self.start_date, self.end_date)
        object.__setattr__(self, "start_date", window.start)
        object.__setattr__(self, "end_date", window.end)
        object.__setattr__(self, "price_per_night", to_decimal(self.price_per_night))

    @property
    def window(self) -> RateWindow:
        return RateWindow(self.start_date, self.end_date)

    def precedence(self) -> tuple:
        """
        Sort key, larger wins: priority, then the narrower window, then
        the more recently created rate, then the higher id.
        """
        created = self.created_at.timestamp() if self.created_at else float("-inf")
        return (
            self.priority,
            -self.window.span_days,
            created,
            self.id if self.id is not None else -1,
        )


@dataclass(frozen=True)
class BookedStay(ValueObject):
    """An existing booking as seen by the availability checker"""
    booking_id: int
    stay: StayRange
    status: str = BookingStatus.PENDING.value
    guest_name: str = ""

    @property
    def blocks_inventory(self) -> bool:
        return str(getattr(self.status, "value", self.status)) in BLOCKING_STATUSES


@dataclass(frozen=True)
class AddOnSelection(ValueObject):
    """An add-on chosen for a stay, with its resolved unit price"""
    id: Optional[int]
    name: str
    price: Decimal
    quantity: int = 1

    def __post_init__(self):
        object.__setattr__(self, "price", to_decimal(self.price))
        if self.price < 0:
            raise ValueError(f"Add-on {self.name!r} has a negative price")
        if int(self.quantity) < 1:
            raise ValueError(f"Add-on {self.name!r} quantity must be at least 1")
