"""
Common Value Objects

- Money: monetary amount with currency
- StayRange: an occupancy, check-in inclusive, check-out exclusive
- RateWindow: a seasonal rate window, inclusive on both ends

Stays and rate windows deliberately use different types so the two
overlap rules cannot be swapped by accident.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterator, Union

from shared.domain.base import ValueObject

CENTS = Decimal('0.01')

DateLike = Union[date, datetime, str]


def normalize_date(value: DateLike) -> date:
    """
    Reduce a date-like value to a plain calendar date.

    Datetimes keep their own calendar day (no timezone conversion),
    strings must be ISO ``YYYY-MM-DD``.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError as exc:
            raise ValueError(f"Invalid date: {value!r}") from exc
    raise TypeError(f"Cannot interpret {type(value).__name__} as a date")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Amounts are kept as Decimal quantized to cents.
    """
    amount: Decimal
    currency: str = 'ZAR'

    def __post_init__(self):
        amount = to_decimal(self.amount).quantize(CENTS, rounding=ROUND_HALF_UP)
        object.__setattr__(self, 'amount', amount)
        if amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency or len(self.currency) != 3 or not self.currency.isalpha():
            raise ValueError(f"Unsupported currency: {self.currency!r}")
        object.__setattr__(self, 'currency', self.currency.upper())

    @classmethod
    def zero(cls, currency: str = 'ZAR') -> 'Money':
        return cls(Decimal('0'), currency)

    def _check_currency(self, other: 'Money', verb: str):
        if not isinstance(other, Money):
            raise TypeError(f"Can only {verb} Money and Money")
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot {verb} different currencies: {self.currency} and {other.currency}"
            )

    def __add__(self, other: 'Money') -> 'Money':
        self._check_currency(other, 'add')
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor) -> 'Money':
        if isinstance(factor, bool) or not isinstance(factor, (int, float, Decimal)):
            raise TypeError("Can only multiply Money by number")
        return Money(self.amount * to_decimal(factor), self.currency)

    __rmul__ = __mul__

    def differs_from(self, other: 'Money', tolerance: Decimal) -> bool:
        self._check_currency(other, 'compare')
        return abs(self.amount - other.amount) > tolerance

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class StayRange(ValueObject):
    """
    Requested or booked occupancy.

    The guest occupies the nights from check_in up to, but not
    including, check_out. A checkout on day X and a new check-in on
    day X do not compete for the same night.
    """
    check_in: date
    check_out: date

    def __post_init__(self):
        check_in = normalize_date(self.check_in)
        check_out = normalize_date(self.check_out)
        object.__setattr__(self, 'check_in', check_in)
        object.__setattr__(self, 'check_out', check_out)
        if check_out <= check_in:
            raise ValueError(
                f"Check-out ({check_out}) must be after check-in ({check_in})"
            )

    def overlaps(self, other: 'StayRange') -> bool:
        """
        Half-open overlap.

            StayRange(25, 28).overlaps(StayRange(27, 30)) -> True
            StayRange(25, 28).overlaps(StayRange(28, 31)) -> False
        """
        if not isinstance(other, StayRange):
            raise TypeError("Can only check overlap with another StayRange")
        return self.check_in < other.check_out and other.check_in < self.check_out

    def covers_night(self, night: date) -> bool:
        return self.check_in <= normalize_date(night) < self.check_out

    def nights(self) -> Iterator[date]:
        """Dates of each occupied night, ascending"""
        current = self.check_in
        while current < self.check_out:
            yield current
            current += timedelta(days=1)

    @property
    def last_night(self) -> date:
        return self.check_out - timedelta(days=1)

    def __len__(self) -> int:
        return (self.check_out - self.check_in).days

    def __str__(self):
        return f"{self.check_in.isoformat()} - {self.check_out.isoformat()}"


@dataclass(frozen=True)
class RateWindow(ValueObject):
    """
    Seasonal rate window, both ends inclusive.

    A one-day window has start == end.
    """
    start: date
    end: date

    def __post_init__(self):
        start = normalize_date(self.start)
        end = normalize_date(self.end)
        object.__setattr__(self, 'start', start)
        object.__setattr__(self, 'end', end)
        if end < start:
            raise ValueError(f"Rate window end ({end}) is before its start ({start})")

    def contains(self, night: DateLike) -> bool:
        night = normalize_date(night)
        return self.start <= night <= self.end

    def intersects(self, stay: StayRange) -> bool:
        """True when at least one night of the stay falls inside the window"""
        return self.start <= stay.last_night and stay.check_in <= self.end

    @property
    def span_days(self) -> int:
        return (self.end - self.start).days + 1

    def __str__(self):
        return f"{self.start.isoformat()} .. {self.end.isoformat()}"
