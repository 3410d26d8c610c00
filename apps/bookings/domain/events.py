"""
Booking Domain Events

Published through the message bus once the surrounding transaction has
committed.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List

from shared.domain.base import DomainEvent
from shared.domain.value_objects import StayRange


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    """
    A booking was persisted.

    Consumers: guest confirmation, staff notification, hold expiry.
    """
    booking_id: int
    tenant_id: int
    room_id: int
    reference: str
    stay: StayRange
    total_amount: Decimal
    currency: str


@dataclass(kw_only=True)
class BookingCancelled(DomainEvent):
    booking_id: int
    tenant_id: int
    room_id: int
    stay: StayRange
    reason: str = ""


@dataclass(kw_only=True)
class BookingAddOnsChanged(DomainEvent):
    booking_id: int
    tenant_id: int
    previous_total: Decimal
    total_amount: Decimal
    currency: str


@dataclass(kw_only=True)
class BookingRetried(DomainEvent):
    """A failed or abandoned booking was moved back to pending"""
    booking_id: int
    tenant_id: int
    retry_count: int
    pricing_changed: bool
    total_amount: Decimal


@dataclass(kw_only=True)
class BookingsAbandoned(DomainEvent):
    """Pending carts whose hold expired were released"""
    booking_ids: List[int]
    as_of: date
