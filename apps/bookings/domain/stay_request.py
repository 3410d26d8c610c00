"""
Stay Request

Lifecycle of one booking attempt while it is being processed:

    DRAFT -> REJECTED_UNAVAILABLE
    DRAFT -> PRICED -> BOOKED

Nothing here is persisted. If the write fails after pricing, the attempt
starts over from DRAFT.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from shared.domain.base import Aggregate
from shared.domain.value_objects import StayRange

from .events import BookingCreated
from .pricing import Quote


class StayRequestState(str, Enum):
    DRAFT = "draft"
    REJECTED_UNAVAILABLE = "rejected_unavailable"
    PRICED = "priced"
    BOOKED = "booked"


@dataclass(eq=False)
class StayRequest(Aggregate):
    tenant_id: int = None
    room_id: int = None
    stay: StayRange = None
    state: StayRequestState = StayRequestState.DRAFT
    quote: Optional[Quote] = None
    booking_id: Optional[int] = None
    rejection_reason: str = ""

    def __post_init__(self):
        if self.stay is None:
            raise ValueError("Stay request must have dates")

    def _require(self, expected: StayRequestState, action: str):
        if self.state != expected:
            raise ValueError(f"Cannot {action} a stay request in state {self.state.value}")

    def reject(self, reason: str):
        self._require(StayRequestState.DRAFT, "reject")
        self.state = StayRequestState.REJECTED_UNAVAILABLE
        self.rejection_reason = reason

    def price(self, quote: Quote):
        self._require(StayRequestState.DRAFT, "price")
        if quote.stay != self.stay:
            raise ValueError("Quote was built for a different stay")
        self.quote = quote
        self.state = StayRequestState.PRICED

    def book(self, booking_id: int, reference: str):
        self._require(StayRequestState.PRICED, "book")
        self.booking_id = booking_id
        self.state = StayRequestState.BOOKED
        self.add_event(BookingCreated(
            aggregate_id=booking_id,
            booking_id=booking_id,
            tenant_id=self.tenant_id,
            room_id=self.room_id,
            reference=reference,
            stay=self.stay,
            total_amount=self.quote.grand_total.amount,
            currency=self.quote.currency,
        ))

    def restart(self):
        """Back to DRAFT after a failed write"""
        if self.state == StayRequestState.BOOKED:
            raise ValueError("A booked stay request cannot be restarted")
        self.state = StayRequestState.DRAFT
        self.quote = None
        self.rejection_reason = ""
        self.clear_events()
