"""
Room Inventory

Capacity bookkeeping for one room. A room offers ``total_units``
interchangeable units; every booking in a blocking status takes one unit
for each night of its stay. The room is available for a stay when, on
every night of it, fewer than ``total_units`` units are taken.

Locking is the caller's job: load the inventory after taking the room
row lock so the counts cannot go stale before the insert.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List

from shared.domain.value_objects import StayRange

from .entities import BookedStay, RoomSnapshot
from .pricing import make_stay


@dataclass
class RoomInventory:
    room_id: int
    total_units: int = 1
    bookings: List[BookedStay] = field(default_factory=list)

    def __post_init__(self):
        if self.total_units < 1:
            raise ValueError("Inventory needs at least one unit")

    @classmethod
    def for_room(cls, room: RoomSnapshot, bookings: Iterable[BookedStay]) -> "RoomInventory":
        return cls(room_id=room.id, total_units=room.total_units, bookings=list(bookings))

    def competing(self, stay: StayRange, exclude_booking_id=None) -> List[BookedStay]:
        """Blocking bookings whose stay overlaps ``stay``"""
        return [
            booked for booked in self.bookings
            if booked.blocks_inventory
            and booked.booking_id != exclude_booking_id
            and booked.stay.overlaps(stay)
        ]

    def occupancy_by_night(self, stay: StayRange, exclude_booking_id=None) -> Dict[date, int]:
        occupancy = Counter({night: 0 for night in stay.nights()})
        for booked in self.competing(stay, exclude_booking_id):
            for night in booked.stay.nights():
                if night in occupancy:
                    occupancy[night] += 1
        return dict(occupancy)

    def peak_occupancy(self, stay: StayRange, exclude_booking_id=None) -> int:
        return max(self.occupancy_by_night(stay, exclude_booking_id).values(), default=0)

    def available_units(self, stay: StayRange, exclude_booking_id=None) -> int:
        return max(self.total_units - self.peak_occupancy(stay, exclude_booking_id), 0)

    def can_allocate(self, stay: StayRange, exclude_booking_id=None) -> bool:
        return self.available_units(stay, exclude_booking_id) > 0

    def is_overbooked(self, stay: StayRange) -> bool:
        return self.peak_occupancy(stay) > self.total_units


def is_available(
    room: RoomSnapshot,
    bookings: Iterable[BookedStay],
    check_in,
    check_out,
    exclude_booking_id=None,
) -> bool:
    """True when at least one unit of ``room`` is free for every night"""
    stay = make_stay(check_in, check_out)
    return RoomInventory.for_room(room, bookings).can_allocate(stay, exclude_booking_id)
