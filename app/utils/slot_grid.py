from datetime import time
from typing import Iterable, List, Optional

from app.models.booking import Booking

SLOT_MINUTES = 15
SLOTS_PER_DAY = 24 * 60 // SLOT_MINUTES  # 96
LAST_SLOT = SLOTS_PER_DAY - 1


def is_valid_slot(slot: int) -> bool:
    return 0 <= slot <= LAST_SLOT


def build_grid(bookings: Iterable[Booking]) -> List[bool]:
    """
    Occupancy for one room/date: grid[i] is True when slot i is booked.

    Out-of-range slot indices are ignored rather than rejected.
    """
    grid = [False] * SLOTS_PER_DAY
    for booking in bookings:
        if is_valid_slot(booking.slot_index):
            grid[booking.slot_index] = True
    return grid


def find_conflict(grid: List[bool], start_slot: int, end_slot: int) -> Optional[int]:
    """Return the first occupied slot in [start_slot, end_slot], or None if all free."""
    for slot in range(start_slot, end_slot + 1):
        if grid[slot]:
            return slot
    return None


def free_slots(grid: List[bool], from_slot: int = 0) -> List[int]:
    return [slot for slot in range(from_slot, SLOTS_PER_DAY) if not grid[slot]]


def slot_for_time(t: time) -> int:
    """Slot containing the given wall-clock time. Seconds are truncated."""
    return t.hour * 4 + t.minute // SLOT_MINUTES
