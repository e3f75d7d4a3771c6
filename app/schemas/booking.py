from typing import List
from datetime import date
from pydantic import BaseModel, UUID4


# Booking — Create (POST /bookings)
# Slot range is checked by the allocator: a bad range is a 400, not a 422.
class BookingCreate(BaseModel):
    room_id: UUID4
    date: date
    start_slot: int
    end_slot: int


class BookingCreated(BaseModel):
    created_count: int
    group_id: UUID4


# One reservation (all slots of a group) — GET /bookings/me
class BookingGroup(BaseModel):
    group_id: UUID4
    room_id: UUID4
    room_name: str
    user_id: UUID4
    user_name: str
    date: date
    start_slot: int
    end_slot: int
    slots: List[int]


# Admin view — GET /admin/bookings
class AdminBookingGroup(BaseModel):
    group_id: UUID4
    room_id: UUID4
    room_name: str
    user_id: UUID4
    user_name: str
    date: date
    start_slot: int
    end_slot: int
    slot_count: int
