from collections import defaultdict
from datetime import date, datetime
from typing import Dict, List
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from app.models.booking import Booking
from app.models.room import Room
from app.schemas.room import AvailableRoom, BusySlot, RoomAvailability
from app.utils.slot_grid import build_grid, free_slots, is_valid_slot, slot_for_time


def room_availability(db: Session, room: Room, booking_date: date) -> RoomAvailability:
    """Occupancy grid for a room/date, with the owner of every busy slot."""
    bookings = (
        db.query(Booking)
        .options(joinedload(Booking.user))
        .filter(Booking.room_id == room.id, Booking.booking_date == booking_date)
        .order_by(Booking.slot_index)
        .all()
    )

    busy_slots = [
        BusySlot(
            slot=b.slot_index,
            user_id=b.user_id,
            user_name=b.user.name if b.user else None,
        )
        for b in bookings
        if is_valid_slot(b.slot_index)
    ]

    return RoomAvailability(
        date=booking_date,
        busy=build_grid(bookings),
        busy_slots=busy_slots,
    )


def available_now(db: Session, tenant_id: UUID, now: datetime) -> List[AvailableRoom]:
    """
    Rooms of a tenant that still have a free slot today.

    `now` is wall-clock time in the deployment's reference timezone. Slots
    before the current one are never reported, and rooms booked solid for
    the rest of the day are left out entirely.
    """
    today = now.date()
    current_slot = slot_for_time(now.time())

    rooms = (
        db.query(Room)
        .filter(Room.tenant_id == tenant_id)
        .order_by(Room.name)
        .all()
    )
    if not rooms:
        return []

    todays: Dict[UUID, List[Booking]] = defaultdict(list)
    bookings = (
        db.query(Booking)
        .filter(
            Booking.room_id.in_([r.id for r in rooms]),
            Booking.booking_date == today,
            Booking.slot_index >= current_slot,
        )
        .all()
    )
    for b in bookings:
        todays[b.room_id].append(b)

    available: List[AvailableRoom] = []
    for room in rooms:
        free = free_slots(build_grid(todays[room.id]), from_slot=current_slot)
        if free:
            available.append(AvailableRoom(
                room_id=room.id,
                room_name=room.name,
                capacity=room.capacity,
                free_slots=free,
                next_free_slot=free[0],
            ))

    return available
