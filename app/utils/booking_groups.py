import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidSlotRange, NotFoundError, PermissionDeniedError, SlotConflict
from app.models.booking import Booking
from app.models.room import Room
from app.schemas.user import Principal
from app.utils.slot_grid import LAST_SLOT, build_grid, find_conflict, is_valid_slot

logger = logging.getLogger(__name__)


@dataclass
class Reservation:
    group_id: UUID
    created_count: int


@dataclass
class BookingGroupSummary:
    group_id: UUID
    booking_date: date
    room_id: UUID
    room_name: str
    user_id: UUID
    user_name: str
    slots: List[int] = field(default_factory=list)

    @property
    def start_slot(self) -> int:
        return self.slots[0]

    @property
    def end_slot(self) -> int:
        return self.slots[-1]


def validate_slot_range(start_slot: int, end_slot: int) -> None:
    if not (is_valid_slot(start_slot) and is_valid_slot(end_slot)) or start_slot > end_slot:
        raise InvalidSlotRange(
            f"Slot range must satisfy 0 <= start_slot <= end_slot <= {LAST_SLOT}"
        )


def load_grid(db: Session, room_id: UUID, booking_date: date) -> List[bool]:
    """Materialize the slot grid for a room/date from persisted bookings."""
    bookings = (
        db.query(Booking)
        .filter(Booking.room_id == room_id, Booking.booking_date == booking_date)
        .all()
    )
    return build_grid(bookings)


# ---------------------------------------------------------------------------
# Reserve
# ---------------------------------------------------------------------------


def reserve(
    db: Session,
    room_id: UUID,
    booking_date: date,
    start_slot: int,
    end_slot: int,
    user_id: UUID,
) -> Reservation:
    """
    Book slots [start_slot, end_slot] of a room on a date as one group.

    Either every slot is committed under a fresh group id, or nothing is and
    SlotConflict names the first occupied slot. The caller must already have
    checked that the room belongs to the requester's tenant.
    """
    validate_slot_range(start_slot, end_slot)

    # Serializes reservations for this room until commit (no-op on SQLite)
    db.query(Room.id).filter(Room.id == room_id).with_for_update().first()

    grid = load_grid(db, room_id, booking_date)
    conflict = find_conflict(grid, start_slot, end_slot)
    if conflict is not None:
        db.rollback()
        logger.info("Slot %d of room %s on %s already booked", conflict, room_id, booking_date)
        raise SlotConflict(slot=conflict)

    group_id = uuid.uuid4()
    bookings = [
        Booking(
            user_id=user_id,
            room_id=room_id,
            booking_date=booking_date,
            slot_index=slot,
            group_id=group_id,
        )
        for slot in range(start_slot, end_slot + 1)
    ]

    db.add_all(bookings)
    try:
        db.commit()
    except IntegrityError:
        # Another request committed an overlapping slot after our snapshot
        db.rollback()
        conflict = find_conflict(load_grid(db, room_id, booking_date), start_slot, end_slot)
        logger.warning(
            "Unique constraint hit reserving room %s on %s, slots %d-%d (conflict at %s)",
            room_id, booking_date, start_slot, end_slot, conflict,
        )
        raise SlotConflict(slot=conflict)

    logger.info(
        "Reserved room %s on %s, slots %d-%d as group %s",
        room_id, booking_date, start_slot, end_slot, group_id,
    )
    return Reservation(group_id=group_id, created_count=len(bookings))


# ---------------------------------------------------------------------------
# Cancel
# ---------------------------------------------------------------------------


def cancel(db: Session, booking_id: UUID, principal: Principal) -> int:
    """
    Delete the reservation a booking belongs to and return the rows removed.

    Bookings outside the principal's tenant are reported as not found. Only
    the owner or a tenant admin may cancel; a grouped booking takes its whole
    group with it.
    """
    booking = (
        db.query(Booking)
        .join(Room, Room.id == Booking.room_id)
        .filter(Booking.id == booking_id, Room.tenant_id == principal.tenant_id)
        .first()
    )
    if not booking:
        raise NotFoundError("Booking not found")
    if booking.user_id != principal.user_id and not principal.is_admin:
        raise PermissionDeniedError("Only the owner or an admin can cancel this booking")

    if booking.group_id is not None:
        removed = (
            db.query(Booking)
            .filter(Booking.group_id == booking.group_id)
            .delete(synchronize_session="fetch")
        )
    else:
        db.delete(booking)
        removed = 1

    db.commit()
    logger.info("Cancelled %d slot(s) via booking %s", removed, booking_id)
    return removed


# ---------------------------------------------------------------------------
# Grouping for listings
# ---------------------------------------------------------------------------


def group_bookings(bookings: Iterable[Booking]) -> List[BookingGroupSummary]:
    """
    Fold booking rows into reservations, newest date first.

    Ungrouped bookings stand alone under their own id. Expects room and user
    relationships to be loaded.
    """
    groups: Dict[Tuple[UUID, date, UUID, UUID], BookingGroupSummary] = {}
    for b in bookings:
        group_id = b.group_id or b.id
        key = (group_id, b.booking_date, b.room_id, b.user_id)
        summary = groups.get(key)
        if summary is None:
            summary = BookingGroupSummary(
                group_id=group_id,
                booking_date=b.booking_date,
                room_id=b.room_id,
                room_name=b.room.name if b.room else "",
                user_id=b.user_id,
                user_name=b.user.name if b.user else "",
            )
            groups[key] = summary
        summary.slots.append(b.slot_index)

    for summary in groups.values():
        summary.slots.sort()

    return sorted(
        groups.values(),
        key=lambda g: (-g.booking_date.toordinal(), g.start_slot),
    )
