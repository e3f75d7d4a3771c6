from uuid import UUID
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session, joinedload

from app.db.session import get_db
from app.api.deps import get_current_admin
from app.models.booking import Booking
from app.models.room import Room
from app.schemas.booking import AdminBookingGroup
from app.schemas.user import Principal
from app.utils.booking_groups import cancel, group_bookings

router = APIRouter(prefix="/admin/bookings", tags=["Admin - Bookings"])


@router.get("/", response_model=List[AdminBookingGroup])
def list_all_bookings(
    db: Session = Depends(get_db),
    admin: Principal = Depends(get_current_admin),
):
    """Every reservation in the admin's tenant, newest date first."""
    bookings = (
        db.query(Booking)
        .join(Room, Room.id == Booking.room_id)
        .options(joinedload(Booking.room), joinedload(Booking.user))
        .filter(Room.tenant_id == admin.tenant_id)
        .all()
    )
    return [
        AdminBookingGroup(
            group_id=g.group_id,
            room_id=g.room_id,
            room_name=g.room_name,
            user_id=g.user_id,
            user_name=g.user_name,
            date=g.booking_date,
            start_slot=g.start_slot,
            end_slot=g.end_slot,
            slot_count=len(g.slots),
        )
        for g in group_bookings(bookings)
    ]


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(
    booking_id: UUID,
    db: Session = Depends(get_db),
    admin: Principal = Depends(get_current_admin),
):
    """Cancel any reservation in the tenant (the whole group)."""
    cancel(db, booking_id, admin)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
