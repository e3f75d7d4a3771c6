from uuid import UUID
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session, joinedload

from app.db.session import get_db
from app.api.deps import get_current_principal
from app.core.exceptions import NotFoundError
from app.models.booking import Booking
from app.models.room import Room
from app.schemas.booking import BookingCreate, BookingCreated, BookingGroup
from app.schemas.common import ErrorResponse, SlotConflictError
from app.schemas.user import Principal
from app.utils.booking_groups import cancel, group_bookings, reserve, validate_slot_range

router = APIRouter(prefix="/bookings", tags=["Bookings"])


# ---------------------------------------------------------------------------
# POST /bookings — reserve a contiguous slot range
# ---------------------------------------------------------------------------


@router.post(
    "/",
    response_model=BookingCreated,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": SlotConflictError},
    },
)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """
    Reserve slots `start_slot`..`end_slot` (inclusive) of a room on a date.

    - Slots are 15-minute intervals numbered 0-95 from midnight.
    - All slots are created together under one `group_id`, or none are.
    - 409 names the first already-booked slot in the range.
    """
    validate_slot_range(data.start_slot, data.end_slot)

    room = db.query(Room).filter(
        Room.id == data.room_id,
        Room.tenant_id == principal.tenant_id,
    ).first()
    if not room:
        raise NotFoundError("Room not found")

    reservation = reserve(
        db,
        room_id=room.id,
        booking_date=data.date,
        start_slot=data.start_slot,
        end_slot=data.end_slot,
        user_id=principal.user_id,
    )
    return BookingCreated(
        created_count=reservation.created_count,
        group_id=reservation.group_id,
    )


# ---------------------------------------------------------------------------
# GET /bookings/me — the caller's reservations
# ---------------------------------------------------------------------------


@router.get("/me", response_model=List[BookingGroup])
def list_my_bookings(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Return the caller's bookings folded into reservations, newest date first."""
    bookings = (
        db.query(Booking)
        .options(joinedload(Booking.room), joinedload(Booking.user))
        .filter(Booking.user_id == principal.user_id)
        .all()
    )
    return [
        BookingGroup(
            group_id=g.group_id,
            room_id=g.room_id,
            room_name=g.room_name,
            user_id=g.user_id,
            user_name=g.user_name,
            date=g.booking_date,
            start_slot=g.start_slot,
            end_slot=g.end_slot,
            slots=g.slots,
        )
        for g in group_bookings(bookings)
    ]


# ---------------------------------------------------------------------------
# DELETE /bookings/{id}
# ---------------------------------------------------------------------------


@router.delete(
    "/{booking_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_booking(
    booking_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """
    Cancel a reservation. Any booking id of a group removes the whole group.
    Allowed for the booking's owner or a tenant admin.
    """
    cancel(db, booking_id, principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
