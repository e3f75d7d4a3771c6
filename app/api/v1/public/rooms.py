from uuid import UUID
from typing import List
from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_admin, get_current_principal, get_now
from app.core.exceptions import NotFoundError
from app.models.room import Room
from app.schemas.room import Room as RoomSchema, RoomCreate, RoomCreated, RoomAvailability, AvailableRoom
from app.schemas.user import Principal
from app.utils.availability import available_now, room_availability

router = APIRouter(prefix="/rooms", tags=["Rooms"])


@router.get("/", response_model=List[RoomSchema])
def list_rooms(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Rooms of the caller's tenant."""
    return (
        db.query(Room)
        .filter(Room.tenant_id == principal.tenant_id)
        .order_by(Room.name)
        .all()
    )


@router.post("/", response_model=RoomCreated, status_code=status.HTTP_201_CREATED)
def create_room(
    data: RoomCreate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(get_current_admin),
):
    room = Room(
        tenant_id=admin.tenant_id,
        name=data.name,
        capacity=data.capacity,
        description=data.description or "",
    )
    db.add(room)
    db.commit()
    db.refresh(room)
    return RoomCreated(id=room.id)


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


@router.get("/available-now", response_model=List[AvailableRoom])
def get_available_now(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    now: datetime = Depends(get_now),
):
    """
    Rooms with at least one free slot between the current slot and midnight.
    Fully booked rooms are omitted; an empty list means nothing is free.
    """
    return available_now(db, principal.tenant_id, now)


@router.get("/{room_id}/availability", response_model=RoomAvailability)
def get_room_availability(
    room_id: UUID,
    date: date = Query(..., description="Day to inspect (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """96-slot occupancy for a room on a date, plus who holds each busy slot."""
    room = db.query(Room).filter(
        Room.id == room_id,
        Room.tenant_id == principal.tenant_id,
    ).first()
    if not room:
        raise NotFoundError("Room not found")
    return room_availability(db, room, date)
