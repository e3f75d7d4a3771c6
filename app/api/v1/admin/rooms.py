import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_admin
from app.models.room import Room
from app.schemas.user import Principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/rooms", tags=["Admin - Rooms"])


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_room(
    room_id: UUID,
    db: Session = Depends(get_db),
    admin: Principal = Depends(get_current_admin),
):
    """Delete a room together with all of its bookings."""
    room = db.query(Room).filter(
        Room.id == room_id,
        Room.tenant_id == admin.tenant_id,
    ).first()
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")

    db.delete(room)
    db.commit()
    logger.info("Room %s deleted by %s", room_id, admin.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
