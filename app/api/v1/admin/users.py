from uuid import UUID
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_admin
from app.models.user import User, Role
from app.schemas.user import AdminUserListItem, Principal

router = APIRouter(prefix="/admin/users", tags=["Admin - Users"])


@router.get("/", response_model=List[AdminUserListItem])
def list_users(
    db: Session = Depends(get_db),
    admin: Principal = Depends(get_current_admin),
):
    return (
        db.query(User)
        .filter(User.tenant_id == admin.tenant_id)
        .order_by(User.name)
        .all()
    )


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    admin: Principal = Depends(get_current_admin),
):
    """
    Remove a member and their bookings. Admins may remove themselves but not
    another admin.
    """
    user = db.query(User).filter(
        User.id == user_id,
        User.tenant_id == admin.tenant_id,
    ).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.role == Role.ADMIN and user.id != admin.user_id:
        raise HTTPException(status_code=400, detail="Cannot delete another admin")

    db.delete(user)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
