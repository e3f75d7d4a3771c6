from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_admin
from app.core.security import get_password_hash
from app.models.tenant import Tenant
from app.schemas.tenant import PasswordChange, WorkingHours, WorkingHoursUpdate
from app.schemas.user import Principal

router = APIRouter(prefix="/admin/tenant", tags=["Admin - Tenant"])


def _load_tenant(db: Session, admin: Principal) -> Tenant:
    tenant = db.query(Tenant).filter(Tenant.id == admin.tenant_id).first()
    if not tenant:
        raise HTTPException(status_code=404, detail="Tenant not found")
    return tenant


@router.put("/password", status_code=status.HTTP_204_NO_CONTENT)
def change_password(
    body: PasswordChange,
    db: Session = Depends(get_db),
    admin: Principal = Depends(get_current_admin),
):
    tenant = _load_tenant(db, admin)
    tenant.password_hash = get_password_hash(body.new_password)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/working-hours", response_model=WorkingHours)
def set_working_hours(
    body: WorkingHoursUpdate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(get_current_admin),
):
    """Set the tenant's working day: a start time (today's date) and a length in hours."""
    tenant = _load_tenant(db, admin)
    today = datetime.now(timezone.utc).date()
    tenant.working_start = datetime.combine(today, body.start_time, tzinfo=timezone.utc)
    tenant.working_hours = body.hours
    db.commit()
    db.refresh(tenant)
    return WorkingHours(working_start=tenant.working_start, working_hours=tenant.working_hours)
