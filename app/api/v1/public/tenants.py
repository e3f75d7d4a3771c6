import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_identity, get_optional_user
from app.core.exceptions import AlreadyExistsError, NotAuthenticatedError, NotFoundError
from app.core.security import get_password_hash, verify_password
from app.models.tenant import Tenant
from app.models.user import User, Role
from app.schemas.tenant import TenantCreate, TenantJoin, TenantMembership

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants", tags=["Tenants"])


def _default_user_name(user_name: Optional[str], telegram_id: int) -> str:
    if user_name and user_name.strip():
        return user_name.strip()
    return f"tg_{telegram_id}"


def _commit_registration(db: Session, telegram_id: int) -> None:
    # A concurrent registration of the same name or telegram id loses on commit
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Registration by telegram user %d hit a unique constraint", telegram_id)
        raise AlreadyExistsError("User or tenant already exists")


@router.post("/", response_model=TenantMembership, status_code=status.HTTP_201_CREATED)
def create_tenant(
    body: TenantCreate,
    db: Session = Depends(get_db),
    telegram_id: int = Depends(get_current_identity),
    existing: Optional[User] = Depends(get_optional_user),
):
    """Register a tenant; the caller becomes its first admin."""
    if existing is not None:
        raise AlreadyExistsError("User already exists")
    if db.query(Tenant).filter(Tenant.name == body.name).first():
        raise AlreadyExistsError("Tenant name already exists")

    tenant = Tenant(
        name=body.name,
        password_hash=get_password_hash(body.password),
        working_start=datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0),
        working_hours=8,
    )
    db.add(tenant)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise AlreadyExistsError("Tenant name already exists")

    user = User(
        telegram_id=telegram_id,
        name=_default_user_name(body.user_name, telegram_id),
        tenant_id=tenant.id,
        role=Role.ADMIN,
    )
    db.add(user)
    _commit_registration(db, telegram_id)

    logger.info("Tenant %s registered by telegram user %d", tenant.id, telegram_id)
    return TenantMembership(tenant_id=tenant.id, user_id=user.id)


@router.post("/join", response_model=TenantMembership)
def join_tenant(
    body: TenantJoin,
    db: Session = Depends(get_db),
    telegram_id: int = Depends(get_current_identity),
    existing: Optional[User] = Depends(get_optional_user),
):
    """Join an existing tenant as a member using its password."""
    tenant = db.query(Tenant).filter(Tenant.id == body.tenant_id).first()
    if not tenant:
        raise NotFoundError("Tenant not found")
    if not verify_password(body.password, tenant.password_hash):
        raise NotAuthenticatedError("Invalid password")
    if existing is not None:
        raise AlreadyExistsError("User already exists")

    user = User(
        telegram_id=telegram_id,
        name=_default_user_name(body.user_name, telegram_id),
        tenant_id=tenant.id,
        role=Role.MEMBER,
    )
    db.add(user)
    _commit_registration(db, telegram_id)
    return TenantMembership(tenant_id=tenant.id, user_id=user.id)
