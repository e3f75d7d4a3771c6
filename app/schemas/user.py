from typing import Optional
from pydantic import BaseModel, UUID4

from app.models.user import Role


# Resolved caller for the rest of the request (not persisted)
class Principal(BaseModel):
    user_id: UUID4
    telegram_id: int
    name: str
    tenant_id: UUID4
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


# Compact user for /me and admin listings
class UserSummary(BaseModel):
    id: UUID4
    name: str
    role: Role

    class Config:
        from_attributes = True


class AdminUserListItem(UserSummary):
    telegram_id: int


class TenantSummary(BaseModel):
    id: UUID4
    name: str

    class Config:
        from_attributes = True


# GET /me
class MeResponse(BaseModel):
    has_account: bool
    user: Optional[UserSummary] = None
    tenant: Optional[TenantSummary] = None
