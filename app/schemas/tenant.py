from typing import Optional
from datetime import datetime, time
from pydantic import BaseModel, Field, UUID4


# Tenant — Create (POST /tenants)
class TenantCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    password: str = Field(min_length=1)
    user_name: Optional[str] = None


# Tenant — Join (POST /tenants/join)
class TenantJoin(BaseModel):
    tenant_id: UUID4
    password: str
    user_name: Optional[str] = None


class TenantMembership(BaseModel):
    tenant_id: UUID4
    user_id: UUID4


# Admin — PUT /admin/tenant/password
class PasswordChange(BaseModel):
    new_password: str = Field(min_length=1)


# Admin — PUT /admin/tenant/working-hours
class WorkingHoursUpdate(BaseModel):
    start_time: time
    hours: int = Field(ge=1, le=24)


class WorkingHours(BaseModel):
    working_start: datetime
    working_hours: int
