from app.schemas.common import ErrorResponse, SlotConflictError
from app.schemas.user import Principal, UserSummary, AdminUserListItem, TenantSummary, MeResponse
from app.schemas.tenant import (
    TenantCreate, TenantJoin, TenantMembership,
    PasswordChange, WorkingHoursUpdate, WorkingHours,
)
from app.schemas.room import Room, RoomCreate, RoomCreated, BusySlot, RoomAvailability, AvailableRoom
from app.schemas.booking import BookingCreate, BookingCreated, BookingGroup, AdminBookingGroup
