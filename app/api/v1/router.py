from fastapi import APIRouter

# Public — identity & tenant registration
from app.api.v1.public.me import router as me_router
from app.api.v1.public.tenants import router as tenants_router

# Public — rooms & availability
from app.api.v1.public.rooms import router as rooms_router

# Public — bookings
from app.api.v1.public.bookings import router as bookings_router

# Admin
from app.api.v1.admin.rooms import router as admin_rooms_router
from app.api.v1.admin.users import router as admin_users_router
from app.api.v1.admin.bookings import router as admin_bookings_router
from app.api.v1.admin.tenant import router as admin_tenant_router

api_router = APIRouter()

# --- Public: identity ---
api_router.include_router(me_router)
api_router.include_router(tenants_router)

# --- Public: rooms & availability ---
api_router.include_router(rooms_router)

# --- Public: bookings ---
api_router.include_router(bookings_router)

# --- Admin ---
api_router.include_router(admin_rooms_router)
api_router.include_router(admin_users_router)
api_router.include_router(admin_bookings_router)
api_router.include_router(admin_tenant_router)
