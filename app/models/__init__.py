from app.models.tenant import Tenant
from app.models.user import User, Role
from app.models.room import Room
from app.models.booking import Booking
