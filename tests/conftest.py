import os

# Must be set before the app modules read settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TELEGRAM_BOT_TOKEN"] = ""
os.environ["ALLOW_DEBUG_IDENTITY"] = "true"
os.environ["TIMEZONE"] = "UTC"

import pytest
from fastapi.testclient import TestClient

from app.core.security import get_password_hash
from app.db.base import Base
from app.db.session import engine, SessionLocal
from app.main import app
from app.models.booking import Booking
from app.models.room import Room
from app.models.tenant import Tenant
from app.models.user import User, Role
from app.schemas.user import Principal

TENANT_PASSWORD = "s3cret"


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_tenant(db):
    def _make(name="Acme"):
        tenant = Tenant(name=name, password_hash=get_password_hash(TENANT_PASSWORD))
        db.add(tenant)
        db.commit()
        db.refresh(tenant)
        return tenant
    return _make


@pytest.fixture
def make_user(db):
    def _make(tenant, telegram_id, role=Role.MEMBER, name=None):
        user = User(
            telegram_id=telegram_id,
            name=name or f"user{telegram_id}",
            tenant_id=tenant.id,
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_room(db):
    def _make(tenant, name="Blue", capacity=6):
        room = Room(tenant_id=tenant.id, name=name, capacity=capacity, description="")
        db.add(room)
        db.commit()
        db.refresh(room)
        return room
    return _make


@pytest.fixture
def add_bookings(db):
    """Insert bookings for the given slots directly, bypassing the allocator."""
    def _add(room, user, booking_date, slots, group_id=None):
        rows = [
            Booking(
                user_id=user.id,
                room_id=room.id,
                booking_date=booking_date,
                slot_index=slot,
                group_id=group_id,
            )
            for slot in slots
        ]
        db.add_all(rows)
        db.commit()
        return [r.id for r in rows]
    return _add


def principal_for(user: User) -> Principal:
    return Principal(
        user_id=user.id,
        telegram_id=user.telegram_id,
        name=user.name,
        tenant_id=user.tenant_id,
        role=user.role,
    )


def auth(telegram_id: int) -> dict:
    return {"X-Telegram-User-Id": str(telegram_id)}
