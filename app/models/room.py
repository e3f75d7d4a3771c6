import uuid
from sqlalchemy import Column, String, Integer, Text, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.db.session import Base

class Room(Base):
    __tablename__ = "rooms"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    capacity = Column(Integer, nullable=False)
    description = Column(Text, nullable=False, default="")

    # Relationships
    tenant = relationship("Tenant", back_populates="rooms")
    # Slot occupancy is derived per date from bookings, never stored on the room
    bookings = relationship("Booking", back_populates="room", cascade="all, delete-orphan")
