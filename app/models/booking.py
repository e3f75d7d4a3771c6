import uuid
from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.db.session import Base

class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        # Last-resort guard against two reservations racing for one slot
        UniqueConstraint("room_id", "booking_date", "slot_index", name="uq_bookings_room_date_slot"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    room_id = Column(UUID(as_uuid=True), ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    booking_date = Column(Date, nullable=False)
    slot_index = Column(Integer, nullable=False) # 0-95, 15-minute slots from midnight
    group_id = Column(UUID(as_uuid=True), nullable=True, index=True) # shared by all slots of one reservation
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="bookings")
    room = relationship("Room", back_populates="bookings")
