from typing import Optional, List
from datetime import date
from pydantic import BaseModel, Field, UUID4


# Room — Create (admin POST /rooms)
class RoomCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    capacity: int = Field(ge=1)
    description: Optional[str] = Field(None, max_length=1000)


class RoomCreated(BaseModel):
    id: UUID4


# Room — list item (GET /rooms)
class Room(BaseModel):
    id: UUID4
    name: str
    capacity: int
    description: str

    class Config:
        from_attributes = True


# GET /rooms/{id}/availability
class BusySlot(BaseModel):
    slot: int
    user_id: UUID4
    user_name: Optional[str] = None


class RoomAvailability(BaseModel):
    date: date
    busy: List[bool]
    busy_slots: List[BusySlot]


# GET /rooms/available-now
class AvailableRoom(BaseModel):
    room_id: UUID4
    room_name: str
    capacity: int
    free_slots: List[int]
    next_free_slot: int
