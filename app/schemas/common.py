from typing import Optional
from pydantic import BaseModel


# Error responses, rendered by the AppError handler in app.main
class ErrorResponse(BaseModel):
    error: str
    message: str


class SlotConflictError(ErrorResponse):
    slot: Optional[int] = None
