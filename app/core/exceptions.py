"""
Application errors.

Route handlers and the scheduling helpers in ``app.utils`` raise these;
``app.main`` renders them as ``ErrorResponse`` bodies with the matching
HTTP status, so nothing here knows about FastAPI.
"""

from typing import Optional


class AppError(Exception):
    """Base class for errors that map onto a client-facing HTTP response."""

    status_code = 500
    error = "internal_error"
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(AppError):
    status_code = 400
    error = "bad_request"
    default_message = "Bad request"


class InvalidSlotRange(BadRequestError):
    """Slot range outside 0-95 or start after end. Raised before any DB access."""

    error = "invalid_slot_range"
    default_message = "Invalid slot range"


class NotAuthenticatedError(AppError):
    status_code = 401
    error = "not_authenticated"
    default_message = "Missing or invalid Telegram identity"


class PermissionDeniedError(AppError):
    status_code = 403
    error = "forbidden"
    default_message = "Not permitted"


class NotFoundError(AppError):
    status_code = 404
    error = "not_found"
    default_message = "Not found"


class AlreadyExistsError(AppError):
    status_code = 409
    error = "already_exists"
    default_message = "Already exists"


class SlotConflict(AppError):
    """A requested slot is already booked.

    ``slot`` is the lowest occupied index in the requested range, or ``None``
    when the conflict was only detected by the storage constraint and the
    offending slot could not be determined afterwards.
    """

    status_code = 409
    error = "slot_conflict"
    default_message = "Slot already booked"

    def __init__(self, slot: Optional[int] = None, message: Optional[str] = None):
        self.slot = slot
        super().__init__(message)
