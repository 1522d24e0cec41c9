"""
Domain errors for the booking engine.

Each error carries the HTTP status it maps to and a stable machine-readable
code. Clients key their UX on the code: `scheduling_conflict` means "pick
another slot", which is different from a generic validation failure.
"""

from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse


class BookingServiceError(Exception):
    status_code: int = 500
    code: str = "booking_error"
    detail: str = "Booking operation failed"

    def __init__(self, detail: Optional[str] = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class InvalidRange(BookingServiceError):
    status_code = 400
    code = "invalid_range"
    detail = "Start time must be before end time"


class InvalidStatusTransition(BookingServiceError):
    status_code = 400
    code = "invalid_status_transition"
    detail = "Booking status cannot be changed this way"


class ResourceNotFound(BookingServiceError):
    status_code = 404
    code = "resource_not_found"
    detail = "Resource not found"


class BookingNotFound(BookingServiceError):
    status_code = 404
    code = "booking_not_found"
    detail = "Booking not found"


class NotificationNotFound(BookingServiceError):
    status_code = 404
    code = "notification_not_found"
    detail = "Notification not found"


class SchedulingConflict(BookingServiceError):
    status_code = 409
    code = "scheduling_conflict"
    detail = "Resource is already booked for this time slot"


class ResourceUnavailable(BookingServiceError):
    status_code = 409
    code = "resource_unavailable"
    detail = "Resource is not available for booking"


class DuplicateResource(BookingServiceError):
    status_code = 409
    code = "duplicate_resource"
    detail = "A resource with this name already exists"


async def booking_error_handler(request: Request, exc: BookingServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
    )
