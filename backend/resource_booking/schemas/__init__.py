from resource_booking.schemas.user import UserCreate, UserResponse, UserLogin, Token
from resource_booking.schemas.resource import ResourceCreate, ResourceUpdate, ResourceResponse
from resource_booking.schemas.booking import (
    BookingCreate, BookingStatusUpdate, BookingResponse, BookingDetailResponse,
    BookingSlot, SlotGridResponse,
)
from resource_booking.schemas.notification import NotificationResponse, ActivityLogResponse

__all__ = [
    "UserCreate", "UserResponse", "UserLogin", "Token",
    "ResourceCreate", "ResourceUpdate", "ResourceResponse",
    "BookingCreate", "BookingStatusUpdate", "BookingResponse", "BookingDetailResponse",
    "BookingSlot", "SlotGridResponse",
    "NotificationResponse", "ActivityLogResponse",
]
