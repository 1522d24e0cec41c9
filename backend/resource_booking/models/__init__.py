from resource_booking.models.user import User, UserRole
from resource_booking.models.resource import Resource, ResourceType
from resource_booking.models.booking import Booking, BookingStatus
from resource_booking.models.notification import Notification, NotificationSeverity
from resource_booking.models.activity_log import ActivityLog

__all__ = [
    "User", "UserRole",
    "Resource", "ResourceType",
    "Booking", "BookingStatus",
    "Notification", "NotificationSeverity",
    "ActivityLog",
]
