"""
Wiring between booking domain events and their side effects.

BookingCreated       -> activity log; requester notification when auto-approved
BookingStatusChanged -> requester notification; activity log
"""

from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from resource_booking.db.session import AsyncSessionLocal
from resource_booking.models.booking import BookingStatus
from resource_booking.models.notification import NotificationSeverity
from resource_booking.services.activity_log_service import ActivityLogService
from resource_booking.services.dispatcher import (
    BookingCreated,
    BookingStatusChanged,
    EventDispatcher,
)
from resource_booking.services.notification_service import NotificationService

_STATUS_SEVERITY = {
    BookingStatus.APPROVED.value: NotificationSeverity.SUCCESS,
    BookingStatus.REJECTED.value: NotificationSeverity.ERROR,
    BookingStatus.CANCELLED.value: NotificationSeverity.WARNING,
}


def build_dispatcher(session_factory: async_sessionmaker) -> EventDispatcher:
    notifications = NotificationService(session_factory)
    activity = ActivityLogService(session_factory)
    dispatcher = EventDispatcher()

    async def log_booking_created(event: BookingCreated) -> None:
        await activity.log(
            event.requester_id,
            "BOOKING_CREATED",
            "Booking",
            event.booking_id,
            f"Created booking for resource {event.resource_name} (Status: {event.status})",
        )

    async def notify_auto_approval(event: BookingCreated) -> None:
        if event.status != BookingStatus.APPROVED.value:
            return
        await notifications.notify(
            event.requester_id,
            "Booking Approved",
            f"Your booking for {event.resource_name} has been auto-approved.",
            NotificationSeverity.SUCCESS,
        )

    async def notify_status_change(event: BookingStatusChanged) -> None:
        message = f"Your booking for {event.resource_name} has been {event.status}."
        if event.admin_note:
            message = f"{message} Note: {event.admin_note}"
        await notifications.notify(
            event.requester_id,
            f"Booking {event.status}",
            message,
            _STATUS_SEVERITY.get(event.status, NotificationSeverity.INFO),
        )

    async def log_status_change(event: BookingStatusChanged) -> None:
        await activity.log(
            event.actor_id,
            f"BOOKING_{event.status.upper()}",
            "Booking",
            event.booking_id,
            f"Booking for {event.resource_name} {event.status}",
        )

    dispatcher.subscribe(BookingCreated, log_booking_created)
    dispatcher.subscribe(BookingCreated, notify_auto_approval)
    dispatcher.subscribe(BookingStatusChanged, notify_status_change)
    dispatcher.subscribe(BookingStatusChanged, log_status_change)
    return dispatcher


_dispatcher: Optional[EventDispatcher] = None


def get_dispatcher() -> EventDispatcher:
    """FastAPI dependency returning the process-wide dispatcher."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = build_dispatcher(AsyncSessionLocal)
    return _dispatcher
