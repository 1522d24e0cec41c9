"""
Availability queries for calendar-style views.

Two functions live here and they must not be confused:

- list_resource_bookings: exact intervals of the active bookings that touch
  a day. Safe to build UI on.
- build_slot_grid: a coarse half-hour grid that marks a slot as booked when
  some booking STARTS in the same hour. It is a display approximation only;
  a booking from 09:15 to 11:00 marks 09:00 and 09:30 but not 10:00.

Neither is the booking guard. Whether a range can be booked is decided by
conflict_checker.is_available at write time, nothing else.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from resource_booking.core.logging import get_logger
from resource_booking.models.booking import Booking, ACTIVE_STATUSES
from resource_booking.schemas.booking import BookingSlot, SlotStatus
from resource_booking.services.cache_service import (
    get_cached_availability,
    set_cached_availability,
)
from resource_booking.services.resource_service import get_resource

logger = get_logger(__name__)

SLOT_GRID_FIRST_HOUR = 9
SLOT_GRID_LAST_HOUR = 18
SLOT_GRID_MINUTES = (0, 30)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Inclusive UTC bounds of a calendar day: 00:00:00 .. 23:59:59.999999."""
    start_of_day = datetime.combine(day, time.min, tzinfo=timezone.utc)
    end_of_day = start_of_day + timedelta(days=1) - timedelta(microseconds=1)
    return start_of_day, end_of_day


async def list_resource_bookings(
    db: AsyncSession,
    resource_id: int,
    day: Optional[date] = None,
) -> list[BookingSlot]:
    """
    Active (pending/approved) bookings of a resource, ordered by start.

    With `day`, only bookings that start that day, end that day, or span
    it entirely. Raises ResourceNotFound for an unknown resource.
    """
    await get_resource(db, resource_id)

    day_key = day.isoformat() if day else None
    cached = await get_cached_availability(resource_id, day_key)
    if cached is not None:
        return [BookingSlot.model_validate(item) for item in cached]

    query = select(Booking).where(
        Booking.resource_id == resource_id,
        Booking.status.in_(ACTIVE_STATUSES),
    )
    if day is not None:
        start_of_day, end_of_day = day_bounds(day)
        query = query.where(
            Booking.start_time <= end_of_day,
            Booking.end_time >= start_of_day,
        )

    result = await db.execute(query.order_by(Booking.start_time.asc()))
    slots = [BookingSlot.model_validate(b) for b in result.scalars().all()]

    await set_cached_availability(
        resource_id, day_key, [s.model_dump(mode="json") for s in slots]
    )
    logger.debug("availability_listed", resource_id=resource_id, day=day_key, count=len(slots))
    return slots


def _hour_utc(value: datetime) -> int:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.hour


def build_slot_grid(bookings: Iterable[BookingSlot]) -> list[SlotStatus]:
    """Half-hour display grid 09:00 .. 18:30, matched on booking start hour."""
    taken_hours = {_hour_utc(b.start_time) for b in bookings}
    return [
        SlotStatus(time=f"{hour}:{minute:02d}", booked=hour in taken_hours)
        for hour in range(SLOT_GRID_FIRST_HOUR, SLOT_GRID_LAST_HOUR + 1)
        for minute in SLOT_GRID_MINUTES
    ]
