"""
Conflict checker: the authoritative test for whether a time range is free.

OVERLAP SEMANTICS
=================

Intervals are half-open: [start, end). Two ranges overlap iff

    start_a < end_b AND start_b < end_a

Both inequalities are strict, so a booking ending at 10:00 and another
starting at 10:00 do not conflict. The test is symmetric in its arguments.

Only bookings in the conflict universe (pending, approved) are considered.
Rejected and cancelled bookings never block a new request.

This module does not validate range ordering; callers must ensure
start < end before asking. It never writes.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from resource_booking.models.booking import Booking, ACTIVE_STATUSES


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open interval overlap test."""
    return start_a < end_b and start_b < end_a


def _conflict_query(
    resource_id: int,
    start_time: datetime,
    end_time: datetime,
    exclude_booking_id: Optional[int] = None,
):
    query = select(Booking).where(
        Booking.resource_id == resource_id,
        Booking.status.in_(ACTIVE_STATUSES),
        # Same predicate as overlaps(), pushed down to the database
        Booking.start_time < end_time,
        Booking.end_time > start_time,
    )
    if exclude_booking_id is not None:
        query = query.where(Booking.id != exclude_booking_id)
    return query


async def find_conflict(
    db: AsyncSession,
    resource_id: int,
    start_time: datetime,
    end_time: datetime,
    exclude_booking_id: Optional[int] = None,
) -> Optional[Booking]:
    """Return one active booking overlapping the range, or None."""
    query = _conflict_query(resource_id, start_time, end_time, exclude_booking_id)
    result = await db.execute(query.order_by(Booking.start_time).limit(1))
    return result.scalar_one_or_none()


async def is_available(
    db: AsyncSession,
    resource_id: int,
    start_time: datetime,
    end_time: datetime,
    exclude_booking_id: Optional[int] = None,
) -> bool:
    """True iff no pending/approved booking on the resource overlaps the range."""
    conflict = await find_conflict(db, resource_id, start_time, end_time, exclude_booking_id)
    return conflict is None
