"""
Booking lifecycle manager: creation and status transitions.

CONCURRENCY STRATEGY: Optimistic Locking on the Resource Row
============================================================

Problem:
  Two organizers request overlapping slots on the same room at the same
  moment. Both run the conflict check, both see a free range, both insert.
  Result: a double-booked room.

  The check (SELECT) and the act (INSERT) are two statements; nothing in a
  plain READ COMMITTED transaction stops another writer slipping in between.

Solution:
  Every booking write for a resource also bumps that resource's `version`:

  1. Read the resource and its current version
  2. Run the conflict check
  3. UPDATE resources SET version = version + 1
     WHERE id = :resource_id AND version = :read_version
  4. If rows_affected == 0, another booking for this resource committed
     since step 1 -> rollback, go back to step 1 (its booking is now
     visible to the conflict check)
  5. INSERT the booking and commit

  Writers for the same resource are serialised by the row lock taken in
  step 3, so step 2 always sees every committed competitor. Writers for
  different resources never touch each other.

  On PostgreSQL the exclusion constraint `ex_bookings_no_overlap` is the
  final safety net; an IntegrityError from it is reported as the same
  scheduling conflict.

Status transitions:
  pending  -> approved | rejected | cancelled
  approved -> cancelled
  rejected, cancelled are terminal.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from resource_booking.core.config import get_settings
from resource_booking.core.exceptions import (
    BookingNotFound,
    InvalidRange,
    InvalidStatusTransition,
    ResourceNotFound,
    ResourceUnavailable,
    SchedulingConflict,
)
from resource_booking.core.logging import get_logger
from resource_booking.core.metrics import (
    booking_latency,
    db_retries,
    record_booking_attempt,
    record_status_change,
)
from resource_booking.models.booking import Booking, BookingStatus
from resource_booking.models.resource import Resource
from resource_booking.services.conflict_checker import find_conflict
from resource_booking.services.dispatcher import (
    BookingCreated,
    BookingStatusChanged,
    DomainEvent,
)

logger = get_logger(__name__)
settings = get_settings()

# PostgreSQL exclusion constraint created by migration 001
OVERLAP_CONSTRAINT = "ex_bookings_no_overlap"

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.APPROVED, BookingStatus.REJECTED, BookingStatus.CANCELLED}
    ),
    BookingStatus.APPROVED: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.REJECTED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


def initial_status(resource: Resource) -> BookingStatus:
    """Decided once, at creation. Never re-evaluated."""
    return BookingStatus.APPROVED if resource.auto_approve else BookingStatus.PENDING


def can_transition(current: BookingStatus, new: BookingStatus) -> bool:
    return new in ALLOWED_TRANSITIONS[BookingStatus(current)]


async def _load_resource_fresh(db: AsyncSession, resource_id: int) -> Resource:
    # populate_existing: the version must come from the database, not from
    # an object already sitting in this session's identity map
    result = await db.execute(
        select(Resource)
        .where(Resource.id == resource_id)
        .execution_options(populate_existing=True)
    )
    resource = result.scalar_one_or_none()
    if resource is None:
        raise ResourceNotFound(f"Resource {resource_id} not found")
    return resource


async def create_booking(
    db: AsyncSession,
    requester_id: int,
    resource_id: int,
    start_time: datetime,
    end_time: datetime,
    event_id: Optional[int] = None,
) -> tuple[Booking, list[DomainEvent]]:
    """
    Create a booking for `resource_id` over [start_time, end_time).

    Returns the committed booking and the domain events to publish.
    Raises InvalidRange, ResourceNotFound, ResourceUnavailable or
    SchedulingConflict; nothing is persisted in any of those cases.
    """
    if start_time >= end_time:
        record_booking_attempt("invalid")
        logger.warning(
            "booking_invalid_range",
            resource_id=resource_id,
            start_time=start_time.isoformat(),
            end_time=end_time.isoformat(),
        )
        raise InvalidRange()

    max_attempts = settings.BOOKING_MAX_RETRIES

    with booking_latency.time():
        for attempt in range(1, max_attempts + 1):
            resource = await _load_resource_fresh(db, resource_id)

            if not resource.is_available:
                record_booking_attempt("conflict")
                logger.warning("booking_resource_unavailable", resource_id=resource_id)
                raise ResourceUnavailable(f"Resource {resource.name} is not available for booking")

            conflict = await find_conflict(db, resource_id, start_time, end_time)
            if conflict is not None:
                record_booking_attempt("conflict")
                logger.warning(
                    "booking_conflict",
                    resource_id=resource_id,
                    requested_start=start_time.isoformat(),
                    requested_end=end_time.isoformat(),
                    conflicting_booking_id=conflict.id,
                )
                raise SchedulingConflict()

            status = initial_status(resource)
            resource_name = resource.name

            # Optimistic lock: claim the resource for this write
            current_version = resource.version
            update_result = await db.execute(
                update(Resource)
                .where(Resource.id == resource_id, Resource.version == current_version)
                .values(version=Resource.version + 1)
                .execution_options(synchronize_session=False)
            )

            if update_result.rowcount == 0:
                db_retries.inc()
                logger.info(
                    "booking_retry",
                    resource_id=resource_id,
                    attempt=attempt,
                    reason="version_conflict",
                )
                await db.rollback()
                if attempt == max_attempts:
                    record_booking_attempt("conflict")
                    raise SchedulingConflict(
                        "Resource is being booked by someone else right now. Please try again."
                    )
                continue

            booking = Booking(
                resource_id=resource_id,
                requester_id=requester_id,
                event_id=event_id,
                start_time=start_time,
                end_time=end_time,
                status=status.value,
            )
            db.add(booking)
            try:
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                if OVERLAP_CONSTRAINT not in str(e.orig):
                    record_booking_attempt("error")
                    raise
                record_booking_attempt("conflict")
                logger.warning("booking_constraint_conflict", resource_id=resource_id, error=str(e))
                raise SchedulingConflict()
            await db.refresh(booking)

            record_booking_attempt("success")
            logger.info(
                "booking_created",
                booking_id=booking.id,
                resource_id=resource_id,
                requester_id=requester_id,
                status=booking.status,
                attempt=attempt,
            )
            event = BookingCreated(
                booking_id=booking.id,
                resource_id=resource_id,
                resource_name=resource_name,
                requester_id=requester_id,
                status=booking.status,
            )
            return booking, [event]

    record_booking_attempt("error")
    raise SchedulingConflict()


async def get_booking(db: AsyncSession, booking_id: int) -> Booking:
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise BookingNotFound(f"Booking {booking_id} not found")
    return booking


async def update_booking_status(
    db: AsyncSession,
    booking_id: int,
    new_status: BookingStatus,
    actor_id: int,
    admin_note: Optional[str] = None,
) -> tuple[Booking, list[DomainEvent]]:
    """
    Apply an administrative status change.

    Approving a pending booking re-runs the conflict check against every
    other active booking on the resource. Creation already guarantees there
    is no overlap, so this only guards rows that predate that guarantee.
    """
    new_status = BookingStatus(new_status)
    booking = await get_booking(db, booking_id)
    current = BookingStatus(booking.status)

    if not can_transition(current, new_status):
        logger.warning(
            "booking_invalid_transition",
            booking_id=booking_id,
            current=current.value,
            requested=new_status.value,
        )
        raise InvalidStatusTransition(
            f"Cannot change booking status from {current.value} to {new_status.value}"
        )

    if new_status == BookingStatus.APPROVED:
        conflict = await find_conflict(
            db,
            booking.resource_id,
            booking.start_time,
            booking.end_time,
            exclude_booking_id=booking.id,
        )
        if conflict is not None:
            logger.warning(
                "booking_approval_conflict",
                booking_id=booking_id,
                conflicting_booking_id=conflict.id,
            )
            raise SchedulingConflict(
                f"Booking overlaps booking {conflict.id} on the same resource"
            )

    resource_name = (
        booking.resource.name if booking.resource is not None else f"resource {booking.resource_id}"
    )

    booking.status = new_status.value
    if admin_note is not None:
        booking.admin_note = admin_note
    await db.commit()
    await db.refresh(booking)

    record_status_change(new_status.value)
    logger.info(
        "booking_status_updated",
        booking_id=booking.id,
        previous=current.value,
        status=booking.status,
        actor_id=actor_id,
    )
    event = BookingStatusChanged(
        booking_id=booking.id,
        resource_id=booking.resource_id,
        resource_name=resource_name,
        requester_id=booking.requester_id,
        actor_id=actor_id,
        status=booking.status,
        admin_note=booking.admin_note,
    )
    return booking, [event]


async def get_user_bookings(db: AsyncSession, user_id: int) -> list[Booking]:
    """Get all bookings for a user, newest first."""
    result = await db.execute(
        select(Booking)
        .where(Booking.requester_id == user_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def list_all_bookings(db: AsyncSession) -> list[Booking]:
    result = await db.execute(
        select(Booking)
        .order_by(Booking.start_time.desc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())
