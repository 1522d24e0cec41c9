"""
Booking endpoints: creation with conflict detection, availability reads,
and the admin approval workflow.

Notifications and audit entries are published as background tasks after
the booking is committed; their failure never changes the response.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from resource_booking.core.security import get_current_user, require_admin, require_organizer
from resource_booking.db.session import get_db
from resource_booking.models.user import User
from resource_booking.schemas.booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingResponse,
    BookingSlot,
    BookingStatusUpdate,
    SlotGridResponse,
)
from resource_booking.services import booking_service
from resource_booking.services.availability_service import build_slot_grid, list_resource_bookings
from resource_booking.services.cache_service import invalidate_resource_availability
from resource_booking.services.dispatcher import EventDispatcher
from resource_booking.services.event_handlers import get_dispatcher

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking_endpoint(
    booking_data: BookingCreate,
    background_tasks: BackgroundTasks,
    user: User = Depends(require_organizer),
    db: AsyncSession = Depends(get_db),
    dispatcher: EventDispatcher = Depends(get_dispatcher),
):
    """
    Reserve a resource for [start_time, end_time).

    400 if the range is empty or reversed, 404 for an unknown resource,
    409 with code `scheduling_conflict` if an active booking overlaps.
    Auto-approve resources return the booking already `approved`.
    """
    booking, events = await booking_service.create_booking(
        db,
        requester_id=user.id,
        resource_id=booking_data.resource_id,
        start_time=booking_data.start_time,
        end_time=booking_data.end_time,
        event_id=booking_data.event_id,
    )
    await invalidate_resource_availability(booking.resource_id)
    background_tasks.add_task(dispatcher.publish, events)
    return booking


@router.get("/", response_model=list[BookingDetailResponse])
async def list_all_bookings_endpoint(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await booking_service.list_all_bookings(db)


@router.get("/my", response_model=list[BookingDetailResponse])
async def list_my_bookings_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Bookings made by the authenticated user, newest first."""
    return await booking_service.get_user_bookings(db, user.id)


@router.get("/resource/{resource_id}", response_model=list[BookingSlot])
async def resource_bookings_endpoint(
    resource_id: int,
    day: Optional[date] = Query(None, alias="date"),
    db: AsyncSession = Depends(get_db),
):
    """Active bookings of a resource, optionally limited to one day (YYYY-MM-DD)."""
    return await list_resource_bookings(db, resource_id, day)


@router.get("/resource/{resource_id}/slots", response_model=SlotGridResponse)
async def resource_slot_grid_endpoint(
    resource_id: int,
    day: date = Query(..., alias="date"),
    db: AsyncSession = Depends(get_db),
):
    """Half-hour display grid for one day. Approximate; see availability_service."""
    bookings = await list_resource_bookings(db, resource_id, day)
    return SlotGridResponse(resource_id=resource_id, date=day, slots=build_slot_grid(bookings))


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status_endpoint(
    booking_id: int,
    update: BookingStatusUpdate,
    background_tasks: BackgroundTasks,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    dispatcher: EventDispatcher = Depends(get_dispatcher),
):
    booking, events = await booking_service.update_booking_status(
        db,
        booking_id,
        update.status,
        actor_id=admin.id,
        admin_note=update.admin_note,
    )
    await invalidate_resource_availability(booking.resource_id)
    background_tasks.add_task(dispatcher.publish, events)
    return booking
