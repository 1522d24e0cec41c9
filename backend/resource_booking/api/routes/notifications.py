"""
Notification inbox, the admin activity log and per-target audit history.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from resource_booking.core.security import get_current_user, require_admin
from resource_booking.db.session import get_db
from resource_booking.models.user import User
from resource_booking.schemas.notification import ActivityLogResponse, NotificationResponse
from resource_booking.services.activity_log_service import (
    list_activity_logs,
    list_activity_logs_for_target,
)
from resource_booking.services.notification_service import get_user_notifications, mark_as_read

router = APIRouter(tags=["Notifications"])


@router.get("/notifications", response_model=list[NotificationResponse])
async def my_notifications_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_user_notifications(db, user.id)


@router.patch("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_read_endpoint(
    notification_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await mark_as_read(db, notification_id, user.id)


@router.get("/activity-logs", response_model=list[ActivityLogResponse])
async def activity_logs_endpoint(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Latest 100 audit entries."""
    return await list_activity_logs(db)


@router.get("/activity-logs/{target_type}/{target_id}", response_model=list[ActivityLogResponse])
async def target_activity_logs_endpoint(
    target_type: str,
    target_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Audit history of one target, e.g. `/activity-logs/Booking/42`."""
    return await list_activity_logs_for_target(db, target_type, target_id)
