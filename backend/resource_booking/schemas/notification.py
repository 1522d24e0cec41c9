"""
Pydantic schemas for notifications and the activity log.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from resource_booking.models.notification import NotificationSeverity


class NotificationResponse(BaseModel):
    id: int
    user_id: int
    title: str
    message: str
    severity: NotificationSeverity
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ActivityLogResponse(BaseModel):
    id: int
    actor_id: int
    action: str
    target_type: str
    target_id: int
    details: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}
