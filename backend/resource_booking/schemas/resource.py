"""
Pydantic schemas for the resource registry.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from resource_booking.models.resource import ResourceType


class ResourceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: ResourceType
    capacity: int = Field(default=0, ge=0)
    description: Optional[str] = Field(None, max_length=1000)
    location: Optional[str] = Field(None, max_length=255)
    is_available: bool = True
    requires_approval: bool = True
    auto_approve: bool = False


class ResourceUpdate(BaseModel):
    """Partial update: omitted fields keep their current value."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[ResourceType] = None
    capacity: Optional[int] = Field(None, ge=0)
    description: Optional[str] = Field(None, max_length=1000)
    location: Optional[str] = Field(None, max_length=255)
    is_available: Optional[bool] = None
    requires_approval: Optional[bool] = None
    auto_approve: Optional[bool] = None


class ResourceResponse(BaseModel):
    id: int
    name: str
    type: ResourceType
    capacity: int
    description: Optional[str]
    location: Optional[str]
    is_available: bool
    requires_approval: bool
    auto_approve: bool
    created_at: datetime

    model_config = {"from_attributes": True}
