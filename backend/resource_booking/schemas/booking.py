"""
Pydantic schemas for booking-related request/response validation.

Timestamps are normalised to UTC both ways; naive values are taken to
already be UTC. Range ordering is NOT validated here: the lifecycle manager
owns that check so it surfaces as `invalid_range` rather than a 422.
"""

from datetime import date, datetime, timezone
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_serializer, field_validator

from resource_booking.models.booking import BookingStatus
from resource_booking.schemas.resource import ResourceResponse


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class BookingCreate(BaseModel):
    resource_id: int
    event_id: Optional[int] = None
    start_time: datetime
    end_time: datetime

    @field_validator("start_time", "end_time")
    @classmethod
    def normalise_timezone(cls, value: datetime) -> datetime:
        return to_utc(value)


class BookingStatusUpdate(BaseModel):
    status: Literal["approved", "rejected", "cancelled"]
    admin_note: Optional[str] = Field(None, max_length=1000)


class BookingResponse(BaseModel):
    id: int
    resource_id: int
    requester_id: int
    event_id: Optional[int]
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    admin_note: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_serializer("start_time", "end_time", "created_at")
    def serialize_utc(self, value: datetime) -> datetime:
        # SQLite hands timestamps back naive
        return to_utc(value)


class BookingDetailResponse(BookingResponse):
    # None when the resource has since been deleted
    resource: Optional[ResourceResponse] = None


class BookingSlot(BaseModel):
    start_time: datetime
    end_time: datetime
    status: BookingStatus

    model_config = {"from_attributes": True}

    @field_serializer("start_time", "end_time")
    def serialize_utc(self, value: datetime) -> datetime:
        return to_utc(value)


class SlotStatus(BaseModel):
    time: str
    booked: bool


class SlotGridResponse(BaseModel):
    resource_id: int
    date: date
    slots: list[SlotStatus]
