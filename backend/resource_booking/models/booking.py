"""
Booking model: a time-ranged reservation of a resource.

Key design decisions:
- Intervals are half-open [start_time, end_time); back-to-back bookings
  do not overlap
- Only `pending` and `approved` rows take part in conflict detection
- `resource_id` is deliberately not a foreign key: deleting a resource
  leaves its bookings in place with a dangling reference
- `event_id` points into the external event system and is opaque here
"""

import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from resource_booking.db.base import Base, TimestampMixin


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


# Statuses that occupy the resource. Everything else is terminal and ignored
# by the conflict checker.
ACTIVE_STATUSES = (BookingStatus.PENDING.value, BookingStatus.APPROVED.value)


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    resource_id = Column(Integer, nullable=False, index=True)
    requester_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)
    admin_note = Column(String(1000), nullable=True)

    resource = relationship(
        "Resource",
        primaryjoin="foreign(Booking.resource_id) == Resource.id",
        lazy="selectin",
        viewonly=True,
    )

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="check_booking_range"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'cancelled')",
            name="check_booking_status",
        ),
        # Covers the overlap query: resource equality plus range comparisons
        Index("ix_bookings_resource_range", "resource_id", "start_time", "end_time"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, resource={self.resource_id}, "
            f"{self.start_time}..{self.end_time}, status={self.status})>"
        )
