"""
Resource model: a bookable room, hall, lab or piece of equipment.

Key design decisions:
- `auto_approve` is read once when a booking is created; changing it later
  does not touch existing bookings
- `is_available` is an administrative kill switch for new bookings only
- `version` column serialises concurrent booking writers for the same
  resource (optimistic locking, see booking_service)
"""

import enum

from sqlalchemy import Column, Integer, String, Boolean, CheckConstraint

from resource_booking.db.base import Base, TimestampMixin


class ResourceType(str, enum.Enum):
    ROOM = "room"
    HALL = "hall"
    LAB = "lab"
    EQUIPMENT = "equipment"


class Resource(Base, TimestampMixin):
    __tablename__ = "resources"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    type = Column(String(20), nullable=False)
    capacity = Column(Integer, nullable=False, default=0)
    description = Column(String(1000), nullable=True)
    location = Column(String(255), nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    requires_approval = Column(Boolean, nullable=False, default=True)
    auto_approve = Column(Boolean, nullable=False, default=False)

    # Optimistic locking version counter, bumped by every booking write
    version = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint("capacity >= 0", name="check_resource_capacity_non_negative"),
        CheckConstraint(
            "type IN ('room', 'hall', 'lab', 'equipment')", name="check_resource_type"
        ),
    )

    def __repr__(self) -> str:
        return f"<Resource(id={self.id}, name={self.name}, type={self.type})>"
