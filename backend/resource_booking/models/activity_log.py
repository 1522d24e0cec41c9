"""
Audit trail of administrative and booking actions.
"""

from sqlalchemy import Column, Integer, String, DateTime, Index, func

from resource_booking.db.base import Base, utcnow


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(Integer, nullable=False, index=True)
    action = Column(String(50), nullable=False)  # BOOKING_CREATED, BOOKING_APPROVED, ...
    target_type = Column(String(50), nullable=False)
    target_id = Column(Integer, nullable=False)
    details = Column(String(1000), nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

    __table_args__ = (
        Index("ix_activity_logs_target", "target_type", "target_id"),
    )
