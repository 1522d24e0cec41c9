"""
In-app notification inbox entry.
"""

import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func

from resource_booking.db.base import Base, utcnow


class NotificationSeverity(str, enum.Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(String(1000), nullable=False)
    severity = Column(String(20), nullable=False, default=NotificationSeverity.INFO.value)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, user={self.user_id}, title={self.title})>"
