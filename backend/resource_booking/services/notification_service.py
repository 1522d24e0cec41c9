"""
In-app notifications for booking outcomes.

`notify` is fire-and-forget from the booking engine's point of view: it uses
its own session, and any failure is logged and swallowed so a booking never
fails or rolls back because its notification could not be stored.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from resource_booking.core.exceptions import NotificationNotFound
from resource_booking.core.logging import get_logger
from resource_booking.core.metrics import record_side_effect_failure
from resource_booking.models.notification import Notification, NotificationSeverity

logger = get_logger(__name__)


class NotificationService:
    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def notify(
        self,
        user_id: int,
        title: str,
        message: str,
        severity: NotificationSeverity = NotificationSeverity.INFO,
    ) -> bool:
        """Store a notification for `user_id`. Returns False if it could not be stored."""
        try:
            async with self._session_factory() as session:
                session.add(
                    Notification(
                        user_id=user_id,
                        title=title,
                        message=message,
                        severity=NotificationSeverity(severity).value,
                    )
                )
                await session.commit()
        except Exception as e:
            record_side_effect_failure("notification")
            logger.error("notification_failed", user_id=user_id, title=title, error=str(e))
            return False

        logger.info("notification_sent", user_id=user_id, title=title, severity=NotificationSeverity(severity).value)
        return True


async def get_user_notifications(db: AsyncSession, user_id: int) -> list[Notification]:
    """Newest first."""
    result = await db.execute(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return list(result.scalars().all())


async def mark_as_read(db: AsyncSession, notification_id: int, user_id: int) -> Notification:
    # Someone else's notification is reported as missing, not forbidden.
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
    )
    notification = result.scalar_one_or_none()
    if notification is None:
        raise NotificationNotFound()

    notification.is_read = True
    await db.commit()
    await db.refresh(notification)
    return notification
