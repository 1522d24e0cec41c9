"""
Audit trail writer. Same contract as notifications: best effort, own session,
failures logged and swallowed.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from resource_booking.core.logging import get_logger
from resource_booking.core.metrics import record_side_effect_failure
from resource_booking.models.activity_log import ActivityLog

logger = get_logger(__name__)

ACTIVITY_LOG_PAGE_SIZE = 100


class ActivityLogService:
    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def log(
        self,
        actor_id: int,
        action: str,
        target_type: str,
        target_id: int,
        details: Optional[str] = None,
    ) -> bool:
        try:
            async with self._session_factory() as session:
                session.add(
                    ActivityLog(
                        actor_id=actor_id,
                        action=action,
                        target_type=target_type,
                        target_id=target_id,
                        details=details,
                    )
                )
                await session.commit()
        except Exception as e:
            record_side_effect_failure("activity_log")
            logger.error(
                "activity_log_failed",
                actor_id=actor_id,
                action=action,
                target_id=target_id,
                error=str(e),
            )
            return False
        return True


async def list_activity_logs(db: AsyncSession, limit: int = ACTIVITY_LOG_PAGE_SIZE) -> list[ActivityLog]:
    result = await db.execute(
        select(ActivityLog)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_activity_logs_for_target(db: AsyncSession, target_type: str, target_id: int) -> list[ActivityLog]:
    """Full history of one target (e.g. a booking), newest first."""
    result = await db.execute(
        select(ActivityLog)
        .where(ActivityLog.target_type == target_type, ActivityLog.target_id == target_id)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
    )
    return list(result.scalars().all())
