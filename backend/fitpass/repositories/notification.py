"""通知设置与日志仓储"""
from typing import List, Optional

from sqlalchemy import select, delete

from fitpass.models.notification import (
    BusinessNotificationSettings,
    UserNotificationPreference,
    NotificationLog,
)
from fitpass.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[NotificationLog]):
    model = NotificationLog

    async def get_business_settings(self, business_id: int) -> Optional[BusinessNotificationSettings]:
        result = await self.db.execute(
            select(BusinessNotificationSettings).where(
                BusinessNotificationSettings.business_id == business_id
            )
        )
        return result.scalar_one_or_none()

    async def get_user_preference(self, user_id: int) -> Optional[UserNotificationPreference]:
        result = await self.db.execute(
            select(UserNotificationPreference).where(UserNotificationPreference.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def list_logs(
        self,
        user_id: Optional[int] = None,
        business_id: Optional[int] = None,
        limit: int = 100,
    ) -> List[NotificationLog]:
        stmt = select(NotificationLog)
        if user_id is not None:
            stmt = stmt.where(NotificationLog.user_id == user_id)
        if business_id is not None:
            stmt = stmt.where(NotificationLog.business_id == business_id)
        stmt = stmt.order_by(NotificationLog.id.desc()).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def prune_logs(self, keep: int) -> None:
        """只保留最新的 keep 条日志"""
        result = await self.db.execute(
            select(NotificationLog.id).order_by(NotificationLog.id.desc()).offset(keep).limit(1)
        )
        cutoff = result.scalar_one_or_none()
        if cutoff is not None:
            await self.db.execute(delete(NotificationLog).where(NotificationLog.id <= cutoff))
