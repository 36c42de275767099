"""审计日志仓储"""
from typing import List, Optional, Tuple

from sqlalchemy import select, func

from fitpass.models.audit_log import AuditLog
from fitpass.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLog]):
    model = AuditLog

    async def search(
        self,
        user_id: Optional[int] = None,
        action: Optional[str] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[AuditLog], int]:
        """按条件分页查询，新的在前；返回 (本页记录, 总数)"""
        filters = []
        if user_id is not None:
            filters.append(AuditLog.user_id == user_id)
        if action:
            filters.append(AuditLog.action == action)
        if resource_type:
            filters.append(AuditLog.resource_type == resource_type)
        if resource_id:
            filters.append(AuditLog.resource_id == resource_id)

        total = (
            await self.db.execute(select(func.count()).select_from(AuditLog).where(*filters))
        ).scalar() or 0
        result = await self.db.execute(
            select(AuditLog)
            .where(*filters)
            .order_by(AuditLog.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total
