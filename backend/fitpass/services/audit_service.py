"""
操作审计：关键写操作成功后追加一条记录

审计写入失败不影响业务结果，只回滚本次写入并告警。
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.core.config import settings
from fitpass.models.audit_log import AuditLog
from fitpass.repositories.audit import AuditLogRepository

logger = logging.getLogger(__name__)


async def log_audit(
    db: AsyncSession,
    user_id: int,
    action: str,
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None,
    detail: Optional[Dict[str, Any]] = None,
    ip: Optional[str] = None,
    request_id: Optional[str] = None,
) -> Optional[AuditLog]:
    if not settings.AUDIT_LOG_ENABLED:
        return None
    repo = AuditLogRepository(db)
    entry = AuditLog(
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        detail=detail,
        ip=ip,
        request_id=request_id,
    )
    try:
        await repo.add(entry)
        await repo.commit()
    except SQLAlchemyError as e:
        logger.warning("审计日志写入失败 action=%s resource=%s/%s: %s", action, resource_type, resource_id, e)
        await repo.rollback()
        return None
    return entry


async def list_audit_logs(
    db: AsyncSession,
    user_id: Optional[int] = None,
    action: Optional[str] = None,
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
) -> Tuple[List[AuditLog], int]:
    return await AuditLogRepository(db).search(
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        offset=(page - 1) * page_size,
        limit=page_size,
    )
