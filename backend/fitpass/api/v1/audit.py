"""
操作审计 API：管理员可查看全部记录，其他角色只能查看自己的操作
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.core.database import get_db
from fitpass.schemas.audit import AuditLogItem, AuditLogListResponse
from fitpass.schemas.auth import UserResponse
from fitpass.api.deps import get_current_active_user
from fitpass.services.audit_service import list_audit_logs

router = APIRouter()

@router.get("", response_model=AuditLogListResponse)
async def get_audit_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="如 approve_pass、upgrade_plan"),
    resource_type: Optional[str] = Query(None, description="如 pass_config、subscription"),
    resource_id: Optional[str] = None,
    user_id: Optional[int] = Query(None, description="按操作人筛选（仅管理员）"),
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    operator = user_id if current_user.role == "admin" else current_user.id
    items, total = await list_audit_logs(
        db,
        user_id=operator,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        page=page,
        page_size=page_size,
    )
    return AuditLogListResponse(
        items=[AuditLogItem.model_validate(x) for x in items],
        total=total,
        page=page,
        page_size=page_size,
    )
