"""
商家通行证配置API
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.core.database import get_db
from fitpass.schemas.auth import UserResponse
from fitpass.schemas.pass_config import PassConfigResponse, PassConfigUpdate
from fitpass.api.deps import get_client_ip, get_request_id, require_business
from fitpass.models.pass_config import PASS_TYPES
from fitpass.services.audit_service import log_audit
from fitpass.services.notification_service import NotificationService
from fitpass.services.pass_config_service import PassConfigService, to_response
from fitpass.services.user_service import UserService

router = APIRouter()

@router.get("", response_model=PassConfigResponse)
async def get_pass_config(
    current_user: UserResponse = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """本商家通行证配置"""
    return to_response(await PassConfigService(db).get_config(current_user.id))

@router.put("", response_model=PassConfigResponse)
async def update_pass_config(
    updates: PassConfigUpdate,
    request: Request,
    current_user: UserResponse = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """更新开关与价格"""
    try:
        config = await PassConfigService(db).update_pass_config(current_user.id, updates)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await log_audit(db, current_user.id, "update_pass_config", "pass_config", str(current_user.id), updates.model_dump(exclude_none=True), get_client_ip(request), get_request_id(request))
    return to_response(config)

@router.post("/request/{pass_type}", response_model=PassConfigResponse)
async def request_pass_approval(
    pass_type: str,
    request: Request,
    current_user: UserResponse = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """申请开通某类通行证，并通知管理员审批"""
    if pass_type not in PASS_TYPES:
        raise HTTPException(status_code=400, detail=f"不支持的通行证类型: {pass_type}")
    config = await PassConfigService(db).request_pass_approval(current_user.id, pass_type)
    admins = await UserService(db).list_admins()
    await NotificationService(db).notify_admins_pass_request(admins, current_user, pass_type)
    await log_audit(db, current_user.id, "request_pass_approval", "pass_config", str(current_user.id), {"pass_type": pass_type}, get_client_ip(request), get_request_id(request))
    return to_response(config)
