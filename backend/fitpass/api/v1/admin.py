"""
管理员API：通行证审批、交易流水、执行到期降级
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.core.database import get_db
from fitpass.schemas.auth import UserResponse
from fitpass.schemas.billing import DowngradeSweepResponse, TransactionListResponse
from fitpass.schemas.pass_config import (
    AdminApprovalToggle,
    PassConfigResponse,
    PendingApprovalListResponse,
)
from fitpass.api.deps import get_client_ip, get_request_id, require_admin
from fitpass.models.pass_config import PASS_TYPES
from fitpass.services.audit_service import log_audit
from fitpass.services.notification_service import NotificationService
from fitpass.services.pass_config_service import PassConfigService, to_response
from fitpass.services.plan_transition_service import PlanTransitionService
from fitpass.services.user_service import UserService

router = APIRouter()

def _check_pass_type(pass_type: str) -> None:
    if pass_type not in PASS_TYPES:
        raise HTTPException(status_code=400, detail=f"不支持的通行证类型: {pass_type}")

async def _get_business(db: AsyncSession, business_id: int):
    """审批类操作的目标必须是已存在的商家账号，在任何写入之前校验"""
    business = await UserService(db).get_user(business_id)
    if business is None:
        raise HTTPException(status_code=404, detail="商家不存在")
    if business.role != "business":
        raise HTTPException(status_code=400, detail="目标账号不是商家")
    return business

@router.get("/pass-approvals", response_model=PendingApprovalListResponse)
async def list_pending_approvals(
    current_user: UserResponse = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """待审批的商家通行证配置"""
    configs = await PassConfigService(db).list_pending_approvals()
    return {"configs": [to_response(c) for c in configs], "total": len(configs)}

@router.post("/pass-approvals/{business_id}/{pass_type}/approve", response_model=PassConfigResponse)
async def approve_pass(
    business_id: int,
    pass_type: str,
    request: Request,
    current_user: UserResponse = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """审批通过"""
    _check_pass_type(pass_type)
    business = await _get_business(db, business_id)
    config = await PassConfigService(db).approve_pass(business_id, pass_type)
    await NotificationService(db).send_pass_approval_decision(business, pass_type, True)
    await log_audit(db, current_user.id, "approve_pass", "pass_config", str(business_id), {"pass_type": pass_type}, get_client_ip(request), get_request_id(request))
    return to_response(config)

@router.post("/pass-approvals/{business_id}/{pass_type}/reject", response_model=PassConfigResponse)
async def reject_pass(
    business_id: int,
    pass_type: str,
    request: Request,
    current_user: UserResponse = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """驳回（同时关闭该类型）"""
    _check_pass_type(pass_type)
    business = await _get_business(db, business_id)
    config = await PassConfigService(db).reject_pass(business_id, pass_type)
    await NotificationService(db).send_pass_approval_decision(business, pass_type, False)
    await log_audit(db, current_user.id, "reject_pass", "pass_config", str(business_id), {"pass_type": pass_type}, get_client_ip(request), get_request_id(request))
    return to_response(config)

@router.put("/pass-approvals/{business_id}/{pass_type}", response_model=PassConfigResponse)
async def toggle_admin_approval(
    business_id: int,
    pass_type: str,
    body: AdminApprovalToggle,
    request: Request,
    current_user: UserResponse = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """切换审批标志（撤销审批会立即下架该类型）"""
    _check_pass_type(pass_type)
    await _get_business(db, business_id)
    config = await PassConfigService(db).set_admin_approval(business_id, pass_type, body.approved)
    await log_audit(db, current_user.id, "toggle_pass_approval", "pass_config", str(business_id), {"pass_type": pass_type, "approved": body.approved}, get_client_ip(request), get_request_id(request))
    return to_response(config)

@router.post("/pass-approvals/{business_id}/approve-all", response_model=PassConfigResponse)
async def approve_all_pending(
    business_id: int,
    request: Request,
    current_user: UserResponse = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """审批该商家全部已开启类型"""
    await _get_business(db, business_id)
    config = await PassConfigService(db).approve_all_pending(business_id)
    await log_audit(db, current_user.id, "approve_all_passes", "pass_config", str(business_id), None, get_client_ip(request), get_request_id(request))
    return to_response(config)

@router.post("/pass-approvals/{business_id}/reject-all", response_model=PassConfigResponse)
async def reject_all_pending(
    business_id: int,
    request: Request,
    current_user: UserResponse = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """驳回该商家全部待审批类型"""
    await _get_business(db, business_id)
    config = await PassConfigService(db).reject_all_pending(business_id)
    await log_audit(db, current_user.id, "reject_all_passes", "pass_config", str(business_id), None, get_client_ip(request), get_request_id(request))
    return to_response(config)

@router.get("/transactions", response_model=TransactionListResponse)
async def list_all_transactions(
    limit: int = 200,
    current_user: UserResponse = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """全平台套餐交易流水"""
    txns = await PlanTransitionService(db).get_all_transactions(limit)
    return {"transactions": txns, "total": len(txns)}

@router.post("/downgrades/apply", response_model=DowngradeSweepResponse)
async def apply_due_downgrades(
    current_user: UserResponse = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """立即执行已到生效日的降级（通常由定时任务执行）"""
    applied = await PlanTransitionService(db).apply_due_downgrades()
    return {"applied": len(applied), "business_ids": [s.business_id for s in applied]}
