"""
商家套餐相关API
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.core.database import get_db
from fitpass.schemas.auth import UserResponse
from fitpass.schemas.billing import (
    BusinessSubscriptionResponse,
    PlanChangeRequest,
    PlanChangeResponse,
    PlanListResponse,
    TransactionListResponse,
)
from fitpass.api.deps import get_client_ip, get_request_id, require_business
from fitpass.services.audit_service import log_audit
from fitpass.services.plan_catalog import PLAN_CATALOG
from fitpass.services.plan_transition_service import PlanTransitionService

router = APIRouter()

@router.get("/plans", response_model=PlanListResponse)
async def get_plans():
    """获取套餐列表"""
    return {"plans": PLAN_CATALOG, "total": len(PLAN_CATALOG)}

@router.get("", response_model=BusinessSubscriptionResponse)
async def get_current_plan(
    current_user: UserResponse = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """当前套餐（首次访问自动开通 starter）"""
    return await PlanTransitionService(db).init_subscription(current_user.id)

async def _change(action: str, body: PlanChangeRequest, request: Request, current_user: UserResponse, db: AsyncSession):
    service = PlanTransitionService(db)
    try:
        if action == "upgrade":
            sub, txn = await service.upgrade(current_user.id, body.to_plan, body.payment_method)
        elif action == "downgrade":
            sub, txn = await service.schedule_downgrade(current_user.id, body.to_plan)
        else:
            sub, txn = await service.change_plan(current_user.id, body.to_plan, body.payment_method)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    await log_audit(db, current_user.id, f"{txn.type}_plan", "business_subscription", str(sub.id), {"from_plan": txn.from_plan, "to_plan": txn.to_plan, "status": txn.status}, get_client_ip(request), get_request_id(request))
    return {"subscription": sub, "transaction": txn}

@router.post("/change", response_model=PlanChangeResponse)
async def change_plan(
    body: PlanChangeRequest,
    request: Request,
    current_user: UserResponse = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """变更套餐：按等级自动判断升级（立即生效）或降级（周期结束生效）"""
    return await _change("change", body, request, current_user, db)

@router.post("/upgrade", response_model=PlanChangeResponse)
async def upgrade_plan(
    body: PlanChangeRequest,
    request: Request,
    current_user: UserResponse = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """升级套餐"""
    return await _change("upgrade", body, request, current_user, db)

@router.post("/downgrade", response_model=PlanChangeResponse)
async def schedule_downgrade(
    body: PlanChangeRequest,
    request: Request,
    current_user: UserResponse = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """计划降级"""
    return await _change("downgrade", body, request, current_user, db)

@router.delete("/downgrade", response_model=BusinessSubscriptionResponse)
async def cancel_scheduled_downgrade(
    request: Request,
    current_user: UserResponse = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """撤销降级计划"""
    sub = await PlanTransitionService(db).cancel_scheduled_downgrade(current_user.id)
    if not sub:
        raise HTTPException(status_code=404, detail="商家尚未开通套餐")
    await log_audit(db, current_user.id, "cancel_downgrade", "business_subscription", str(sub.id), None, get_client_ip(request), get_request_id(request))
    return sub

@router.get("/transactions", response_model=TransactionListResponse)
async def get_transactions(
    current_user: UserResponse = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """本商家交易流水（新的在前）"""
    txns = await PlanTransitionService(db).get_transactions(current_user.id)
    return {"transactions": txns, "total": len(txns)}
