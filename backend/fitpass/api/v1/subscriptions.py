"""
会员通行证相关API
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.core.database import get_db
from fitpass.schemas.auth import UserResponse
from fitpass.schemas.subscription import (
    AssignSubscriptionRequest,
    CancellationResult,
    DeletionCheck,
    PassPurchaseRequest,
    RenewSubscriptionRequest,
    SubscriptionListResponse,
    SubscriptionResponse,
)
from fitpass.api.deps import get_client_ip, get_current_active_user, get_request_id, require_business
from fitpass.services.audit_service import log_audit
from fitpass.services.subscription_service import SubscriptionService, to_response
from fitpass.services.venue_service import VenueService

router = APIRouter()

@router.post("", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
async def purchase_pass(
    data: PassPurchaseRequest,
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """购买通行证（需该类型已开启并审批）"""
    service = SubscriptionService(db)
    try:
        sub, _ = await service.purchase_pass(current_user, data.venue_id, data.pass_type, data.payment_method)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return to_response(sub)

@router.post("/assign", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
async def assign_subscription(
    data: AssignSubscriptionRequest,
    request: Request,
    current_user: UserResponse = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """商家为线下现金会员开卡"""
    service = SubscriptionService(db)
    try:
        sub = await service.assign_subscription(current_user.id, data)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    await log_audit(db, current_user.id, "assign_subscription", "subscription", str(sub.id), {"member_name": sub.member_name, "pass_type": sub.pass_type}, get_client_ip(request), get_request_id(request))
    return to_response(sub)

@router.get("/me", response_model=SubscriptionListResponse)
async def list_my_subscriptions(
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """我的通行证"""
    subs = await SubscriptionService(db).get_user_subscriptions(current_user.id)
    items = [to_response(s) for s in subs]
    return {"subscriptions": items, "total": len(items)}

@router.get("/active", response_model=Optional[SubscriptionResponse])
async def get_active_subscription(
    venue_id: int = Query(...),
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """当前用户在某场馆的有效通行证，没有则返回 null"""
    sub = await SubscriptionService(db).lookup_active_subscription(current_user.id, venue_id)
    return to_response(sub) if sub else None

@router.get("/venue/{venue_id}", response_model=SubscriptionListResponse)
async def list_venue_subscriptions(
    venue_id: int,
    active_only: bool = False,
    current_user: UserResponse = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """场馆会员列表（仅场馆所属商家）"""
    venue = await VenueService(db).get_venue(venue_id)
    if not venue:
        raise HTTPException(status_code=404, detail="场馆不存在")
    if venue.owner_id != current_user.id:
        raise HTTPException(status_code=403, detail="只能查看自己场馆的会员")
    subs = await SubscriptionService(db).get_venue_subscriptions(venue_id, active_only=active_only)
    items = [to_response(s) for s in subs]
    return {"subscriptions": items, "total": len(items)}

@router.get("/{subscription_id}/can-delete", response_model=DeletionCheck)
async def can_delete_subscription(
    subscription_id: int,
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """是否可取消（月卡须满 30 天），仅会员本人、场馆商家或管理员可查"""
    service = SubscriptionService(db)
    sub = await service.get_subscription(subscription_id)
    if not sub:
        raise HTTPException(status_code=404, detail="订阅不存在")
    if not await service.can_manage(sub, current_user.id, current_user.role):
        raise HTTPException(status_code=403, detail="无权查看该订阅")
    return await service.can_delete_subscription(subscription_id)

@router.post("/{subscription_id}/cancel", response_model=CancellationResult)
async def cancel_subscription(
    subscription_id: int,
    request: Request,
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """取消订阅；不满足条件时返回 success=false 及原因"""
    result = await SubscriptionService(db).cancel_subscription(
        subscription_id, current_user.id, current_user.role
    )
    if result.success:
        await log_audit(db, current_user.id, "cancel_subscription", "subscription", str(subscription_id), None, get_client_ip(request), get_request_id(request))
    return result

@router.post("/{subscription_id}/renew", response_model=SubscriptionResponse)
async def renew_subscription(
    subscription_id: int,
    data: RenewSubscriptionRequest,
    request: Request,
    current_user: UserResponse = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """商家为会员续费"""
    service = SubscriptionService(db)
    sub = await service.get_subscription(subscription_id)
    if not sub:
        raise HTTPException(status_code=404, detail="订阅不存在")
    venue = await VenueService(db).get_venue(sub.venue_id)
    if not venue or venue.owner_id != current_user.id:
        raise HTTPException(status_code=403, detail="只能为自己场馆的会员续费")
    try:
        sub = await service.renew_subscription(subscription_id, data.pass_type, data.price)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    await log_audit(db, current_user.id, "renew_subscription", "subscription", str(subscription_id), {"pass_type": data.pass_type, "price": data.price, "end_date": sub.end_date.isoformat()}, get_client_ip(request), get_request_id(request))
    return to_response(sub)
