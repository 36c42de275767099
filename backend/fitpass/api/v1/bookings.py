"""
预约相关API
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.core.database import get_db
from fitpass.schemas.auth import UserResponse
from fitpass.schemas.booking import (
    BookingCancellationResult,
    BookingCancelRequest,
    BookingCreate,
    BookingCreateResult,
    BookingEligibility,
    BookingListResponse,
    BookingResponse,
)
from fitpass.api.deps import get_client_ip, get_current_active_user, get_request_id
from fitpass.services.audit_service import log_audit
from fitpass.services.booking_service import BookingService

router = APIRouter()

@router.get("/eligibility", response_model=BookingEligibility)
async def check_eligibility(
    venue_id: int = Query(...),
    booking_date: date = Query(..., alias="date"),
    user_id: int = Query(None, description="为其他用户校验（仅管理员）"),
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """校验能否在指定日期预约"""
    owner_id = user_id if user_id is not None else current_user.id
    return await BookingService(db).check_eligibility(
        owner_id, venue_id, booking_date, requester=current_user
    )

@router.post("", response_model=BookingCreateResult)
async def create_booking(
    data: BookingCreate,
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """创建预约；资格不通过时 booking 为 null，原因见 eligibility"""
    return await BookingService(db).create_booking(current_user, data)

@router.get("/me", response_model=BookingListResponse)
async def list_my_bookings(
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """我的预约"""
    bookings = await BookingService(db).list_user_bookings(current_user.id)
    return {"bookings": bookings, "total": len(bookings)}

@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int,
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """预约详情（管理员可查看任意预约）"""
    owner_id = None if current_user.role == "admin" else current_user.id
    booking = await BookingService(db).get_booking(booking_id, owner_id)
    if not booking:
        raise HTTPException(status_code=404, detail="预约不存在")
    return booking

@router.post("/{booking_id}/cancel", response_model=BookingCancellationResult)
async def cancel_booking(
    booking_id: int,
    request: Request,
    body: Optional[BookingCancelRequest] = None,
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """取消预约；不满足条件时返回 success=false 及原因"""
    reason = body.reason if body else None
    result = await BookingService(db).cancel_booking(booking_id, current_user.id, current_user.role, reason)
    if result.success:
        await log_audit(db, current_user.id, "cancel_booking", "booking", str(booking_id), {"reason": reason} if reason else None, get_client_ip(request), get_request_id(request))
    return result
