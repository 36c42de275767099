"""
预约相关Schema
"""
import enum
from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional, List, Dict


class EligibilityReason(str, enum.Enum):
    """预约资格校验失败原因"""
    NO_SUBSCRIPTION = "NO_SUBSCRIPTION"
    SUBSCRIPTION_EXPIRED = "SUBSCRIPTION_EXPIRED"
    DATE_OUTSIDE_RANGE = "DATE_OUTSIDE_RANGE"
    UNAUTHORIZED = "UNAUTHORIZED"


class EligibleSubscription(BaseModel):
    """用于前端展示的订阅摘要"""
    pass_type: str
    end_date: date


class BookingEligibility(BaseModel):
    """预约资格校验结果（失败不抛异常）"""
    allowed: bool
    reason: Optional[EligibilityReason] = None
    message: Optional[str] = None
    subscription: Optional[EligibleSubscription] = None


class BookingCreate(BaseModel):
    """预约创建"""
    venue_id: int
    booking_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class BookingResponse(BaseModel):
    """预约响应"""
    id: int
    user_id: int
    venue_id: int
    subscription_id: int
    booking_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    status: str
    cancelled_at: Optional[datetime] = None
    cancel_reason: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BookingCreateResult(BaseModel):
    """预约结果：资格不通过时 booking 为空"""
    eligibility: BookingEligibility
    booking: Optional[BookingResponse] = None
    notifications: Dict[str, bool] = {}


class BookingListResponse(BaseModel):
    bookings: List[BookingResponse]
    total: int


class BookingCancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=255)


class BookingCancellationResult(BaseModel):
    """取消预约结果。失败原因：NOT_FOUND / UNAUTHORIZED / ALREADY_CANCELLED"""
    success: bool
    reason: Optional[str] = None
    message: Optional[str] = None
    booking: Optional[BookingResponse] = None
