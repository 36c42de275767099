"""
会员通行证相关Schema
"""
import enum
from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional, List


class MembershipStatus(str, enum.Enum):
    """会员状态"""
    ACTIVE = "active"
    OVERDUE = "overdue"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class PassPurchaseRequest(BaseModel):
    """用户购买通行证"""
    venue_id: int
    pass_type: str = Field(..., pattern="^(daily|weekly|monthly)$")
    payment_method: str = "online"


class AssignSubscriptionRequest(BaseModel):
    """商家为现金会员开卡"""
    venue_id: int
    member_name: str = Field(..., min_length=1)
    member_email: Optional[str] = None
    member_phone: Optional[str] = None
    pass_type: str = Field(..., pattern="^(daily|weekly|monthly)$")
    price: float = Field(..., ge=0)


class RenewSubscriptionRequest(BaseModel):
    """续费：可同时变更类型与价格"""
    pass_type: str = Field(..., pattern="^(daily|weekly|monthly)$")
    price: float = Field(..., ge=0)


class SubscriptionResponse(BaseModel):
    """订阅响应，status 为读取时推导的有效状态"""
    id: int
    user_id: Optional[int] = None
    venue_id: int
    pass_type: str
    start_date: date
    end_date: date
    price: float
    status: MembershipStatus
    payment_method: str
    member_name: Optional[str] = None
    days_remaining: int = 0
    created_at: Optional[datetime] = None


class SubscriptionListResponse(BaseModel):
    subscriptions: List[SubscriptionResponse]
    total: int


class DeletionCheck(BaseModel):
    """是否允许取消/删除"""
    can_delete: bool
    reason: Optional[str] = None
    days_remaining: Optional[int] = None


class CancellationResult(BaseModel):
    """取消结果：失败时 reason 为 NOT_FOUND / ALREADY_CANCELLED / MIN_HOLD_PERIOD / UNAUTHORIZED"""
    success: bool
    reason: Optional[str] = None
    message: Optional[str] = None
    days_remaining: Optional[int] = None
    subscription: Optional[SubscriptionResponse] = None
