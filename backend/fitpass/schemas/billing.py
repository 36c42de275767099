"""
商家套餐相关Schema
"""
from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional, List


class PlanResponse(BaseModel):
    """套餐响应"""
    id: str
    name: str
    price: float
    period: str
    features: List[str] = []


class PlanListResponse(BaseModel):
    """套餐列表响应"""
    plans: List[PlanResponse]
    total: int


class ScheduledDowngradeResponse(BaseModel):
    to_plan: str
    effective_date: date
    requested_at: Optional[datetime] = None


class BusinessSubscriptionResponse(BaseModel):
    """商家当前套餐"""
    id: int
    business_id: int
    current_plan: str
    status: str
    start_date: date
    end_date: date
    scheduled_downgrade: Optional[ScheduledDowngradeResponse] = None

    class Config:
        from_attributes = True


class PlanChangeRequest(BaseModel):
    """套餐变更：升级立即生效，降级在周期结束时生效"""
    to_plan: str = Field(..., pattern="^(starter|growth|enterprise)$")
    payment_method: str = "online"


class TransactionResponse(BaseModel):
    """交易流水"""
    id: int
    business_id: int
    type: str
    from_plan: str
    to_plan: str
    amount: float
    status: str
    payment_method: Optional[str] = None
    order_id: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TransactionListResponse(BaseModel):
    transactions: List[TransactionResponse]
    total: int


class PlanChangeResponse(BaseModel):
    subscription: BusinessSubscriptionResponse
    transaction: TransactionResponse


class DowngradeSweepResponse(BaseModel):
    applied: int
    business_ids: List[int]
