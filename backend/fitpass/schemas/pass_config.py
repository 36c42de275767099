"""
通行证配置相关Schema
"""
from pydantic import BaseModel, Field
from typing import Optional, List


class PassConfigResponse(BaseModel):
    """通行证配置；pending_approval 与 active_pass_types 均为读取时计算"""
    business_id: int
    daily_enabled: bool
    weekly_enabled: bool
    monthly_enabled: bool
    daily_admin_approved: bool
    weekly_admin_approved: bool
    monthly_admin_approved: bool
    daily_price: float
    weekly_price: float
    monthly_price: float
    pending_approval: bool
    active_pass_types: List[str] = []


class PassConfigUpdate(BaseModel):
    """商家更新配置（只允许修改开关与价格，审批标志由管理员维护）"""
    daily_enabled: Optional[bool] = None
    weekly_enabled: Optional[bool] = None
    monthly_enabled: Optional[bool] = None
    daily_price: Optional[float] = Field(None, gt=0)
    weekly_price: Optional[float] = Field(None, gt=0)
    monthly_price: Optional[float] = Field(None, gt=0)


class AdminApprovalToggle(BaseModel):
    approved: bool


class PendingApprovalListResponse(BaseModel):
    configs: List[PassConfigResponse]
    total: int
