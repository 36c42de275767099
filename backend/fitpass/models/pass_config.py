"""
商家通行证配置模型：商家开启 + 管理员审批 双重确认
"""
from sqlalchemy import Column, Integer, Boolean, Numeric, DateTime, ForeignKey
from sqlalchemy.sql import func
from fitpass.core.database import Base

PASS_TYPES = ("daily", "weekly", "monthly")


class PassConfig(Base):
    """通行证配置表：每个商家一条"""
    __tablename__ = "pass_configs"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True, index=True)
    daily_enabled = Column(Boolean, default=False)
    weekly_enabled = Column(Boolean, default=False)
    monthly_enabled = Column(Boolean, default=False)
    daily_admin_approved = Column(Boolean, default=False)
    weekly_admin_approved = Column(Boolean, default=False)
    monthly_admin_approved = Column(Boolean, default=False)
    daily_price = Column(Numeric(10, 2), default=299)
    weekly_price = Column(Numeric(10, 2), default=1499)
    monthly_price = Column(Numeric(10, 2), default=4999)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def is_enabled(self, pass_type: str) -> bool:
        return bool(getattr(self, f"{pass_type}_enabled"))

    def is_approved(self, pass_type: str) -> bool:
        return bool(getattr(self, f"{pass_type}_admin_approved"))

    def price_of(self, pass_type: str) -> float:
        return float(getattr(self, f"{pass_type}_price") or 0)

    @property
    def pending_approval(self) -> bool:
        """派生字段：存在已开启但未审批的类型。每次读取时计算，不落库"""
        return any(self.is_enabled(t) and not self.is_approved(t) for t in PASS_TYPES)
