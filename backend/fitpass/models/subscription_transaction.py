"""
套餐交易流水模型（只追加，不修改）
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Text
from sqlalchemy.sql import func
from fitpass.core.database import Base


class SubscriptionTransaction(Base):
    """套餐变更/购买流水表"""
    __tablename__ = "subscription_transactions"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)  # new, upgrade, downgrade, renewal
    from_plan = Column(String(20), nullable=False)
    to_plan = Column(String(20), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False)  # success, pending, failed
    payment_method = Column(String(20), nullable=True)
    order_id = Column(String(50), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
