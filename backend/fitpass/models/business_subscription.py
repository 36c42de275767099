"""
商家套餐订阅模型（含待生效的降级计划）
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Date
from sqlalchemy.sql import func
from fitpass.core.database import Base


class BusinessSubscription(Base):
    """商家套餐表：每个商家一条"""
    __tablename__ = "business_subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True, index=True)
    current_plan = Column(String(20), nullable=False, default="starter")  # starter, growth, enterprise
    status = Column(String(20), default="active")  # active, trial, expired
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)  # 当前计费周期结束日
    # 计划降级：在 end_date 生效
    scheduled_to_plan = Column(String(20), nullable=True)
    scheduled_effective_date = Column(Date, nullable=True)
    scheduled_requested_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def scheduled_downgrade(self):
        """待生效降级，未计划时为 None"""
        if not self.scheduled_to_plan:
            return None
        return {
            "to_plan": self.scheduled_to_plan,
            "effective_date": self.scheduled_effective_date,
            "requested_at": self.scheduled_requested_at,
        }

    def clear_scheduled_downgrade(self) -> None:
        self.scheduled_to_plan = None
        self.scheduled_effective_date = None
        self.scheduled_requested_at = None
