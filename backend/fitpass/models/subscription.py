"""
会员通行证模型
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Date, Numeric
from sqlalchemy.sql import func
from fitpass.core.database import Base


class Subscription(Base):
    """会员订阅表（用户在某场馆的日卡/周卡/月卡）"""
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)  # 现金会员可能没有账号
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False, index=True)
    pass_type = Column(String(20), nullable=False)  # daily, weekly, monthly
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    # 只持久化 active / cancelled，overdue / expired 在读取时由到期日推导
    status = Column(String(20), default="active")
    payment_method = Column(String(20), default="online")  # online, cash
    member_name = Column(String(100), nullable=True)
    member_email = Column(String(100), nullable=True)
    member_phone = Column(String(20), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)  # 商家代办时记录商家用户
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
