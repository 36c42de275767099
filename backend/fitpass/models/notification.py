"""
通知相关模型：商家渠道设置、用户偏好、发送日志
"""
from sqlalchemy import Column, Integer, String, Boolean, Text, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from fitpass.core.database import Base


class BusinessNotificationSettings(Base):
    """商家通知设置表：渠道开关与每用户每日上限"""
    __tablename__ = "business_notification_settings"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True, index=True)
    sms_enabled = Column(Boolean, default=True)
    email_enabled = Column(Boolean, default=True)
    whatsapp_enabled = Column(Boolean, default=True)
    sms_daily_cap = Column(Integer, default=5)
    email_daily_cap = Column(Integer, default=5)
    whatsapp_daily_cap = Column(Integer, default=5)


class UserNotificationPreference(Base):
    """用户通知偏好表"""
    __tablename__ = "user_notification_preferences"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True, index=True)
    sms_enabled = Column(Boolean, default=True)
    email_enabled = Column(Boolean, default=True)
    whatsapp_enabled = Column(Boolean, default=True)


class NotificationLog(Base):
    """通知发送日志表"""
    __tablename__ = "notification_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    business_id = Column(Integer, nullable=True, index=True)
    channel = Column(String(20), nullable=False)  # sms, email, whatsapp
    type = Column(String(40), nullable=False)  # booking_confirmation, pass_purchase, pass_approval ...
    subject = Column(String(200), nullable=True)
    message = Column(Text, nullable=False)
    status = Column(String(20), default="sent")  # pending, sent, failed
    extra = Column("metadata", JSON, nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
