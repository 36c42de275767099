"""
操作审计：通行证审批、套餐变更、会员开卡/取消/续费
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, JSON
from sqlalchemy.sql import func
from fitpass.core.database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_resource", "resource_type", "resource_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # 操作人
    action = Column(String(64), nullable=False, index=True)  # approve_pass, upgrade_plan, cancel_subscription ...
    resource_type = Column(String(32), nullable=True)  # pass_config, business_subscription, subscription
    resource_id = Column(String(64), nullable=True)
    detail = Column(JSON, nullable=True)
    ip = Column(String(64), nullable=True)
    request_id = Column(String(64), nullable=True)  # 与响应头 X-Request-ID 一致
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
