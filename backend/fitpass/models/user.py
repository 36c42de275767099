"""
账号模型：会员、商家、管理员共用一张表，按 role 区分
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from fitpass.core.database import Base

USER_ROLES = ("user", "business", "admin")
# 管理员只能通过 scripts/create_admin.py 创建
SELF_SERVICE_ROLES = ("user", "business")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True)  # 短信 / WhatsApp 通知地址
    role = Column(String(20), nullable=False, default="user", index=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def display_name(self) -> str:
        return self.full_name or self.username
