"""
认证服务：bcrypt 密码哈希 + JWT 访问令牌

令牌载荷：sub 为用户名，role 为角色，exp 为过期时间。
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import jwt, JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.core.config import settings
from fitpass.models.user import User, SELF_SERVICE_ROLES
from fitpass.repositories.user import UserRepository
from fitpass.schemas.auth import UserCreate

logger = logging.getLogger(__name__)

# bcrypt 只使用前 72 字节
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # 库中哈希格式损坏
        return False


def create_access_token(subject: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    expires_delta = expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": subject,
        "role": role,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """解析令牌，无效或过期时抛 ValueError"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise ValueError("无效的认证凭据") from e
    if not payload.get("sub"):
        raise ValueError("无效的认证凭据")
    return payload


class AuthService:
    """账号注册、登录与令牌校验"""

    def __init__(self, db: AsyncSession, users: Optional[UserRepository] = None):
        self.db = db
        self.users = users or UserRepository(db)

    async def register_user(self, data: UserCreate, allow_admin: bool = False) -> User:
        if data.role not in SELF_SERVICE_ROLES and not allow_admin:
            raise PermissionError(f"不允许自助注册为 {data.role}")
        if await self.users.get_by_username(data.username):
            raise ValueError("用户名已存在")
        if await self.users.get_by_email(data.email):
            raise ValueError("邮箱已存在")

        user = User(
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password),
            full_name=data.full_name,
            phone=data.phone,
            role=data.role,
            is_active=True,
        )
        await self.users.add(user)
        await self.users.commit()
        await self.users.refresh(user)
        logger.info("新账号注册: %s（%s）", user.username, user.role)
        return user

    async def authenticate_user(self, username: str, password: str) -> Optional[User]:
        """用户名或密码错误时返回 None"""
        user = await self.users.get_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            return None
        return user

    def issue_token(self, user: User) -> str:
        return create_access_token(user.username, user.role)

    async def get_current_user(self, token: str) -> User:
        payload = decode_access_token(token)
        user = await self.users.get_by_username(payload["sub"])
        if user is None:
            raise ValueError("无效的认证凭据")
        return user
