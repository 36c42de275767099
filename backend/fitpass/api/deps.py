"""
通用依赖：当前用户、角色校验、客户端 IP 与请求 ID
"""
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.core.config import settings
from fitpass.core.database import get_db
from fitpass.schemas.auth import UserResponse
from fitpass.services.auth_service import AuthService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    try:
        user = await AuthService(db).get_current_user(token)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return UserResponse.model_validate(user)


async def get_current_active_user(
    current_user: UserResponse = Depends(get_current_user),
) -> UserResponse:
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="账号已停用")
    return current_user


async def require_business(
    current_user: UserResponse = Depends(get_current_active_user),
) -> UserResponse:
    """仅商家可访问"""
    if current_user.role != "business":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="仅商家账号可执行该操作")
    return current_user


async def require_admin(
    current_user: UserResponse = Depends(get_current_active_user),
) -> UserResponse:
    """仅管理员可访问"""
    if current_user.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="需要管理员权限")
    return current_user


def get_client_ip(request: Request) -> Optional[str]:
    """客户端 IP，优先取反向代理头"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)
