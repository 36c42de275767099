"""
用户服务
"""
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.models.user import User
from fitpass.repositories.user import UserRepository


class UserService:
    """用户服务类"""

    def __init__(self, db: AsyncSession, users: Optional[UserRepository] = None):
        self.db = db
        self.users = users or UserRepository(db)

    async def get_user(self, user_id: int) -> Optional[User]:
        """获取用户"""
        return await self.users.get_by_id(user_id)

    async def list_admins(self) -> List[User]:
        return await self.users.list_by_role("admin")
