"""用户仓储"""
from typing import List, Optional

from sqlalchemy import select

from fitpass.models.user import User
from fitpass.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def list_by_role(self, role: str) -> List[User]:
        result = await self.db.execute(
            select(User).where(User.role == role, User.is_active == True).order_by(User.id)  # noqa: E712
        )
        return list(result.scalars().all())
