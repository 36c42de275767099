"""通行证配置仓储"""
from typing import Optional

from sqlalchemy import select

from fitpass.models.pass_config import PassConfig
from fitpass.repositories.base import BaseRepository


class PassConfigRepository(BaseRepository[PassConfig]):
    model = PassConfig

    async def get_by_business(self, business_id: int) -> Optional[PassConfig]:
        result = await self.db.execute(
            select(PassConfig).where(PassConfig.business_id == business_id)
        )
        return result.scalar_one_or_none()
