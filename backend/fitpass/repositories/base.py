"""
仓储基类：封装 AsyncSession 上的通用增查操作，业务服务只依赖仓储接口
"""
import logging
from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")
logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """通用仓储，T 为 ORM 模型。

    同一请求内的多个仓储共享一个会话，任一仓储 commit 即提交整个工作单元。
    """

    model: Type[T]

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, id: int) -> Optional[T]:
        """按主键获取"""
        return await self.db.get(self.model, id)

    async def list_all(self) -> List[T]:
        result = await self.db.execute(select(self.model).order_by(self.model.id))
        return list(result.scalars().all())

    async def add(self, entity: T) -> T:
        """加入会话并 flush，获得主键但不提交"""
        self.db.add(entity)
        await self.db.flush()
        return entity

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    async def refresh(self, entity: T) -> T:
        await self.db.refresh(entity)
        return entity
