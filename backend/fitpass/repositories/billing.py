"""商家套餐与交易流水仓储"""
from datetime import date
from typing import List, Optional

from sqlalchemy import select, and_

from fitpass.models.business_subscription import BusinessSubscription
from fitpass.models.subscription_transaction import SubscriptionTransaction
from fitpass.repositories.base import BaseRepository


class BusinessSubscriptionRepository(BaseRepository[BusinessSubscription]):
    model = BusinessSubscription

    async def get_by_business(self, business_id: int) -> Optional[BusinessSubscription]:
        result = await self.db.execute(
            select(BusinessSubscription).where(BusinessSubscription.business_id == business_id)
        )
        return result.scalar_one_or_none()

    async def list_due_downgrades(self, today: date) -> List[BusinessSubscription]:
        """已到生效日的计划降级"""
        result = await self.db.execute(
            select(BusinessSubscription)
            .where(
                and_(
                    BusinessSubscription.scheduled_to_plan.is_not(None),
                    BusinessSubscription.scheduled_effective_date <= today,
                )
            )
            .order_by(BusinessSubscription.id)
        )
        return list(result.scalars().all())


class TransactionRepository(BaseRepository[SubscriptionTransaction]):
    """交易流水只追加：没有更新与删除方法"""
    model = SubscriptionTransaction

    async def append(self, txn: SubscriptionTransaction) -> SubscriptionTransaction:
        return await self.add(txn)

    async def list_by_business(self, business_id: int) -> List[SubscriptionTransaction]:
        result = await self.db.execute(
            select(SubscriptionTransaction)
            .where(SubscriptionTransaction.business_id == business_id)
            .order_by(SubscriptionTransaction.created_at.desc(), SubscriptionTransaction.id.desc())
        )
        return list(result.scalars().all())

    async def list_recent(self, limit: int = 200) -> List[SubscriptionTransaction]:
        result = await self.db.execute(
            select(SubscriptionTransaction)
            .order_by(SubscriptionTransaction.created_at.desc(), SubscriptionTransaction.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
