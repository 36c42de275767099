"""会员通行证仓储"""
from datetime import date
from typing import List, Optional

from sqlalchemy import select, and_

from fitpass.models.subscription import Subscription
from fitpass.repositories.base import BaseRepository


class SubscriptionRepository(BaseRepository[Subscription]):
    model = Subscription

    async def list_by_user(self, user_id: int) -> List[Subscription]:
        result = await self.db.execute(
            select(Subscription)
            .where(Subscription.user_id == user_id)
            .order_by(Subscription.end_date.desc(), Subscription.id.desc())
        )
        return list(result.scalars().all())

    async def list_by_venue(self, venue_id: int, active_on: Optional[date] = None) -> List[Subscription]:
        """场馆的全部会员；传 active_on 时只返回当日仍有效的"""
        stmt = select(Subscription).where(Subscription.venue_id == venue_id)
        if active_on is not None:
            stmt = stmt.where(
                and_(Subscription.status == "active", Subscription.end_date >= active_on)
            )
        result = await self.db.execute(stmt.order_by(Subscription.end_date.desc(), Subscription.id.desc()))
        return list(result.scalars().all())

    async def find_active(self, user_id: int, venue_id: int, today: date) -> Optional[Subscription]:
        """未取消且到期日不早于今天的订阅，多条时取到期最晚的一条"""
        result = await self.db.execute(
            select(Subscription)
            .where(
                and_(
                    Subscription.user_id == user_id,
                    Subscription.venue_id == venue_id,
                    Subscription.status == "active",
                    Subscription.end_date >= today,
                )
            )
            .order_by(Subscription.end_date.desc(), Subscription.id.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def find_latest_lapsed(self, user_id: int, venue_id: int, today: date) -> Optional[Subscription]:
        """未取消但已过到期日的最近一条订阅"""
        result = await self.db.execute(
            select(Subscription)
            .where(
                and_(
                    Subscription.user_id == user_id,
                    Subscription.venue_id == venue_id,
                    Subscription.status == "active",
                    Subscription.end_date < today,
                )
            )
            .order_by(Subscription.end_date.desc(), Subscription.id.desc())
            .limit(1)
        )
        return result.scalars().first()
