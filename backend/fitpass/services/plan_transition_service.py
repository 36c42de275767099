"""
商家套餐变更服务

- 升级：立即生效，重置计费周期（今天起 30 天），清除待生效降级，记录一笔成功交易
- 降级：不修改当前套餐，仅登记在当前周期结束日生效的降级计划，记录一笔 0 元待处理交易
- 到期降级由定时任务 apply_due_downgrades 执行
交易流水只追加，不修改。
"""
import logging
import uuid
from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.core.config import settings
from fitpass.models.business_subscription import BusinessSubscription
from fitpass.models.subscription_transaction import SubscriptionTransaction
from fitpass.repositories.billing import BusinessSubscriptionRepository, TransactionRepository
from fitpass.services.plan_catalog import (
    get_plan_details,
    is_plan_downgrade,
    is_plan_upgrade,
    plan_rank,
)

logger = logging.getLogger(__name__)


def _new_order_id(now: datetime) -> str:
    return f"BORD{now.strftime('%Y%m%d')}{uuid.uuid4().hex[:8].upper()}"


class PlanTransitionService:
    """商家套餐变更服务类"""

    def __init__(
        self,
        db: AsyncSession,
        subscriptions: Optional[BusinessSubscriptionRepository] = None,
        transactions: Optional[TransactionRepository] = None,
    ):
        self.db = db
        self.subscriptions = subscriptions or BusinessSubscriptionRepository(db)
        self.transactions = transactions or TransactionRepository(db)

    async def get_subscription(self, business_id: int) -> Optional[BusinessSubscription]:
        return await self.subscriptions.get_by_business(business_id)

    async def _record(
        self,
        business_id: int,
        type: str,
        from_plan: str,
        to_plan: str,
        amount: float,
        status: str,
        payment_method: str,
        description: str,
        now: datetime,
    ) -> SubscriptionTransaction:
        txn = SubscriptionTransaction(
            business_id=business_id,
            type=type,
            from_plan=from_plan,
            to_plan=to_plan,
            amount=amount,
            status=status,
            payment_method=payment_method,
            order_id=_new_order_id(now),
            description=description,
            created_at=now,
        )
        return await self.transactions.append(txn)

    async def init_subscription(
        self,
        business_id: int,
        plan: str = "starter",
        payment_method: str = "N/A",
        now: Optional[datetime] = None,
    ) -> BusinessSubscription:
        """开通商家套餐（已存在则原样返回）"""
        existing = await self.subscriptions.get_by_business(business_id)
        if existing:
            return existing
        details = get_plan_details(plan)
        now = now or datetime.now()
        today = now.date()
        sub = BusinessSubscription(
            business_id=business_id,
            current_plan=plan,
            status="active",
            start_date=today,
            end_date=today + timedelta(days=settings.BILLING_CYCLE_DAYS),
        )
        await self.subscriptions.add(sub)
        await self._record(
            business_id, "new", plan, plan, details["price"], "success", payment_method,
            f"开通 {details['name']} 套餐", now,
        )
        await self.subscriptions.commit()
        logger.info("商家 %s 开通套餐 %s", business_id, plan)
        return sub

    async def upgrade(
        self,
        business_id: int,
        to_plan: str,
        payment_method: str = "online",
        now: Optional[datetime] = None,
    ) -> tuple[BusinessSubscription, SubscriptionTransaction]:
        """升级：立即生效并开启新的计费周期"""
        now = now or datetime.now()
        sub = await self.init_subscription(business_id, now=now)
        from_plan = sub.current_plan
        if not is_plan_upgrade(from_plan, to_plan):
            raise ValueError(f"{to_plan} 不高于当前套餐 {from_plan}，不能作为升级")
        details = get_plan_details(to_plan)

        today = now.date()
        sub.current_plan = to_plan
        sub.status = "active"
        sub.start_date = today
        sub.end_date = today + timedelta(days=settings.BILLING_CYCLE_DAYS)
        sub.clear_scheduled_downgrade()

        txn = await self._record(
            business_id, "upgrade", from_plan, to_plan, details["price"], "success", payment_method,
            f"由 {get_plan_details(from_plan)['name']} 升级至 {details['name']}", now,
        )
        await self.subscriptions.commit()
        logger.info("商家 %s 套餐升级 %s -> %s", business_id, from_plan, to_plan)
        return sub, txn

    async def schedule_downgrade(
        self,
        business_id: int,
        to_plan: str,
        now: Optional[datetime] = None,
    ) -> tuple[BusinessSubscription, SubscriptionTransaction]:
        """登记降级计划：当前套餐保持不变，在本周期结束日生效"""
        sub = await self.subscriptions.get_by_business(business_id)
        if not sub:
            raise ValueError("商家尚未开通套餐")
        from_plan = sub.current_plan
        if not is_plan_downgrade(from_plan, to_plan):
            raise ValueError(f"{to_plan} 不低于当前套餐 {from_plan}，不能作为降级")

        now = now or datetime.now()
        sub.scheduled_to_plan = to_plan
        sub.scheduled_effective_date = sub.end_date
        sub.scheduled_requested_at = now

        txn = await self._record(
            business_id, "downgrade", from_plan, to_plan, 0, "pending", "N/A",
            f"计划由 {get_plan_details(from_plan)['name']} 降级至 {get_plan_details(to_plan)['name']}，"
            f"{sub.end_date.isoformat()} 生效",
            now,
        )
        await self.subscriptions.commit()
        logger.info("商家 %s 计划降级 %s -> %s，生效日 %s", business_id, from_plan, to_plan, sub.end_date)
        return sub, txn

    async def cancel_scheduled_downgrade(self, business_id: int) -> Optional[BusinessSubscription]:
        """撤销降级计划，不记录交易"""
        sub = await self.subscriptions.get_by_business(business_id)
        if not sub:
            return None
        if sub.scheduled_to_plan:
            sub.clear_scheduled_downgrade()
            await self.subscriptions.commit()
            logger.info("商家 %s 撤销降级计划", business_id)
        return sub

    async def change_plan(
        self,
        business_id: int,
        to_plan: str,
        payment_method: str = "online",
        now: Optional[datetime] = None,
    ) -> tuple[BusinessSubscription, SubscriptionTransaction]:
        """按套餐等级自动判断升级或降级"""
        plan_rank(to_plan)
        sub = await self.init_subscription(business_id, now=now)
        if is_plan_upgrade(sub.current_plan, to_plan):
            return await self.upgrade(business_id, to_plan, payment_method, now=now)
        if is_plan_downgrade(sub.current_plan, to_plan):
            return await self.schedule_downgrade(business_id, to_plan, now=now)
        raise ValueError(f"当前已是 {to_plan} 套餐")

    async def apply_due_downgrades(
        self, today: Optional[date] = None, now: Optional[datetime] = None
    ) -> List[BusinessSubscription]:
        """执行已到生效日的降级：新周期从生效日起算，追加一笔成功交易（原待处理交易不修改）"""
        now = now or datetime.now()
        today = today or now.date()
        due = await self.subscriptions.list_due_downgrades(today)
        for sub in due:
            from_plan = sub.current_plan
            to_plan = sub.scheduled_to_plan
            effective = sub.scheduled_effective_date
            details = get_plan_details(to_plan)
            sub.current_plan = to_plan
            sub.status = "active"
            sub.start_date = effective
            sub.end_date = effective + timedelta(days=settings.BILLING_CYCLE_DAYS)
            sub.clear_scheduled_downgrade()
            await self._record(
                sub.business_id, "downgrade", from_plan, to_plan, details["price"], "success", "auto",
                f"降级至 {details['name']} 已于 {effective.isoformat()} 生效", now,
            )
            logger.info("商家 %s 降级生效 %s -> %s", sub.business_id, from_plan, to_plan)
        if due:
            await self.subscriptions.commit()
        return due

    async def get_transactions(self, business_id: int) -> List[SubscriptionTransaction]:
        return await self.transactions.list_by_business(business_id)

    async def get_all_transactions(self, limit: int = 200) -> List[SubscriptionTransaction]:
        return await self.transactions.list_recent(limit)
