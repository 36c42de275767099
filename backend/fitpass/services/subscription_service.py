"""
会员通行证服务：购买、商家开卡、续费、取消

状态只持久化 active / cancelled，返回给前端的状态在读取时由 membership_status 推导。
取消为终态，不可恢复；月卡自开始日起 30 天内不可取消。
"""
import logging
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.core.config import settings
from fitpass.models.subscription import Subscription
from fitpass.repositories.subscription import SubscriptionRepository
from fitpass.repositories.venue import VenueRepository
from fitpass.schemas.notification import NotificationRecipient
from fitpass.schemas.subscription import (
    AssignSubscriptionRequest,
    CancellationResult,
    DeletionCheck,
    SubscriptionResponse,
)
from fitpass.services.membership_status import (
    calculate_end_date,
    days_remaining,
    resolve_membership_status,
)
from fitpass.services.notification_service import NotificationService
from fitpass.services.pass_config_service import PassConfigService

logger = logging.getLogger(__name__)


def to_response(sub: Subscription, today: Optional[date] = None) -> SubscriptionResponse:
    """转换为响应对象，带推导后的状态与剩余天数"""
    today = today or date.today()
    return SubscriptionResponse(
        id=sub.id,
        user_id=sub.user_id,
        venue_id=sub.venue_id,
        pass_type=sub.pass_type,
        start_date=sub.start_date,
        end_date=sub.end_date,
        price=float(sub.price or 0),
        status=resolve_membership_status(sub.end_date, sub.status, today),
        payment_method=sub.payment_method,
        member_name=sub.member_name,
        days_remaining=0 if sub.status == "cancelled" else days_remaining(sub.end_date, today),
        created_at=sub.created_at,
    )


class SubscriptionService:
    """会员通行证服务类"""

    def __init__(
        self,
        db: AsyncSession,
        subscriptions: Optional[SubscriptionRepository] = None,
        venues: Optional[VenueRepository] = None,
        pass_configs: Optional[PassConfigService] = None,
        notifications: Optional[NotificationService] = None,
    ):
        self.db = db
        self.subscriptions = subscriptions or SubscriptionRepository(db)
        self.venues = venues or VenueRepository(db)
        self.pass_configs = pass_configs or PassConfigService(db)
        self.notifications = notifications or NotificationService(db)

    async def get_subscription(self, subscription_id: int) -> Optional[Subscription]:
        return await self.subscriptions.get_by_id(subscription_id)

    async def lookup_active_subscription(
        self, user_id: int, venue_id: int, today: Optional[date] = None
    ) -> Optional[Subscription]:
        return await self.subscriptions.find_active(user_id, venue_id, today or date.today())

    async def get_user_subscriptions(self, user_id: int) -> List[Subscription]:
        return await self.subscriptions.list_by_user(user_id)

    async def get_venue_subscriptions(
        self, venue_id: int, active_only: bool = False, today: Optional[date] = None
    ) -> List[Subscription]:
        active_on = (today or date.today()) if active_only else None
        return await self.subscriptions.list_by_venue(venue_id, active_on=active_on)

    async def purchase_pass(
        self,
        user,
        venue_id: int,
        pass_type: str,
        payment_method: str = "online",
        today: Optional[date] = None,
    ) -> tuple[Subscription, Dict[str, bool]]:
        """用户购买通行证：该类型须经商家开启且管理员审批"""
        venue = await self.venues.get_by_id(venue_id)
        if not venue or not venue.is_active:
            raise LookupError("场馆不存在")
        config = await self.pass_configs.get_config(venue.owner_id)
        if not await self.pass_configs.is_pass_type_active(venue.owner_id, pass_type):
            raise ValueError(f"该场馆暂未开放{pass_type}通行证")

        today = today or date.today()
        sub = Subscription(
            user_id=user.id,
            venue_id=venue_id,
            pass_type=pass_type,
            start_date=today,
            end_date=calculate_end_date(today, pass_type),
            price=config.price_of(pass_type),
            status="active",
            payment_method=payment_method,
            member_name=getattr(user, "full_name", None) or user.username,
            member_email=user.email,
            member_phone=getattr(user, "phone", None),
        )
        await self.subscriptions.add(sub)
        await self.subscriptions.commit()
        await self.subscriptions.refresh(sub)
        logger.info("用户 %s 购买场馆 %s 的 %s 通行证", user.id, venue_id, pass_type)

        sent = await self.notifications.send_pass_purchase(
            sub,
            venue,
            NotificationRecipient(
                user_id=user.id,
                name=sub.member_name,
                email=user.email,
                phone=getattr(user, "phone", None),
            ),
        )
        return sub, sent

    async def assign_subscription(
        self,
        business_user_id: int,
        data: AssignSubscriptionRequest,
        today: Optional[date] = None,
    ) -> Subscription:
        """商家为线下现金会员开卡"""
        venue = await self.venues.get_by_id(data.venue_id)
        if not venue:
            raise LookupError("场馆不存在")
        if venue.owner_id != business_user_id:
            raise PermissionError("只能为自己的场馆开卡")

        today = today or date.today()
        sub = Subscription(
            user_id=None,
            venue_id=data.venue_id,
            pass_type=data.pass_type,
            start_date=today,
            end_date=calculate_end_date(today, data.pass_type),
            price=data.price,
            status="active",
            payment_method="cash",
            member_name=data.member_name,
            member_email=data.member_email,
            member_phone=data.member_phone,
            created_by=business_user_id,
        )
        await self.subscriptions.add(sub)
        await self.subscriptions.commit()
        await self.subscriptions.refresh(sub)
        logger.info("商家 %s 为 %s 开通 %s 通行证", business_user_id, data.member_name, data.pass_type)
        return sub

    async def can_delete_subscription(
        self, subscription_id: int, today: Optional[date] = None
    ) -> DeletionCheck:
        """是否可取消：月卡须持有满 30 天"""
        sub = await self.subscriptions.get_by_id(subscription_id)
        if not sub:
            return DeletionCheck(can_delete=False, reason="订阅不存在")
        if sub.pass_type != "monthly":
            return DeletionCheck(can_delete=True)

        today = today or date.today()
        hold_days = settings.MONTHLY_MIN_HOLD_DAYS
        days_since_start = (today - sub.start_date).days
        if days_since_start < hold_days:
            return DeletionCheck(
                can_delete=False,
                reason=f"月卡开通后 {hold_days} 天内不可取消",
                days_remaining=hold_days - days_since_start,
            )
        return DeletionCheck(can_delete=True)

    async def can_manage(self, sub: Subscription, actor_id: int, actor_role: str) -> bool:
        if actor_role == "admin" or sub.user_id == actor_id:
            return True
        venue = await self.venues.get_by_id(sub.venue_id)
        return bool(venue and venue.owner_id == actor_id)

    async def cancel_subscription(
        self,
        subscription_id: int,
        actor_id: int,
        actor_role: str = "user",
        today: Optional[date] = None,
    ) -> CancellationResult:
        """取消订阅，失败时返回明确原因而非静默忽略"""
        today = today or date.today()
        sub = await self.subscriptions.get_by_id(subscription_id)
        if not sub:
            return CancellationResult(success=False, reason="NOT_FOUND", message="订阅不存在")
        if not await self.can_manage(sub, actor_id, actor_role):
            return CancellationResult(success=False, reason="UNAUTHORIZED", message="无权操作该订阅")
        if sub.status == "cancelled":
            return CancellationResult(
                success=False, reason="ALREADY_CANCELLED", message="订阅已取消",
                subscription=to_response(sub, today),
            )

        check = await self.can_delete_subscription(subscription_id, today)
        if not check.can_delete:
            logger.warning("订阅 %s 无法取消: %s", subscription_id, check.reason)
            return CancellationResult(
                success=False,
                reason="MIN_HOLD_PERIOD",
                message=check.reason,
                days_remaining=check.days_remaining,
                subscription=to_response(sub, today),
            )

        sub.status = "cancelled"
        await self.subscriptions.commit()
        logger.info("订阅 %s 已被用户 %s 取消", subscription_id, actor_id)
        return CancellationResult(success=True, subscription=to_response(sub, today))

    async def renew_subscription(
        self,
        subscription_id: int,
        pass_type: str,
        price: float,
        today: Optional[date] = None,
    ) -> Subscription:
        """续费：从原到期日与今天中较晚者起顺延，可同时变更类型与价格"""
        sub = await self.subscriptions.get_by_id(subscription_id)
        if not sub:
            raise LookupError("订阅不存在")
        if sub.status == "cancelled":
            raise ValueError("已取消的订阅不能续费")
        if price < 0:
            raise ValueError("价格不能为负数")

        today = today or date.today()
        base = max(sub.end_date, today)
        sub.end_date = calculate_end_date(base, pass_type)
        sub.pass_type = pass_type
        sub.price = price
        await self.subscriptions.commit()
        logger.info("订阅 %s 续费至 %s（%s）", subscription_id, sub.end_date, pass_type)
        return sub
