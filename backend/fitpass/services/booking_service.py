"""
预约服务：预约资格校验与创建预约
"""
import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.models.booking import Booking
from fitpass.repositories.booking import BookingRepository
from fitpass.repositories.subscription import SubscriptionRepository
from fitpass.repositories.venue import VenueRepository
from fitpass.schemas.booking import (
    BookingCancellationResult,
    BookingCreate,
    BookingCreateResult,
    BookingEligibility,
    BookingResponse,
    EligibilityReason,
    EligibleSubscription,
)
from fitpass.schemas.notification import NotificationRecipient
from fitpass.services.membership_status import days_remaining, to_date
from fitpass.services.notification_service import NotificationService, PASS_TYPE_LABELS

logger = logging.getLogger(__name__)


class BookingService:
    """预约服务类"""

    def __init__(
        self,
        db: AsyncSession,
        subscriptions: Optional[SubscriptionRepository] = None,
        bookings: Optional[BookingRepository] = None,
        venues: Optional[VenueRepository] = None,
        notifications: Optional[NotificationService] = None,
    ):
        self.db = db
        self.subscriptions = subscriptions or SubscriptionRepository(db)
        self.bookings = bookings or BookingRepository(db)
        self.venues = venues or VenueRepository(db)
        self.notifications = notifications or NotificationService(db)

    async def check_eligibility(
        self,
        owner_id: int,
        target_id: int,
        booking_date,
        requester=None,
        today: Optional[date] = None,
    ) -> BookingEligibility:
        """
        校验用户能否在指定日期预约某场馆。失败通过 reason 返回，不抛异常：
        - UNAUTHORIZED：请求者既不是本人也不是管理员
        - NO_SUBSCRIPTION：该场馆没有任何未取消的订阅
        - SUBSCRIPTION_EXPIRED：没有有效订阅，但有已过期的订阅
        - DATE_OUTSIDE_RANGE：预约日期晚于订阅到期日
        """
        if requester is not None and requester.id != owner_id and requester.role != "admin":
            return BookingEligibility(
                allowed=False,
                reason=EligibilityReason.UNAUTHORIZED,
                message="无权为其他用户预约",
            )

        today = today or date.today()
        target_date = to_date(booking_date)
        sub = await self.subscriptions.find_active(owner_id, target_id, today)

        if sub is None:
            lapsed = await self.subscriptions.find_latest_lapsed(owner_id, target_id, today)
            if lapsed is not None:
                return BookingEligibility(
                    allowed=False,
                    reason=EligibilityReason.SUBSCRIPTION_EXPIRED,
                    message=f"您的通行证已于 {lapsed.end_date.isoformat()} 到期，请重新购买",
                    subscription=EligibleSubscription(pass_type=lapsed.pass_type, end_date=lapsed.end_date),
                )
            return BookingEligibility(
                allowed=False,
                reason=EligibilityReason.NO_SUBSCRIPTION,
                message="您在该场馆没有有效通行证，请先购买",
            )

        summary = EligibleSubscription(pass_type=sub.pass_type, end_date=sub.end_date)
        if target_date > sub.end_date:
            label = PASS_TYPE_LABELS.get(sub.pass_type, sub.pass_type)
            return BookingEligibility(
                allowed=False,
                reason=EligibilityReason.DATE_OUTSIDE_RANGE,
                message=f"您的{label}将于 {sub.end_date.isoformat()} 到期，请续费后再预约该日期",
                subscription=summary,
            )

        return BookingEligibility(allowed=True, subscription=summary)

    async def has_monthly_subscription(self, user_id: int, venue_id: int, today: Optional[date] = None) -> bool:
        sub = await self.subscriptions.find_active(user_id, venue_id, today or date.today())
        return sub is not None and sub.pass_type == "monthly"

    async def get_subscription_type(self, user_id: int, venue_id: int, today: Optional[date] = None) -> Optional[str]:
        sub = await self.subscriptions.find_active(user_id, venue_id, today or date.today())
        return sub.pass_type if sub else None

    async def get_subscription_days_remaining(
        self, user_id: int, venue_id: int, today: Optional[date] = None
    ) -> int:
        today = today or date.today()
        sub = await self.subscriptions.find_active(user_id, venue_id, today)
        if not sub:
            return 0
        return days_remaining(sub.end_date, today)

    async def create_booking(
        self, user, data: BookingCreate, today: Optional[date] = None
    ) -> BookingCreateResult:
        """校验通过后创建预约并发送确认通知"""
        today = today or date.today()
        eligibility = await self.check_eligibility(user.id, data.venue_id, data.booking_date, today=today)
        if not eligibility.allowed:
            logger.warning(
                "用户 %s 预约场馆 %s 被拒绝: %s", user.id, data.venue_id, eligibility.reason.value
            )
            return BookingCreateResult(eligibility=eligibility)

        sub = await self.subscriptions.find_active(user.id, data.venue_id, today)
        booking = Booking(
            user_id=user.id,
            venue_id=data.venue_id,
            subscription_id=sub.id,
            booking_date=data.booking_date,
            start_time=data.start_time,
            end_time=data.end_time,
            status="confirmed",
        )
        await self.bookings.add(booking)
        await self.bookings.commit()
        await self.bookings.refresh(booking)
        logger.info("用户 %s 预约场馆 %s（%s）", user.id, data.venue_id, data.booking_date)

        venue = await self.venues.get_by_id(data.venue_id)
        sent = await self.notifications.send_booking_confirmation(
            booking,
            venue,
            NotificationRecipient(
                user_id=user.id,
                name=getattr(user, "full_name", None) or user.username,
                email=user.email,
                phone=getattr(user, "phone", None),
            ),
        )
        return BookingCreateResult(
            eligibility=eligibility,
            booking=BookingResponse.model_validate(booking),
            notifications=sent,
        )

    async def list_user_bookings(self, user_id: int) -> List[Booking]:
        return await self.bookings.list_by_user(user_id)

    async def get_booking(self, booking_id: int, user_id: Optional[int] = None) -> Optional[Booking]:
        """按 id 查询预约；传入 user_id 时只返回该用户自己的预约"""
        booking = await self.bookings.get_by_id(booking_id)
        if booking is None or (user_id is not None and booking.user_id != user_id):
            return None
        return booking

    async def cancel_booking(
        self,
        booking_id: int,
        actor_id: int,
        actor_role: str = "user",
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> BookingCancellationResult:
        """取消预约，仅预约人或管理员可操作；已取消的预约不可重复取消"""
        booking = await self.bookings.get_by_id(booking_id)
        if booking is None:
            return BookingCancellationResult(success=False, reason="NOT_FOUND", message="预约不存在")
        if actor_role != "admin" and booking.user_id != actor_id:
            return BookingCancellationResult(success=False, reason="UNAUTHORIZED", message="无权取消该预约")
        if booking.status == "cancelled":
            return BookingCancellationResult(
                success=False,
                reason="ALREADY_CANCELLED",
                message="预约已取消",
                booking=BookingResponse.model_validate(booking),
            )

        booking.status = "cancelled"
        booking.cancelled_at = now or datetime.now()
        booking.cancel_reason = reason
        await self.bookings.commit()
        logger.info("预约 %s 已被用户 %s 取消", booking_id, actor_id)
        return BookingCancellationResult(success=True, booking=BookingResponse.model_validate(booking))
