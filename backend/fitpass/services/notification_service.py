"""
通知服务：短信 / 邮件 / WhatsApp 渠道（模拟发送，仅记录日志）

发送前依次检查：用户是否开启该渠道、商家是否开启该渠道、用户当日该渠道发送量是否低于商家设置的上限。
商家上限不得超过管理员配置的最大值。
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.core.config import settings
from fitpass.models.notification import (
    BusinessNotificationSettings,
    UserNotificationPreference,
    NotificationLog,
)
from fitpass.repositories.notification import NotificationRepository
from fitpass.schemas.notification import (
    BusinessNotificationSettingsResponse,
    ChannelCaps,
    ChannelFlags,
    NotificationRecipient,
    UserNotificationPreferenceResponse,
)
from fitpass.services import rate_limit_service

logger = logging.getLogger(__name__)

PASS_TYPE_LABELS = {"daily": "日卡", "weekly": "周卡", "monthly": "月卡"}


def _check_channel(channel: str) -> None:
    if channel not in settings.notification_channels:
        raise ValueError(f"不支持的通知渠道: {channel}")


def _deliver(channel: str, address: str, subject: Optional[str], message: str) -> bool:
    """模拟投递：真实环境替换为短信/邮件/WhatsApp 网关调用"""
    if channel == "email":
        logger.info("模拟邮件 -> %s: %s\n%s", address, subject, message)
    else:
        logger.info("模拟%s -> %s: %s", channel, address, message)
    return True


class NotificationService:
    """通知服务类"""

    def __init__(self, db: AsyncSession, notifications: Optional[NotificationRepository] = None):
        self.db = db
        self.notifications = notifications or NotificationRepository(db)

    # ---------- 商家设置 ---------- #
    async def get_business_settings(self, business_id: int) -> BusinessNotificationSettings:
        """获取商家通知设置，未保存过时返回默认值（不落库）"""
        existing = await self.notifications.get_business_settings(business_id)
        if existing:
            return existing
        caps = settings.NOTIFY_DEFAULT_DAILY_CAP
        return BusinessNotificationSettings(
            business_id=business_id,
            sms_enabled=True,
            email_enabled=True,
            whatsapp_enabled=True,
            sms_daily_cap=caps["sms"],
            email_daily_cap=caps["email"],
            whatsapp_daily_cap=caps["whatsapp"],
        )

    async def _get_or_create_business_settings(self, business_id: int) -> BusinessNotificationSettings:
        row = await self.notifications.get_business_settings(business_id)
        if row is None:
            row = await self.get_business_settings(business_id)
            self.db.add(row)
        return row

    async def toggle_business_channel(
        self, business_id: int, channel: str, enabled: bool
    ) -> BusinessNotificationSettings:
        _check_channel(channel)
        row = await self._get_or_create_business_settings(business_id)
        setattr(row, f"{channel}_enabled", enabled)
        await self.db.commit()
        return row

    async def set_business_daily_cap(self, business_id: int, channel: str, cap: int) -> int:
        """设置每用户每日上限，超过管理员最大值时截断。返回实际生效的上限。"""
        _check_channel(channel)
        if cap < 0:
            raise ValueError("每日上限不能为负数")
        max_cap = settings.NOTIFY_MAX_DAILY_CAP[channel]
        clamped = min(cap, max_cap)
        if clamped != cap:
            logger.info("商家 %s 的 %s 上限 %s 超过最大值，已截断为 %s", business_id, channel, cap, clamped)
        row = await self._get_or_create_business_settings(business_id)
        setattr(row, f"{channel}_daily_cap", clamped)
        await self.db.commit()
        return clamped

    def business_settings_response(self, row: BusinessNotificationSettings) -> BusinessNotificationSettingsResponse:
        return BusinessNotificationSettingsResponse(
            business_id=row.business_id,
            channels_enabled=ChannelFlags(
                sms=row.sms_enabled, email=row.email_enabled, whatsapp=row.whatsapp_enabled
            ),
            daily_cap_per_user=ChannelCaps(
                sms=row.sms_daily_cap, email=row.email_daily_cap, whatsapp=row.whatsapp_daily_cap
            ),
            max_allowed_cap=ChannelCaps(**settings.NOTIFY_MAX_DAILY_CAP),
        )

    # ---------- 用户偏好 ---------- #
    async def get_user_preferences(self, user_id: int) -> UserNotificationPreference:
        existing = await self.notifications.get_user_preference(user_id)
        if existing:
            return existing
        return UserNotificationPreference(
            user_id=user_id, sms_enabled=True, email_enabled=True, whatsapp_enabled=True
        )

    async def toggle_user_channel(self, user_id: int, channel: str, enabled: bool) -> UserNotificationPreference:
        _check_channel(channel)
        row = await self.notifications.get_user_preference(user_id)
        if row is None:
            row = await self.get_user_preferences(user_id)
            self.db.add(row)
        setattr(row, f"{channel}_enabled", enabled)
        await self.db.commit()
        return row

    def user_preferences_response(self, row: UserNotificationPreference) -> UserNotificationPreferenceResponse:
        return UserNotificationPreferenceResponse(
            user_id=row.user_id,
            enabled=ChannelFlags(
                sms=row.sms_enabled, email=row.email_enabled, whatsapp=row.whatsapp_enabled
            ),
            daily_usage=rate_limit_service.get_usage_snapshot(row.user_id),
        )

    # ---------- 发送 ---------- #
    async def _daily_cap(self, business_id: Optional[int], channel: str) -> tuple[bool, int]:
        """返回 (商家是否开启该渠道, 每日上限)；平台通知使用管理员默认上限"""
        if business_id is None:
            return True, settings.NOTIFY_DEFAULT_DAILY_CAP[channel]
        biz = await self.get_business_settings(business_id)
        return bool(getattr(biz, f"{channel}_enabled")), int(getattr(biz, f"{channel}_daily_cap"))

    async def can_send(
        self,
        user_id: int,
        business_id: Optional[int],
        channel: str,
        day: Optional[date] = None,
    ) -> bool:
        """是否可向该用户发送（只读检查，不占用额度）"""
        _check_channel(channel)
        prefs = await self.get_user_preferences(user_id)
        if not getattr(prefs, f"{channel}_enabled"):
            return False
        business_enabled, cap = await self._daily_cap(business_id, channel)
        if not business_enabled:
            return False
        if not settings.RATE_LIMIT_ENABLED:
            return True
        return rate_limit_service.get_notification_usage(user_id, channel, day) < cap

    async def notify(
        self,
        channel: str,
        recipient: NotificationRecipient,
        message: str,
        business_id: Optional[int] = None,
        type: str = "announcement",
        subject: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        day: Optional[date] = None,
    ) -> bool:
        """发送一条通知，成功返回 True"""
        _check_channel(channel)
        prefs = await self.get_user_preferences(recipient.user_id)
        if not getattr(prefs, f"{channel}_enabled"):
            return False
        business_enabled, cap = await self._daily_cap(business_id, channel)
        if not business_enabled:
            return False

        address = recipient.email if channel == "email" else recipient.phone
        if not address:
            return False

        allowed, count, limit = rate_limit_service.check_and_incr_notification(
            recipient.user_id, channel, cap, day
        )
        if not allowed:
            logger.warning(
                "用户 %s 的 %s 通知已达每日上限（%s/%s），本条不发送",
                recipient.user_id, channel, count, limit,
            )
            return False

        if not _deliver(channel, address, subject, message):
            return False

        now = datetime.now()
        await self.notifications.add(
            NotificationLog(
                user_id=recipient.user_id,
                business_id=business_id,
                channel=channel,
                type=type,
                subject=subject,
                message=message,
                status="sent",
                extra=metadata,
                sent_at=now,
            )
        )
        await self.notifications.prune_logs(settings.NOTIFICATION_LOG_RETENTION)
        await self.db.commit()
        return True

    async def _broadcast(
        self,
        recipient: NotificationRecipient,
        business_id: Optional[int],
        type: str,
        subject: str,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, bool]:
        results = {}
        for channel in settings.notification_channels:
            results[channel] = await self.notify(
                channel,
                recipient,
                message,
                business_id=business_id,
                type=type,
                subject=subject,
                metadata=metadata,
            )
        return results

    async def send_booking_confirmation(self, booking, venue, recipient: NotificationRecipient) -> Dict[str, bool]:
        """预约成功通知，各渠道分别尝试"""
        subject = f"预约成功 - {venue.name}"
        time_range = ""
        if booking.start_time and booking.end_time:
            time_range = f"\n时间：{booking.start_time} - {booking.end_time}"
        message = (
            f"预约成功！\n场馆：{venue.name}\n日期：{booking.booking_date.isoformat()}"
            f"{time_range}\n预约编号：{booking.id}"
        )
        return await self._broadcast(
            recipient, venue.owner_id, "booking_confirmation", subject, message,
            metadata={"booking_id": booking.id},
        )

    async def send_pass_purchase(self, subscription, venue, recipient: NotificationRecipient) -> Dict[str, bool]:
        """通行证购买成功通知"""
        label = PASS_TYPE_LABELS.get(subscription.pass_type, subscription.pass_type)
        subject = f"购买成功 - {venue.name}"
        message = (
            f"通行证购买成功！\n场馆：{venue.name}\n类型：{label}\n金额：₹{float(subscription.price):g}\n"
            f"有效期：{subscription.start_date.isoformat()} 至 {subscription.end_date.isoformat()}"
        )
        return await self._broadcast(
            recipient, venue.owner_id, "pass_purchase", subject, message,
            metadata={"subscription_id": subscription.id},
        )

    async def send_pass_approval_decision(
        self, business_user, pass_type: str, approved: bool
    ) -> bool:
        """审批结果通知商家（邮件）"""
        label = PASS_TYPE_LABELS.get(pass_type, pass_type)
        verdict = "已通过" if approved else "未通过"
        return await self.notify(
            "email",
            NotificationRecipient(
                user_id=business_user.id,
                name=business_user.display_name,
                email=business_user.email,
                phone=business_user.phone,
            ),
            f"您申请开通的{label}审批{verdict}。",
            type="pass_approval",
            subject=f"{label}审批{verdict}",
            metadata={"pass_type": pass_type, "approved": approved},
        )

    async def notify_admins_pass_request(self, admins: List, business_user, pass_type: str) -> int:
        """商家申请开通通行证时通知所有管理员，返回成功发送数"""
        label = PASS_TYPE_LABELS.get(pass_type, pass_type)
        sent = 0
        for admin in admins:
            ok = await self.notify(
                "email",
                NotificationRecipient(user_id=admin.id, name=admin.username, email=admin.email),
                f"商家 {business_user.username} 申请开通{label}，请审批。",
                type="pass_approval_request",
                subject=f"待审批：{label}",
                metadata={"business_id": business_user.id, "pass_type": pass_type},
            )
            sent += int(ok)
        return sent

    async def get_notification_logs(
        self, user_id: Optional[int] = None, business_id: Optional[int] = None, limit: int = 100
    ) -> List[NotificationLog]:
        return await self.notifications.list_logs(user_id=user_id, business_id=business_id, limit=limit)
