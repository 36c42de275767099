"""
会员状态推导：根据到期日与当前日期计算 active / overdue / expired / cancelled

规则：
- cancelled 为人工终态，原样保留，不重新计算
- 到期日在今天之后：active
- 到期日当天起 7 天内（含第 0 天与第 7 天）：overdue（宽限期）
- 超过 7 天：expired
比较按本地日历日进行，与具体时刻无关。
"""
from datetime import date, datetime, timedelta
from typing import Optional, Union

from fitpass.core.config import settings

DateLike = Union[date, datetime, str]

MEMBERSHIP_STATUSES = ("active", "overdue", "expired", "cancelled")


def to_date(value: DateLike) -> date:
    """统一转换为日历日（datetime 截断到当天，字符串按 ISO 解析）"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value)).date()


def resolve_membership_status(
    end_date: DateLike,
    current_status: Optional[str] = None,
    current_date: Optional[DateLike] = None,
) -> str:
    """计算会员状态"""
    if current_status == "cancelled":
        return "cancelled"

    end = to_date(end_date)
    today = to_date(current_date) if current_date is not None else date.today()
    diff_days = (today - end).days

    if diff_days < 0:
        return "active"
    if diff_days <= settings.MEMBERSHIP_GRACE_DAYS:
        return "overdue"
    return "expired"


def is_valid_membership_status(status: str) -> bool:
    return status in MEMBERSHIP_STATUSES


def days_remaining(end_date: DateLike, today: Optional[DateLike] = None) -> int:
    """距到期还剩的整天数，已过期返回 0"""
    end = to_date(end_date)
    current = to_date(today) if today is not None else date.today()
    return max(0, (end - current).days)


def calculate_end_date(start: DateLike, pass_type: str) -> date:
    """按通行证类型计算到期日；未知类型按日卡处理"""
    days = settings.PASS_DURATION_DAYS.get(pass_type, settings.PASS_DURATION_DAYS["daily"])
    return to_date(start) + timedelta(days=days)
