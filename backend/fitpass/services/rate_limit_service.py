"""
通知限流：按用户、按渠道统计每日发送条数

计数键为 rate:notify:{channel}:user:{user_id}:day:{YYYY-MM-DD}，保留两天。
Redis 不可用时一律放行，只记录告警。
"""
import logging
from datetime import date
from typing import Dict, Optional, Tuple

import redis
from redis.exceptions import RedisError

from fitpass.core.config import settings

logger = logging.getLogger(__name__)

COUNTER_TTL_SECONDS = 86400 * 2

_redis_client: Optional[redis.Redis] = None


def _get_redis() -> Optional[redis.Redis]:
    global _redis_client
    if _redis_client is None:
        try:
            _redis_client = redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)
        except (RedisError, ValueError) as e:
            logger.warning("Redis 不可用，通知限流将放行: %s", e)
    return _redis_client


def _notify_key(user_id: int, channel: str, day: Optional[date] = None) -> str:
    stamp = (day or date.today()).isoformat()
    return f"rate:notify:{channel}:user:{user_id}:day:{stamp}"


def get_notification_usage(user_id: int, channel: str, day: Optional[date] = None) -> int:
    """只读，不计数"""
    client = _get_redis()
    if client is None:
        return 0
    try:
        raw = client.get(_notify_key(user_id, channel, day))
    except RedisError as e:
        logger.warning("读取通知计数失败: %s", e)
        return 0
    return int(raw or 0)


def check_and_incr_notification(
    user_id: int,
    channel: str,
    daily_cap: int,
    day: Optional[date] = None,
) -> Tuple[bool, int, int]:
    """
    计数加一并判断是否超出当日上限，返回 (是否允许, 当前计数, 上限)。
    限流关闭或 Redis 故障时返回 (True, 0, daily_cap)。
    """
    client = _get_redis() if settings.RATE_LIMIT_ENABLED else None
    if client is None:
        return True, 0, daily_cap

    key = _notify_key(user_id, channel, day)
    try:
        count = client.incr(key)
        if count == 1:
            client.expire(key, COUNTER_TTL_SECONDS)
    except RedisError as e:
        logger.warning("通知计数失败，本次放行: %s", e)
        return True, 0, daily_cap
    return count <= daily_cap, count, daily_cap


def get_usage_snapshot(user_id: int, day: Optional[date] = None) -> Dict[str, int]:
    return {ch: get_notification_usage(user_id, ch, day) for ch in settings.notification_channels}
