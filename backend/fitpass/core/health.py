"""
依赖连通性检查，供 /health 使用

Redis 不可用只会让通知限流放行，服务整体标记为 degraded 而非失败。
"""
import logging
from typing import Dict, Tuple

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


async def check_db() -> Tuple[bool, str]:
    from fitpass.core.database import engine

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("数据库不可用: %s", e)
        return False, str(e)
    return True, "ok"


def check_redis() -> Tuple[bool, str]:
    from redis.exceptions import RedisError
    from fitpass.services.rate_limit_service import _get_redis

    client = _get_redis()
    if client is None:
        return False, "Redis 客户端未初始化"
    try:
        client.ping()
    except RedisError as e:
        logger.warning("Redis 不可用，通知限流将放行: %s", e)
        return False, str(e)
    return True, "ok"


async def check_dependencies() -> Dict[str, Dict]:
    db_ok, db_msg = await check_db()
    redis_ok, redis_msg = check_redis()
    return {
        "database": {"ok": db_ok, "message": db_msg},
        "redis": {"ok": redis_ok, "message": redis_msg},
    }
