"""
商家套餐后台任务：执行已到生效日的降级计划
由 celery beat 按 DOWNGRADE_SWEEP_INTERVAL_SECONDS 周期触发，也可手动调用。
任务内必须使用 create_async_engine_and_session_for_celery 创建的 engine/session。
"""
import asyncio
import logging
from datetime import date, datetime
from typing import Any, Dict, Optional

from fitpass.celery_app import celery_app
from fitpass.core.database import create_async_engine_and_session_for_celery
from fitpass.services.plan_transition_service import PlanTransitionService

logger = logging.getLogger(__name__)


def _run_async(coro):
    """在同步上下文中运行异步协程"""
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _with_celery_db(async_fn):
    """创建当前 loop 的 engine/session 执行 async_fn(db)，结束后 dispose"""
    async def _run():
        engine, session_factory = create_async_engine_and_session_for_celery()
        try:
            async with session_factory() as db:
                return await async_fn(db)
        finally:
            await engine.dispose()
    return _run


async def sweep_due_downgrades(
    db, today: Optional[date] = None, now: Optional[datetime] = None
) -> Dict[str, Any]:
    applied = await PlanTransitionService(db).apply_due_downgrades(today, now=now)
    return {"applied": len(applied), "business_ids": [s.business_id for s in applied]}


@celery_app.task(bind=True, name="billing.apply_scheduled_downgrades")
def apply_scheduled_downgrades_task(self, today: Optional[str] = None) -> Dict[str, Any]:
    """today 为 ISO 日期字符串，不传则取当天"""
    day = date.fromisoformat(today) if today else None

    async def _run(db):
        return await sweep_due_downgrades(db, day)

    try:
        result = _run_async(_with_celery_db(_run)())
    except Exception as e:
        logger.exception("apply_scheduled_downgrades_task failed: %s", e)
        raise
    logger.info("到期降级执行完成: %s", result)
    return result
