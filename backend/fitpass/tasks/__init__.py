"""
Celery 任务模块：商家套餐到期降级
"""
from fitpass.tasks.billing_tasks import apply_scheduled_downgrades_task

__all__ = ["apply_scheduled_downgrades_task"]
