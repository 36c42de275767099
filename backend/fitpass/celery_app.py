"""
Celery 应用：worker 执行后台任务，beat 定时执行到期的套餐降级

broker 与结果后端默认复用 REDIS_URL。
"""
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from celery import Celery

from fitpass.core.config import settings


def _with_ssl_cert_reqs(url: str, default: str = "CERT_NONE") -> str:
    """rediss:// 地址缺少 ssl_cert_reqs 时 Celery 的 Redis 后端拒绝启动"""
    if not url or not url.strip().lower().startswith("rediss://"):
        return url
    parts = urlparse(url)
    query = parse_qs(parts.query)
    query.setdefault("ssl_cert_reqs", [default])
    return urlunparse(parts._replace(query=urlencode(query, doseq=True)))


celery_app = Celery(
    "fitpass",
    broker=_with_ssl_cert_reqs(settings.CELERY_BROKER_URL or settings.REDIS_URL),
    backend=_with_ssl_cert_reqs(settings.CELERY_RESULT_BACKEND or settings.REDIS_URL),
    include=["fitpass.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    enable_utc=True,
    timezone="UTC",
    task_acks_late=True,
    worker_concurrency=2,
    beat_schedule={
        "apply-scheduled-downgrades": {
            "task": "billing.apply_scheduled_downgrades",
            "schedule": float(settings.DOWNGRADE_SWEEP_INTERVAL_SECONDS),
        },
    },
)
