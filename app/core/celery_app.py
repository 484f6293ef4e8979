"""
Celery application.

Redis is broker and result backend. The worker only delivers outbound
webhooks; candidate intake runs inside the API request.

Run with: celery -A app.core.celery_app worker -Q notifications
"""

from celery import Celery
from app.core.config import settings

celery_app = Celery(
    "shortlist_worker",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["app.tasks.notification_tasks"]
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Webhook tasks go to their own queue
    task_routes={"app.tasks.notification_tasks.*": {"queue": "notifications"}},

    # A webhook POST is bounded by WEBHOOK_TIMEOUT_SECONDS; these only catch hangs
    task_time_limit=120,
    task_soft_time_limit=90,
    task_acks_late=True,

    result_expires=3600,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=200,
)
