"""
Celery tasks for outbound webhook delivery.
"""

import logging
from typing import Any, Dict
from app.core.celery_app import celery_app
from app.services.notifications import send_webhook

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    name="app.tasks.notification_tasks.deliver_webhook_task",
    max_retries=3,
    default_retry_delay=30,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_backoff_max=600,
    retry_jitter=True
)
def deliver_webhook_task(self, url: str, payload: Dict[str, Any]):
    """
    POST a notification payload to a webhook, retrying with backoff.

    Args:
        url: Webhook URL
        payload: JSON body

    Raises:
        Exception: Re-raised to trigger Celery retry
    """
    event = payload.get("event")
    try:
        logger.info(f"Delivering {event} webhook (attempt {self.request.retries + 1})")
        status_code = send_webhook(url, payload)
        logger.info(f"{event} webhook delivered: HTTP {status_code}")
        return {"status": "success", "event": event, "http_status": status_code}

    except Exception as e:
        logger.error(f"Error delivering {event} webhook: {str(e)}")

        if self.request.retries >= self.max_retries:
            logger.error(f"All retry attempts exhausted for {event} webhook")

        raise
