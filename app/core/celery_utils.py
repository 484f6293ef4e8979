"""
Queueing Celery tasks from request handlers.

Notifications are best effort: when the broker is down the request still
succeeds and the failure is only logged.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from typing import Optional
from celery import Task
from kombu import Connection

from app.core.config import settings

logger = logging.getLogger(__name__)

# Publishing runs off the event loop; kombu's blocking connect would stall it
_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="task_publisher")

PUBLISH_TIMEOUT_SECONDS = 5
PUBLISH_RETRY_POLICY = {
    "max_retries": 3,
    "interval_start": 0,
    "interval_step": 0.2,
    "interval_max": 0.2,
}


def _publish(task: Task, args: tuple, kwargs: dict) -> str:
    """Send one task message on its own broker connection and return the task id."""
    with Connection(settings.REDIS_URL) as conn:
        result = task.apply_async(
            args=args,
            kwargs=kwargs,
            connection=conn,
            retry=True,
            retry_policy=PUBLISH_RETRY_POLICY,
        )
        return result.id


def queue_task_safely(task: Task, *args, **kwargs) -> bool:
    """
    Queue a task, reporting broker problems as False instead of raising.

    Args:
        task: Celery task to queue
        *args: Positional task arguments
        **kwargs: Keyword task arguments

    Returns:
        True if the message was published
    """
    future = _executor.submit(_publish, task, args, kwargs)
    task_id: Optional[str] = None

    try:
        task_id = future.result(timeout=PUBLISH_TIMEOUT_SECONDS)
    except FuturesTimeoutError:
        logger.error(f"Timed out publishing {task.name} after {PUBLISH_TIMEOUT_SECONDS}s")
    except Exception as e:
        logger.error(f"Failed to queue task {task.name}: {e}")

    if task_id is None:
        return False

    logger.info(f"Task {task.name} queued: {task_id}")
    return True
