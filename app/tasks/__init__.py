"""
Celery tasks package.

- notification_tasks: outbound webhook delivery for job events
"""

from app.tasks import notification_tasks

__all__ = ["notification_tasks"]
