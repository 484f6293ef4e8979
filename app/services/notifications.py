"""
Outbound webhook notifications for job events.

Two targets:
- JOB_WEBHOOK_URL receives new job submissions
- GHL_WEBHOOK_URL (CRM) receives every status change

Notifications are queued on Celery after the database change has committed.
Queueing or delivery failures are logged and never reach the caller.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.models.job import Job
from app.models.user import User

logger = logging.getLogger(__name__)

USER_AGENT = "ShortlistApp/1.0"


def _job_data(job: Job) -> Dict[str, Any]:
    return {
        "id": str(job.id),
        "title": job.title,
        "company_name": job.company_name,
        "seniority_level": job.seniority_level.value if job.seniority_level else None,
        "key_skills": list(job.key_skills or []),
        "candidates_requested": job.candidates_requested,
        "location": job.location,
        "work_arrangement": job.work_arrangement.value if job.work_arrangement else None,
        "status": job.status.value,
        "sourcer_id": str(job.sourcer_id) if job.sourcer_id else None,
        "completion_link": job.completion_link,
    }


def _user_data(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {
        "id": str(user.id),
        "email": user.email,
        "name": user.display_name,
        "role": user.role.value,
    }


def build_job_submitted_payload(job: Job, submitter: Optional[User] = None) -> Dict[str, Any]:
    """Payload for the new-job relay."""
    return {
        "event": "job_submitted",
        "jobId": str(job.id),
        "title": job.title,
        "userEmail": submitter.email if submitter else None,
        "jobData": _job_data(job),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def build_status_update_payload(job: Job, actor: Optional[User] = None) -> Dict[str, Any]:
    """Payload for the CRM status-update webhook."""
    company = job.company_name or "Unknown company"
    return {
        "event": "job_status_update",
        "userId": str(actor.id) if actor else None,
        "userProfile": _user_data(actor),
        "jobData": _job_data(job),
        "message": f"Job {job.status.value}: {job.title} at {company}",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def send_webhook(url: str, payload: Dict[str, Any]) -> int:
    """
    POST a JSON payload to a webhook.

    Returns:
        HTTP status code of the response

    Raises:
        httpx.HTTPError: On network failure or non-2xx response
    """
    response = httpx.post(
        url,
        json=payload,
        headers={"User-Agent": USER_AGENT},
        timeout=settings.WEBHOOK_TIMEOUT_SECONDS
    )
    response.raise_for_status()
    return response.status_code


def _enqueue(url: str, payload: Dict[str, Any]) -> bool:
    if not url:
        logger.debug(f"No webhook URL configured for {payload.get('event')}, skipping")
        return False

    from app.core.celery_utils import queue_task_safely
    from app.tasks.notification_tasks import deliver_webhook_task

    try:
        return queue_task_safely(deliver_webhook_task, url, payload)
    except Exception as e:
        logger.error(f"Could not queue {payload.get('event')} notification: {e}")
        return False


def notify_job_submitted(job: Job, submitter: Optional[User] = None) -> bool:
    """Queue the new-job relay. Returns True if a task was queued."""
    return _enqueue(settings.JOB_WEBHOOK_URL, build_job_submitted_payload(job, submitter))


def notify_job_status_change(job: Job, actor: Optional[User] = None) -> bool:
    """Queue the CRM status update. Returns True if a task was queued."""
    return _enqueue(settings.GHL_WEBHOOK_URL, build_status_update_payload(job, actor))
