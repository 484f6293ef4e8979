import logging
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_current_user, require_client, require_sourcer
from app.crud import job as job_crud
from app.models.job import JobStatus
from app.models.user import User, UserRole
from app.schemas.job import JobCompleteRequest, JobCreateRequest, JobResponse, QuotaStatus
from app.services import job_lifecycle, notifications

router = APIRouter(prefix="/jobs", tags=["Jobs"])
logger = logging.getLogger(__name__)


def _get_visible_job(db: Session, job_id: UUID, user: User):
    job = job_crud.get_by_id(db, job_id)
    # Clients only see their own jobs
    if not job or (user.role == UserRole.CLIENT and job.user_id != user.id):
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@router.post("/", status_code=201, response_model=JobResponse)
def create_job(
    request: JobCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_client)
):
    """
    Submit a new sourcing job.

    The job starts Unclaimed and is visible to sourcers immediately. The
    job-submitted webhook is queued after the row is committed.
    """
    new_job = job_crud.create(db, request, user_id=user.id)
    logger.info(f"Created job {new_job.id}: {new_job.title} ({new_job.candidates_requested} candidates)")

    notifications.notify_job_submitted(new_job, user)
    notifications.notify_job_status_change(new_job, user)

    return new_job


@router.get("/", response_model=List[JobResponse])
def list_jobs(
    skip: int = 0,
    limit: int = 100,
    status: Optional[JobStatus] = None,
    mine: bool = False,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """
    List jobs with pagination and optional status filtering.

    Clients always get their own jobs. Sourcers get every job, or only the
    jobs they hold when `mine=true`.
    """
    if limit > 100:
        limit = 100

    user_filter = user.id if user.role == UserRole.CLIENT else None
    sourcer_filter = user.id if mine and user.role != UserRole.CLIENT else None

    return job_crud.get_multi(
        db, skip=skip, limit=limit, status=status, user_id=user_filter, sourcer_id=sourcer_filter
    )


@router.get("/{job_id}", response_model=JobResponse)
def get_job(
    job_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """Retrieve a job by ID."""
    return _get_visible_job(db, job_id, user)


@router.post("/{job_id}/claim", response_model=JobResponse)
def claim_job(
    job_id: UUID,
    db: Session = Depends(get_db),
    sourcer: User = Depends(require_sourcer)
):
    """
    Claim an Unclaimed job. Exactly one concurrent claimant wins; the others
    get 409 AlreadyClaimed.
    """
    return job_lifecycle.claim_job(db, job_id, sourcer)


@router.post("/{job_id}/complete", response_model=JobResponse)
def complete_job(
    job_id: UUID,
    request: Optional[JobCompleteRequest] = None,
    db: Session = Depends(get_db),
    sourcer: User = Depends(require_sourcer)
):
    """
    Mark a claimed job Completed.

    The accepted-candidate count is re-read at call time; 409 QuotaNotMet
    reports current vs required when the target has not been reached.
    """
    completion_link = request.completion_link if request else None
    return job_lifecycle.check_and_complete_job(db, job_id, sourcer, completion_link=completion_link)


@router.get("/{job_id}/quota", response_model=QuotaStatus)
def get_quota(
    job_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """Live accepted vs requested candidate counts."""
    _get_visible_job(db, job_id, user)
    return job_lifecycle.get_quota_status(db, job_id)
