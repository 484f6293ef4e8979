"""
Job lifecycle and quota tracking.

Jobs move Unclaimed -> Claimed -> Completed and never back. Both transitions
are conditional updates (see crud.job.update_status_if) so concurrent callers
cannot both win. Quota checks always count persisted candidates with a fresh
query; no count is cached or taken from the caller.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app import crud
from app.core.exceptions import (
    AlreadyClaimed, InvalidState, JobNotFound, NotJobOwner, QuotaNotMet
)
from app.models.candidate import Candidate
from app.models.job import Job, JobStatus
from app.models.user import User
from app.schemas.job import QuotaStatus, SourcerStats
from app.services import notifications

logger = logging.getLogger(__name__)


def get_job_or_raise(db: Session, job_id: UUID) -> Job:
    job = crud.job.get_by_id(db, job_id)
    if not job:
        raise JobNotFound(job_id)
    return job


def require_claimed_by(job: Job, sourcer: User) -> None:
    """
    Raises:
        InvalidState: If the job is not Claimed
        NotJobOwner: If the job is held by another sourcer
    """
    if job.status == JobStatus.UNCLAIMED:
        raise InvalidState(job.id, job.status.value, expected=JobStatus.CLAIMED.value)
    if job.sourcer_id != sourcer.id:
        raise NotJobOwner(job.id)
    if job.status != JobStatus.CLAIMED:
        raise InvalidState(job.id, job.status.value, expected=JobStatus.CLAIMED.value)


def progress_percent(accepted: int, requested: int) -> int:
    if requested <= 0:
        return 100
    return min(100, round(accepted / requested * 100))


def is_quota_met(db: Session, job_id: UUID) -> bool:
    """
    Whether the job's accepted-candidate count has reached its target.

    Raises:
        JobNotFound: If the job does not exist
    """
    job = get_job_or_raise(db, job_id)
    return crud.candidate.count_for_job(db, job_id) >= job.candidates_requested


def get_quota_status(db: Session, job_id: UUID) -> QuotaStatus:
    """Live accepted vs requested counts for a job."""
    job = get_job_or_raise(db, job_id)
    accepted = crud.candidate.count_for_job(db, job_id)
    return QuotaStatus(
        job_id=job.id,
        accepted=accepted,
        requested=job.candidates_requested,
        remaining=max(0, job.candidates_requested - accepted),
        progress_percent=progress_percent(accepted, job.candidates_requested),
        quota_met=accepted >= job.candidates_requested
    )


def claim_job(db: Session, job_id: UUID, sourcer: User) -> Job:
    """
    Claim an Unclaimed job for a sourcer. First claim wins.

    Args:
        db: Database session
        job_id: Job to claim
        sourcer: Claiming sourcer

    Returns:
        The claimed Job

    Raises:
        JobNotFound: If the job does not exist
        AlreadyClaimed: If the job is no longer Unclaimed
    """
    claimed = crud.job.update_status_if(
        db,
        job_id,
        expected=JobStatus.UNCLAIMED,
        new=JobStatus.CLAIMED,
        sourcer_id=sourcer.id,
        claimed_at=datetime.now(timezone.utc)
    )

    job = get_job_or_raise(db, job_id)
    if not claimed:
        logger.info(f"Sourcer {sourcer.id} lost claim on job {job_id} (status {job.status.value})")
        raise AlreadyClaimed(job_id)

    logger.info(f"Job {job_id} claimed by sourcer {sourcer.id}")
    notifications.notify_job_status_change(job, sourcer)
    return job


def check_and_complete_job(
    db: Session,
    job_id: UUID,
    sourcer: User,
    completion_link: Optional[str] = None
) -> Job:
    """
    Mark a Claimed job Completed once its quota is met.

    Ownership, status and quota are all re-read from the database here,
    regardless of what the caller last saw.

    Args:
        db: Database session
        job_id: Job to complete
        sourcer: Sourcer asking to complete it
        completion_link: Optional link to the delivered shortlist

    Returns:
        The completed Job

    Raises:
        JobNotFound: If the job does not exist
        InvalidState: If the job is not Claimed
        NotJobOwner: If another sourcer holds the job
        QuotaNotMet: If fewer candidates are accepted than requested
    """
    job = get_job_or_raise(db, job_id)
    require_claimed_by(job, sourcer)

    accepted = crud.candidate.count_for_job(db, job_id)
    if accepted < job.candidates_requested:
        raise QuotaNotMet(job_id, accepted, job.candidates_requested)

    fields = {"completed_at": datetime.now(timezone.utc)}
    if completion_link:
        fields["completion_link"] = completion_link

    completed = crud.job.update_status_if(
        db, job_id, expected=JobStatus.CLAIMED, new=JobStatus.COMPLETED, **fields
    )

    job = get_job_or_raise(db, job_id)
    if not completed:
        raise InvalidState(job_id, job.status.value, expected=JobStatus.CLAIMED.value)

    logger.info(f"Job {job_id} completed by sourcer {sourcer.id} with {accepted} candidates")
    notifications.notify_job_status_change(job, sourcer)
    return job


def get_accepted_candidates(db: Session, job_id: UUID) -> List[Candidate]:
    """
    Accepted candidates for a job, best match first.

    Raises:
        JobNotFound: If the job does not exist
    """
    get_job_or_raise(db, job_id)
    return crud.candidate.list_for_job(db, job_id)


def get_sourcer_stats(db: Session, sourcer_id: UUID) -> SourcerStats:
    """Claimed/completed counts and success rate for a sourcer."""
    claimed = crud.job.count_by_sourcer(db, sourcer_id, JobStatus.CLAIMED)
    completed = crud.job.count_by_sourcer(db, sourcer_id, JobStatus.COMPLETED)
    total = claimed + completed

    return SourcerStats(
        sourcer_id=sourcer_id,
        claimed_jobs=claimed,
        completed_jobs=completed,
        success_rate=round(completed / total * 100) if total else 0
    )
