"""
CRUD operations for Job model.

Status transitions go through update_status_if(), a single conditional
UPDATE, so two writers racing on the same job cannot both succeed.
"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session
from app.models.job import Job, JobStatus
from app.schemas.job import JobCreateRequest


def create(db: Session, job_data: JobCreateRequest, user_id: UUID) -> Job:
    """
    Create a new Unclaimed job in the database.

    Args:
        db: Database session
        job_data: Validated job creation data
        user_id: Submitting client's user id

    Returns:
        Created Job instance with id
    """
    db_job = Job(
        user_id=user_id,
        title=job_data.title,
        description=job_data.description,
        company_name=job_data.company_name,
        seniority_level=job_data.seniority_level,
        key_skills=job_data.key_skills,
        candidates_requested=job_data.candidates_requested,
        location=job_data.location,
        work_arrangement=job_data.work_arrangement,
        status=JobStatus.UNCLAIMED
    )

    db.add(db_job)
    db.commit()
    db.refresh(db_job)

    return db_job


def get_by_id(db: Session, job_id: UUID) -> Optional[Job]:
    """
    Retrieve a job by its ID.

    Args:
        db: Database session
        job_id: Job ID to retrieve

    Returns:
        Job instance if found, None otherwise
    """
    return db.query(Job).filter(Job.id == job_id).first()


def get_multi(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    status: Optional[JobStatus] = None,
    user_id: Optional[UUID] = None,
    sourcer_id: Optional[UUID] = None
) -> List[Job]:
    """
    Retrieve multiple jobs with pagination and optional filtering.

    Args:
        db: Database session
        skip: Number of records to skip (offset)
        limit: Maximum number of records to return
        status: Optional status filter
        user_id: Only jobs submitted by this client
        sourcer_id: Only jobs claimed by this sourcer

    Returns:
        List of Job instances, newest first
    """
    query = db.query(Job)

    if status:
        query = query.filter(Job.status == status)
    if user_id:
        query = query.filter(Job.user_id == user_id)
    if sourcer_id:
        query = query.filter(Job.sourcer_id == sourcer_id)

    return query.order_by(Job.created_at.desc()).offset(skip).limit(limit).all()


def update_status_if(
    db: Session,
    job_id: UUID,
    expected: JobStatus,
    new: JobStatus,
    **fields
) -> bool:
    """
    Move a job from `expected` to `new` only if it is still in `expected`.

    The check and the write happen in one UPDATE statement, so when several
    sessions race on the same job exactly one of them sees a matched row.

    Args:
        db: Database session
        job_id: Job ID to update
        expected: Status the job must currently have
        new: Status to set
        **fields: Extra column values to write with the transition

    Returns:
        True if the row was updated, False if the job is missing or its
        status no longer matches `expected`
    """
    values = {Job.status: new, Job.updated_at: datetime.now(timezone.utc)}
    for name, value in fields.items():
        values[getattr(Job, name)] = value

    updated = (
        db.query(Job)
        .filter(Job.id == job_id, Job.status == expected)
        .update(values, synchronize_session=False)
    )
    db.commit()

    return updated == 1


def count_by_sourcer(db: Session, sourcer_id: UUID, status: JobStatus) -> int:
    """
    Count jobs held by a sourcer in the given status.

    Args:
        db: Database session
        sourcer_id: Sourcer user id
        status: Status to count

    Returns:
        Number of matching jobs
    """
    return db.query(Job).filter(Job.sourcer_id == sourcer_id, Job.status == status).count()
