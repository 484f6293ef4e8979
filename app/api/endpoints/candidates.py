"""
Candidate submission and retrieval endpoints.

Sourcers submit LinkedIn profile URLs for a job they hold, either as a JSON
list or as a CSV upload. Each submission runs the full intake pipeline in
the request and answers with the batch result.
"""

import logging
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import get_current_user, require_sourcer
from app.core.rate_limiter import check_batch_submission_limit
from app.models.user import User, UserRole
from app.schemas.candidate import CandidateResponse
from app.schemas.intake import BatchResult, ManualBatchRequest
from app.services import batch_parser, job_lifecycle
from app.services.intake_pipeline import submit_candidate_batch

router = APIRouter(prefix="/jobs", tags=["Candidates"])
logger = logging.getLogger(__name__)


def _check_job_held(db: Session, job_id: UUID, sourcer: User) -> None:
    job = job_lifecycle.get_job_or_raise(db, job_id)
    job_lifecycle.require_claimed_by(job, sourcer)


@router.post("/{job_id}/candidates/batch", response_model=BatchResult)
async def submit_candidates(
    job_id: UUID,
    request: ManualBatchRequest,
    db: Session = Depends(get_db),
    sourcer: User = Depends(require_sourcer)
):
    """
    Submit up to 50 LinkedIn profile URLs for a claimed job.

    Returns 422 (EmptyBatch, BatchTooLarge, InvalidIdentifier) before any
    profile is scraped if the list is unusable. Otherwise always answers 200
    with per-profile outcomes, even when nothing was accepted.
    """
    check_batch_submission_limit(str(sourcer.id))
    _check_job_held(db, job_id, sourcer)

    batch = batch_parser.build_manual_batch(job_id, request.linkedin_urls)
    return await submit_candidate_batch(db, batch, sourcer)


@router.post("/{job_id}/candidates/upload-csv", response_model=BatchResult)
async def upload_candidates_csv(
    job_id: UUID,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    sourcer: User = Depends(require_sourcer)
):
    """
    Submit candidates from a CSV file (max 5MB, max 50 rows).

    One profile per line; an optional header row is skipped. In each row the
    first column holding a LinkedIn profile URL is used.
    """
    check_batch_submission_limit(str(sourcer.id))
    _check_job_held(db, job_id, sourcer)

    # Read one byte past the limit so oversized files are detected without
    # buffering all of them
    content = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    logger.info(f"CSV upload {file.filename} ({len(content)} bytes) for job {job_id}")

    batch = batch_parser.build_csv_batch(job_id, content)
    return await submit_candidate_batch(db, batch, sourcer)


@router.get("/{job_id}/candidates", response_model=List[CandidateResponse])
def list_candidates(
    job_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """Accepted candidates for a job, best match first."""
    job = job_lifecycle.get_job_or_raise(db, job_id)
    if user.role == UserRole.CLIENT and job.user_id != user.id:
        raise HTTPException(status_code=404, detail="Job not found")

    return job_lifecycle.get_accepted_candidates(db, job_id)
