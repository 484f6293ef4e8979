"""
CRUD operations for Candidate model.

Candidates are append-only: there is no update or delete path. Each insert
commits on its own so a failure part way through a batch leaves earlier
rows in place.
"""

import logging
from typing import List
from uuid import UUID
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import PersistenceError
from app.models.candidate import Candidate
from app.schemas.candidate import NormalizedCandidate
from app.schemas.intake import MatchResult

logger = logging.getLogger(__name__)


def insert(db: Session, job_id: UUID, profile: NormalizedCandidate, match: MatchResult) -> Candidate:
    """
    Persist one accepted candidate.

    Args:
        db: Database session
        job_id: Owning job
        profile: Normalized scraped profile
        match: Score and reasoning that passed the acceptance threshold

    Returns:
        Created Candidate instance

    Raises:
        PersistenceError: If the insert fails
    """
    db_candidate = Candidate(
        job_id=job_id,
        first_name=profile.first_name,
        last_name=profile.last_name,
        headline=profile.headline,
        location=profile.location,
        linkedin_url=profile.linkedin_url,
        experience=[entry.model_dump() for entry in profile.experience],
        education=[entry.model_dump() for entry in profile.education],
        skills=list(profile.skills),
        summary=profile.summary,
        match_score=match.score,
        match_reasoning=match.reasoning,
    )

    try:
        db.add(db_candidate)
        db.commit()
        db.refresh(db_candidate)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to insert candidate {profile.linkedin_url} for job {job_id}: {e}")
        raise PersistenceError(f"Failed to save candidate {profile.linkedin_url}") from e

    return db_candidate


def count_for_job(db: Session, job_id: UUID) -> int:
    """
    Count accepted candidates for a job with a fresh query.

    Args:
        db: Database session
        job_id: Job ID

    Returns:
        Number of persisted candidates
    """
    return db.query(Candidate).filter(Candidate.job_id == job_id).count()


def list_for_job(db: Session, job_id: UUID, skip: int = 0, limit: int = 500) -> List[Candidate]:
    """
    Retrieve accepted candidates for a job, best match first.

    Args:
        db: Database session
        job_id: Job ID
        skip: Number of records to skip (offset)
        limit: Maximum number of records to return

    Returns:
        List of Candidate instances
    """
    return (
        db.query(Candidate)
        .filter(Candidate.job_id == job_id)
        .order_by(Candidate.match_score.desc(), Candidate.submitted_at.asc())
        .offset(skip)
        .limit(limit)
        .all()
    )
