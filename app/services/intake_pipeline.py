"""
Candidate intake pipeline.

Turns a batch of LinkedIn profile URLs into persisted candidates for a
claimed job:

1. Job and batch checks (nothing external is called if these fail)
2. Scrape each profile, bounded-parallel, with a per-profile timeout
3. Score each scraped profile, falling back to a default score on failure
4. Persist profiles scoring at or above the acceptance threshold
5. Report counts plus live quota progress

One bad profile never fails the batch: scrape failures become error
entries and scorer failures become fallback scores. Only input, job state
and persistence errors escape.
"""

import asyncio
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app import crud
from app.core.config import settings
from app.models.user import User
from app.schemas.candidate import NormalizedCandidate
from app.schemas.intake import (
    BatchResult, IdentifierError, JobRequirements, MatchResult,
    RejectedCandidate, ScrapeResult, SubmissionBatch
)
from app.services.batch_parser import validate_identifiers
from app.services.job_lifecycle import get_job_or_raise, progress_percent, require_claimed_by
from app.services.match_scorer import MatchScorer, fallback_match, get_match_scorer
from app.services.profile_scraper import ProfileScraperGateway, get_scraper

logger = logging.getLogger(__name__)

# (identifier, profile, match, error); exactly one of profile/error is set
Outcome = Tuple[str, Optional[NormalizedCandidate], Optional[MatchResult], Optional[str]]


async def _scrape(scraper: ProfileScraperGateway, identifier: str) -> ScrapeResult:
    timeout = settings.SCRAPER_TIMEOUT_SECONDS
    try:
        return await asyncio.wait_for(scraper.scrape(identifier), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Scrape timed out after {timeout}s for {identifier}")
        return ScrapeResult.failure(identifier, f"Scraper timed out after {timeout:g}s")
    except Exception as e:
        logger.warning(f"Scrape raised for {identifier}: {e}", exc_info=True)
        return ScrapeResult.failure(identifier, f"Scraper error: {type(e).__name__}")


async def _score(scorer: MatchScorer, job: JobRequirements, profile: NormalizedCandidate) -> MatchResult:
    timeout = settings.SCORER_TIMEOUT_SECONDS
    try:
        return await asyncio.wait_for(scorer.score(job, profile), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Scorer timed out after {timeout}s for {profile.linkedin_url}; using fallback score")
        return fallback_match(timed_out=True)
    except Exception as e:
        logger.warning(f"Scorer failed for {profile.linkedin_url}: {e}; using fallback score")
        return fallback_match()


async def _process(
    identifier: str,
    job: JobRequirements,
    scraper: ProfileScraperGateway,
    scorer: MatchScorer,
    semaphore: asyncio.Semaphore
) -> Outcome:
    async with semaphore:
        scraped = await _scrape(scraper, identifier)
        if not scraped.ok:
            return identifier, None, None, scraped.error or "Scrape failed"

        match = await _score(scorer, job, scraped.candidate)
        return identifier, scraped.candidate, match, None


async def submit_candidate_batch(
    db: Session,
    batch: SubmissionBatch,
    sourcer: User,
    scraper: Optional[ProfileScraperGateway] = None,
    scorer: Optional[MatchScorer] = None
) -> BatchResult:
    """
    Run one submission batch through scrape, score, accept and persist.

    Args:
        db: Database session
        batch: Job id plus the submitted profile URLs
        sourcer: Acting sourcer (must hold the job)
        scraper: Scraper gateway (default: configured provider)
        scorer: Match scorer (default: configured LLM provider)

    Returns:
        BatchResult with accepted, rejected and errored counts summing to
        the batch size, plus the job's live progress

    Raises:
        JobNotFound, InvalidState, NotJobOwner: Job is not claimed by sourcer
        EmptyBatch, BatchTooLarge, InvalidIdentifier: Batch fails validation
        PersistenceError: An accepted candidate could not be saved
    """
    job = get_job_or_raise(db, batch.job_id)
    require_claimed_by(job, sourcer)
    identifiers = validate_identifiers(batch.identifiers)

    scraper = scraper or get_scraper()
    scorer = scorer or get_match_scorer()
    requirements = JobRequirements(
        title=job.title,
        description=job.description,
        seniority_level=job.seniority_level.value,
        key_skills=list(job.key_skills or [])
    )

    logger.info(
        f"Processing {len(identifiers)} candidates ({batch.method.value}) for job {job.id} "
        f"by sourcer {sourcer.id}"
    )

    semaphore = asyncio.Semaphore(max(1, settings.INTAKE_CONCURRENCY))
    outcomes: List[Outcome] = await asyncio.gather(
        *(_process(identifier, requirements, scraper, scorer, semaphore) for identifier in identifiers)
    )

    errors: List[IdentifierError] = []
    rejected: List[RejectedCandidate] = []
    accepted_ids = []

    for identifier, profile, match, error in outcomes:
        if error is not None:
            errors.append(IdentifierError(identifier=identifier, reason=error))
            continue

        if match.score >= settings.ACCEPTANCE_THRESHOLD:
            candidate = crud.candidate.insert(db, job.id, profile, match)
            accepted_ids.append(candidate.id)
        else:
            rejected.append(RejectedCandidate(
                identifier=identifier,
                name=f"{profile.first_name} {profile.last_name}",
                score=match.score,
                reasoning=match.reasoning
            ))

    total_accepted = crud.candidate.count_for_job(db, job.id)
    requested = job.candidates_requested

    logger.info(
        f"Batch for job {job.id}: {len(accepted_ids)} accepted, {len(rejected)} rejected, "
        f"{len(errors)} errored; {total_accepted}/{requested} toward quota",
        extra={"job_id": str(job.id), "sourcer_id": str(sourcer.id)}
    )

    return BatchResult(
        job_id=job.id,
        submitted_count=len(identifiers),
        accepted_count=len(accepted_ids),
        rejected_count=len(rejected),
        errors=errors,
        rejected=rejected,
        accepted_candidate_ids=accepted_ids,
        total_accepted=total_accepted,
        candidates_requested=requested,
        remaining=max(0, requested - total_accepted),
        progress_percent=progress_percent(total_accepted, requested),
        quota_met=total_accepted >= requested
    )
