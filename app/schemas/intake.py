"""
Schemas for one candidate submission attempt and its outcome.

A SubmissionBatch is built per request and discarded once the pipeline has
produced a BatchResult; neither is stored.
"""

from enum import Enum
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field

from app.schemas.candidate import NormalizedCandidate


class SubmissionMethod(str, Enum):
    MANUAL = "manual"
    CSV_UPLOAD = "csv_upload"


class SubmissionBatch(BaseModel):
    job_id: UUID
    identifiers: List[str]
    method: SubmissionMethod = SubmissionMethod.MANUAL


class ManualBatchRequest(BaseModel):
    """Request body for manually entered profile URLs"""
    linkedin_urls: List[str] = Field(..., description="LinkedIn profile URLs, one per candidate")


class ScrapeResult(BaseModel):
    """
    Outcome of one scrape: exactly one of `candidate` or `error` is set.
    """
    identifier: str
    candidate: Optional[NormalizedCandidate] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.candidate is not None

    @classmethod
    def success(cls, identifier: str, candidate: NormalizedCandidate) -> "ScrapeResult":
        return cls(identifier=identifier, candidate=candidate)

    @classmethod
    def failure(cls, identifier: str, reason: str) -> "ScrapeResult":
        return cls(identifier=identifier, error=reason)


class JobRequirements(BaseModel):
    """The parts of a job the match scorer sees."""
    title: str
    description: str
    seniority_level: str
    key_skills: List[str] = Field(default_factory=list)


class MatchResult(BaseModel):
    score: int = Field(..., ge=0, le=100)
    reasoning: str
    fallback: bool = Field(False, description="True when the scorer was unavailable and the default score was used")


class IdentifierError(BaseModel):
    identifier: str
    reason: str


class RejectedCandidate(BaseModel):
    identifier: str
    name: str
    score: int
    reasoning: str


class BatchResult(BaseModel):
    """
    Aggregated outcome of a batch. accepted_count + rejected_count +
    len(errors) always equals the number of submitted identifiers.
    """
    success: bool = True
    job_id: UUID
    submitted_count: int
    accepted_count: int
    rejected_count: int
    errors: List[IdentifierError] = Field(default_factory=list)
    rejected: List[RejectedCandidate] = Field(default_factory=list)
    accepted_candidate_ids: List[UUID] = Field(default_factory=list)

    # Job progress, from a live count taken after this batch was written
    total_accepted: int
    candidates_requested: int
    remaining: int
    progress_percent: int
    quota_met: bool
