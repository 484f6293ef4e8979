from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from uuid import UUID

from app.models.job import JobStatus, SeniorityLevel, WorkArrangement


class JobCreateRequest(BaseModel):
    """Schema for a client submitting a new sourcing job"""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=10)
    company_name: Optional[str] = Field(None, max_length=200)
    seniority_level: SeniorityLevel
    key_skills: List[str] = Field(default_factory=list)
    candidates_requested: int = Field(..., gt=0, le=500, description="Target number of accepted candidates")
    location: Optional[str] = None
    work_arrangement: Optional[WorkArrangement] = None

    @field_validator("key_skills")
    @classmethod
    def clean_skills(cls, v: List[str]) -> List[str]:
        return [skill.strip() for skill in v if skill and skill.strip()]


class JobResponse(BaseModel):
    """Schema for job response"""
    id: UUID
    user_id: UUID
    title: str
    description: str
    company_name: Optional[str] = None
    seniority_level: SeniorityLevel
    key_skills: List[str]
    candidates_requested: int
    location: Optional[str] = None
    work_arrangement: Optional[WorkArrangement] = None
    status: JobStatus
    sourcer_id: Optional[UUID] = None
    completion_link: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    claimed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True  # Allows conversion from SQLAlchemy models


class JobCompleteRequest(BaseModel):
    """Optional payload when a sourcer marks a job complete"""
    completion_link: Optional[str] = Field(None, max_length=2000, description="Link to the delivered shortlist")


class QuotaStatus(BaseModel):
    """Live accepted-candidate count against the job's target"""
    job_id: UUID
    accepted: int
    requested: int
    remaining: int
    progress_percent: int = Field(..., ge=0, le=100)
    quota_met: bool


class SourcerStats(BaseModel):
    """Claimed/completed job counts for one sourcer"""
    sourcer_id: UUID
    claimed_jobs: int
    completed_jobs: int
    success_rate: int = Field(..., ge=0, le=100, description="Completed share of all jobs taken, in percent")
