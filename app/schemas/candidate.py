"""
Pydantic schemas for Candidate API responses and the normalized profile
record returned by the scraper gateway.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field


class ExperienceEntry(BaseModel):
    title: str = "N/A"
    company: str = "N/A"
    duration: str = "N/A"


class EducationEntry(BaseModel):
    school: str = "N/A"
    degree: str = "N/A"


class NormalizedCandidate(BaseModel):
    """Profile fields every scraper backend is mapped onto."""
    first_name: str
    last_name: str
    headline: Optional[str] = None
    location: Optional[str] = None
    linkedin_url: str
    experience: List[ExperienceEntry] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    about: Optional[str] = None

    @property
    def summary(self) -> str:
        """The profile's about text, or a one-line description built from the headline."""
        if self.about and self.about.strip():
            return self.about.strip()
        return (
            f"{self.first_name} {self.last_name} is a {self.headline or 'professional'} "
            f"based in {self.location or 'Unknown location'}."
        )


class CandidateResponse(BaseModel):
    """Full accepted-candidate record."""
    id: UUID
    job_id: UUID
    first_name: str
    last_name: str
    headline: Optional[str] = None
    location: Optional[str] = None
    linkedin_url: str
    experience: Optional[List[ExperienceEntry]] = None
    education: Optional[List[EducationEntry]] = None
    skills: Optional[List[str]] = None
    summary: Optional[str] = None
    match_score: int = Field(..., ge=0, le=100)
    match_reasoning: Optional[str] = None
    submitted_at: datetime

    class Config:
        from_attributes = True
