"""
Candidate database model.

A Candidate row exists only for a profile that was scraped, scored, and
passed the acceptance threshold for its job. Rejected profiles are reported
in the batch result and never stored. Rows are append-only.
"""

import uuid
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, JSON, Uuid,
    CheckConstraint, func
)
from sqlalchemy.orm import relationship
from app.core.database import Base


class Candidate(Base):
    __tablename__ = "candidates"
    __table_args__ = (
        CheckConstraint("match_score >= 0 AND match_score <= 100", name="ck_candidates_match_score_range"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    job_id = Column(Uuid, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)

    # Profile data as normalized by the scraper gateway
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    headline = Column(String, nullable=True)
    location = Column(String, nullable=True)
    linkedin_url = Column(String, nullable=False, index=True)
    experience = Column(JSON, nullable=True)
    education = Column(JSON, nullable=True)
    skills = Column(JSON, nullable=True)
    summary = Column(Text, nullable=True)

    # Match scoring
    match_score = Column(Integer, nullable=False)
    match_reasoning = Column(Text, nullable=True)

    submitted_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    job = relationship("Job", back_populates="candidates")

    def __repr__(self):
        return f"<Candidate(id={self.id}, job_id={self.job_id}, match_score={self.match_score})>"
