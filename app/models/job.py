import enum
import uuid
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Enum, ForeignKey, JSON, Uuid,
    CheckConstraint, func
)
from sqlalchemy.orm import relationship
from app.core.database import Base


class JobStatus(str, enum.Enum):
    """
    Job lifecycle. Transitions only move forward:

    UNCLAIMED -> CLAIMED -> COMPLETED
    """
    UNCLAIMED = "Unclaimed"
    CLAIMED = "Claimed"
    COMPLETED = "Completed"


class SeniorityLevel(str, enum.Enum):
    JUNIOR = "Junior"
    MID = "Mid"
    SENIOR = "Senior"
    EXECUTIVE = "Executive"


class WorkArrangement(str, enum.Enum):
    REMOTE = "Remote"
    ON_SITE = "On-site"
    HYBRID = "Hybrid"


class Job(Base):
    """
    A client's request for a target number of sourced candidates.

    sourcer_id is set exactly when status is CLAIMED or COMPLETED.
    """
    __tablename__ = "jobs"
    __table_args__ = (
        CheckConstraint("candidates_requested > 0", name="ck_jobs_candidates_requested_positive"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False)
    company_name = Column(String, nullable=True)
    seniority_level = Column(Enum(SeniorityLevel), nullable=False)
    key_skills = Column(JSON, nullable=False, default=list)
    location = Column(String, nullable=True)
    work_arrangement = Column(Enum(WorkArrangement), nullable=True)
    candidates_requested = Column(Integer, nullable=False)

    status = Column(Enum(JobStatus), default=JobStatus.UNCLAIMED, nullable=False, index=True)
    sourcer_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)
    completion_link = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    claimed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    candidates = relationship("Candidate", back_populates="job", cascade="all, delete-orphan")
    submitter = relationship("User", foreign_keys=[user_id])
    sourcer = relationship("User", foreign_keys=[sourcer_id])

    def __repr__(self):
        return f"<Job(id={self.id}, title='{self.title}', status={self.status.value})>"
