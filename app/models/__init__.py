"""
Database models package.
"""

from app.models.user import User, UserRole
from app.models.job import Job, JobStatus, SeniorityLevel, WorkArrangement
from app.models.candidate import Candidate

__all__ = [
    "User", "UserRole",
    "Job", "JobStatus", "SeniorityLevel", "WorkArrangement",
    "Candidate",
]
