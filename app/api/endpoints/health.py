"""
Health check and monitoring endpoints.

Provides health status for the database and Redis, plus basic job metrics.
"""

import logging
from typing import Dict, Any
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from sqlalchemy import text, func
from datetime import datetime, timezone

from app.core.database import get_db
from app.core.rate_limiter import rate_limiter
from app.models.candidate import Candidate
from app.models.job import Job, JobStatus

router = APIRouter(tags=["Health"])
logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, str]:
    """
    Basic health check endpoint.

    Returns 200 OK if the service is running.
    """
    return {
        "status": "healthy",
        "timestamp": _now()
    }


@router.get("/health/detailed", status_code=status.HTTP_200_OK)
def detailed_health_check(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Detailed health check with dependency status.

    The database is required; Redis only backs notifications and rate
    limiting, so losing it reports "degraded" rather than "unhealthy".
    """
    health_status = {
        "status": "healthy",
        "timestamp": _now(),
        "checks": {}
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["checks"]["database"] = {
            "status": "healthy",
            "message": "Database connection successful"
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = {
            "status": "unhealthy",
            "message": f"Database error: {str(e)}"
        }

    try:
        rate_limiter.redis_client.ping()
        health_status["checks"]["redis"] = {
            "status": "healthy",
            "message": "Redis connection successful"
        }
    except Exception as e:
        logger.warning(f"Redis health check failed: {e}")
        if health_status["status"] == "healthy":
            health_status["status"] = "degraded"
        health_status["checks"]["redis"] = {
            "status": "unhealthy",
            "message": f"Redis error: {str(e)}"
        }

    return health_status


@router.get("/metrics", status_code=status.HTTP_200_OK)
def get_metrics(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Job counts by status and total accepted candidates."""
    jobs_by_status = {
        job_status.value: db.query(func.count(Job.id)).filter(Job.status == job_status).scalar() or 0
        for job_status in JobStatus
    }

    return {
        "timestamp": _now(),
        "metrics": {
            "jobs": jobs_by_status,
            "total_candidates": db.query(func.count(Candidate.id)).scalar() or 0,
        }
    }
