from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import require_sourcer
from app.models.user import User
from app.schemas.job import SourcerStats
from app.services import job_lifecycle

router = APIRouter(prefix="/sourcers", tags=["Sourcers"])


@router.get("/me/stats", response_model=SourcerStats)
def get_my_stats(
    db: Session = Depends(get_db),
    sourcer: User = Depends(require_sourcer)
):
    """Claimed and completed job counts with success rate for the caller."""
    return job_lifecycle.get_sourcer_stats(db, sourcer.id)
