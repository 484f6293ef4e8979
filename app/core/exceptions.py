"""
Domain exceptions for the sourcing marketplace.

Every exception carries the HTTP status the API layer should answer with, and
`to_dict()` adds any structured fields (offending identifiers, counts) to the
error body. Scraper and scorer errors never leave the intake pipeline.
"""

from typing import Any, Dict, List, Optional


class MarketplaceError(Exception):
    """Base class for all marketplace errors."""
    status_code: int = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        return {"error": type(self).__name__, "detail": self.detail}


# ---------------------------------------------------------------------------
# Input errors: raised before any external call, nothing written
# ---------------------------------------------------------------------------

class IntakeValidationError(MarketplaceError):
    status_code = 422


class EmptyBatch(IntakeValidationError):
    def __init__(self, detail: str = "No candidate profile URLs were submitted"):
        super().__init__(detail)


class BatchTooLarge(IntakeValidationError):
    def __init__(self, size: int, limit: int):
        super().__init__(f"Cannot submit {size} candidates; maximum is {limit} per submission")
        self.size = size
        self.limit = limit

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body.update({"size": self.size, "limit": self.limit})
        return body


class InvalidIdentifier(IntakeValidationError):
    def __init__(self, identifiers: List[str]):
        preview = ", ".join(identifiers[:5])
        if len(identifiers) > 5:
            preview += f" (+{len(identifiers) - 5} more)"
        super().__init__(f"Not a recognized LinkedIn profile URL: {preview}")
        self.identifiers = identifiers

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["invalid_identifiers"] = self.identifiers
        return body


class MalformedFile(IntakeValidationError):
    pass


class FileTooLarge(MalformedFile):
    status_code = 413

    def __init__(self, size: int, limit: int):
        super().__init__(f"File is {size} bytes; maximum upload size is {limit} bytes")
        self.size = size
        self.limit = limit


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

class PersistenceError(MarketplaceError):
    status_code = 500


# ---------------------------------------------------------------------------
# Job state errors: job is left untouched, safe to retry after a fresh read
# ---------------------------------------------------------------------------

class JobStateError(MarketplaceError):
    status_code = 409


class JobNotFound(JobStateError):
    status_code = 404

    def __init__(self, job_id: Any):
        super().__init__(f"Job {job_id} not found")


class AlreadyClaimed(JobStateError):
    def __init__(self, job_id: Any):
        super().__init__(f"Job {job_id} has already been claimed")


class NotJobOwner(JobStateError):
    status_code = 403

    def __init__(self, job_id: Any):
        super().__init__(f"Job {job_id} is not claimed by you")


class InvalidState(JobStateError):
    def __init__(self, job_id: Any, current: str, expected: Optional[str] = None):
        message = f"Job {job_id} is {current}"
        if expected:
            message += f"; expected {expected}"
        super().__init__(message)
        self.current = current
        self.expected = expected

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["current_status"] = self.current
        return body


class QuotaNotMet(JobStateError):
    def __init__(self, job_id: Any, current: int, required: int):
        super().__init__(
            f"Job {job_id} has {current}/{required} accepted candidates; "
            f"{required - current} more needed before completion"
        )
        self.current = current
        self.required = required

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body.update({"current": self.current, "required": self.required})
        return body


# ---------------------------------------------------------------------------
# External gateway errors (recovered inside the pipeline)
# ---------------------------------------------------------------------------

class ScraperError(MarketplaceError):
    status_code = 502


class MatchScoringError(MarketplaceError):
    status_code = 502
