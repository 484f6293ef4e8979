"""
Turns raw sourcer input into a validated SubmissionBatch.

Two entry points share one validation path:
- manual entry: a list of profile URLs typed or pasted by the sourcer
- CSV upload: one record per line, optional header row, comma separated

All checks run before any scraper or scorer call is made.
"""

import csv
import logging
import re
from typing import List, Optional
from uuid import UUID

from app.core.config import settings
from app.core.exceptions import (
    BatchTooLarge, EmptyBatch, FileTooLarge, InvalidIdentifier, MalformedFile
)
from app.schemas.intake import SubmissionBatch, SubmissionMethod

logger = logging.getLogger(__name__)

PROFILE_URL_PATTERN = re.compile(r"linkedin\.com/in/[^/?#\s]+", re.IGNORECASE)

# Lowercased first-line markers that identify a header row
HEADER_MARKERS = ("url", "linkedin")

QUOTE_CHARS = "\"'"


def is_profile_url(identifier: str) -> bool:
    return bool(PROFILE_URL_PATTERN.search(identifier))


def validate_identifiers(identifiers: List[str], max_size: Optional[int] = None) -> List[str]:
    """
    Check a list of identifiers against the batch rules.

    Surrounding whitespace is stripped and blank entries are dropped.
    Order and duplicates are preserved.

    Args:
        identifiers: Raw identifiers
        max_size: Maximum batch size (default: settings.MAX_BATCH_SIZE)

    Returns:
        Cleaned identifiers

    Raises:
        EmptyBatch: No identifiers left after cleaning
        BatchTooLarge: More than max_size identifiers
        InvalidIdentifier: One or more entries are not profile URLs
    """
    limit = max_size if max_size is not None else settings.MAX_BATCH_SIZE
    cleaned = [item.strip() for item in identifiers if item and item.strip()]

    if not cleaned:
        raise EmptyBatch()

    if len(cleaned) > limit:
        raise BatchTooLarge(len(cleaned), limit)

    invalid = [item for item in cleaned if not is_profile_url(item)]
    if invalid:
        raise InvalidIdentifier(invalid)

    return cleaned


def _clean_field(value: str) -> str:
    return value.strip().strip(QUOTE_CHARS).strip()


def _is_header(columns: List[str]) -> bool:
    line = ",".join(columns).lower()
    if not any(marker in line for marker in HEADER_MARKERS):
        return False
    # A first row that already holds a profile URL is data, not a header
    return not any(is_profile_url(column) for column in columns)


def parse_csv(content: bytes, max_bytes: Optional[int] = None) -> List[str]:
    """
    Extract profile identifiers from an uploaded CSV file.

    Each non-blank line yields the first column matching the profile URL
    pattern. Lines with no such column (a header without a marker, notes,
    names) are dropped. The first line is skipped when it looks like a header.

    Args:
        content: Raw file bytes
        max_bytes: Size limit checked before parsing (default: settings.MAX_UPLOAD_BYTES)

    Returns:
        Profile URLs in file order

    Raises:
        FileTooLarge: File exceeds max_bytes
        MalformedFile: File is not decodable line-oriented text
    """
    limit = max_bytes if max_bytes is not None else settings.MAX_UPLOAD_BYTES
    if len(content) > limit:
        raise FileTooLarge(len(content), limit)

    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise MalformedFile("File is not valid UTF-8 text") from e

    if "\x00" in text:
        raise MalformedFile("File contains binary data")

    lines = [line for line in text.splitlines() if line.strip()]

    try:
        rows = list(csv.reader(lines, skipinitialspace=True))
    except csv.Error as e:
        raise MalformedFile(f"Could not parse CSV: {e}") from e

    identifiers = []
    for index, row in enumerate(rows):
        columns = [_clean_field(column) for column in row]
        if not any(columns):
            continue
        if index == 0 and _is_header(columns):
            logger.debug(f"Skipping CSV header row: {columns}")
            continue

        match = next((column for column in columns if is_profile_url(column)), None)
        if match is None:
            logger.debug(f"Dropping CSV row {index + 1} without a profile URL: {columns}")
            continue
        identifiers.append(match)

    return identifiers


def build_manual_batch(job_id: UUID, urls: List[str]) -> SubmissionBatch:
    """Validate manually entered URLs into a batch."""
    return SubmissionBatch(
        job_id=job_id,
        identifiers=validate_identifiers(urls),
        method=SubmissionMethod.MANUAL
    )


def build_csv_batch(job_id: UUID, content: bytes) -> SubmissionBatch:
    """
    Parse an uploaded CSV into a batch.

    Rows without a profile URL were already dropped by parse_csv(), so only
    the empty and size checks can fail here.
    """
    identifiers = parse_csv(content)
    logger.info(f"Parsed {len(identifiers)} identifiers from CSV upload for job {job_id}")
    return SubmissionBatch(
        job_id=job_id,
        identifiers=validate_identifiers(identifiers),
        method=SubmissionMethod.CSV_UPLOAD
    )
