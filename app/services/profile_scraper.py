"""
Profile scraper gateway.

Fetches a LinkedIn profile through an external scraping provider and maps the
provider's JSON onto NormalizedCandidate. Providers return loosely shaped
payloads, so every field is read with an explicit presence check.

Backends:
- ScrapingDog profile API (one request per profile id)
- Apify LinkedIn profile actor (run-sync, dataset items)
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

import httpx

from app.core.config import settings
from app.core.exceptions import ScraperError
from app.schemas.candidate import EducationEntry, ExperienceEntry, NormalizedCandidate
from app.schemas.intake import ScrapeResult

logger = logging.getLogger(__name__)

PROFILE_ID_PATTERN = re.compile(r"linkedin\.com/in/([^/?#\s]+)", re.IGNORECASE)

MISSING = "N/A"


def extract_profile_id(url: str) -> Optional[str]:
    match = PROFILE_ID_PATTERN.search(url)
    return match.group(1) if match else None


def split_full_name(full_name: Optional[str]) -> Tuple[str, str]:
    """
    Split a display name into first and last name.

    The first token is the first name and the remainder the last name;
    missing parts become "N/A".
    """
    if not full_name or not full_name.strip():
        return MISSING, MISSING

    parts = full_name.split()
    if len(parts) == 1:
        return parts[0], MISSING
    return parts[0], " ".join(parts[1:])


def _text(data: Dict[str, Any], *keys: str) -> Optional[str]:
    """First non-empty string value among keys."""
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _items(data: Dict[str, Any], *keys: str) -> List[Dict[str, Any]]:
    for key in keys:
        value = data.get(key)
        if isinstance(value, list):
            return [item for item in value if isinstance(item, dict)]
    return []


def _skills(data: Dict[str, Any]) -> List[str]:
    raw = data.get("skills")
    if not isinstance(raw, list):
        return []

    skills = []
    for item in raw:
        if isinstance(item, str) and item.strip():
            skills.append(item.strip())
        elif isinstance(item, dict):
            name = _text(item, "title", "name")
            if name:
                skills.append(name)
    return skills


class ProfileScraperGateway(ABC):
    """
    Base class for scraping providers.

    Subclasses implement fetch_profile(), which raises ScraperError (or lets
    an httpx error escape) on failure. scrape() turns either outcome into a
    ScrapeResult so callers never handle provider exceptions.
    """

    name = "base"

    @abstractmethod
    async def fetch_profile(self, url: str) -> NormalizedCandidate:
        """
        Fetch and normalize one profile.

        Args:
            url: LinkedIn profile URL

        Returns:
            NormalizedCandidate for the profile

        Raises:
            ScraperError: Profile not found, private, or provider error
        """
        pass

    async def scrape(self, url: str) -> ScrapeResult:
        try:
            candidate = await self.fetch_profile(url)
        except ScraperError as e:
            logger.warning(f"{self.name} scrape failed for {url}: {e.detail}")
            return ScrapeResult.failure(url, e.detail)
        except httpx.HTTPError as e:
            logger.warning(f"{self.name} request failed for {url}: {e}")
            return ScrapeResult.failure(url, f"Scraper request failed: {type(e).__name__}")

        return ScrapeResult.success(url, candidate)

    @staticmethod
    def _require_first_name(first_name: str, url: str) -> None:
        if not first_name or first_name == MISSING:
            raise ScraperError(
                f"Could not extract profile data from {url}; the profile may be private or restricted"
            )

    @staticmethod
    def _raise_for_status(response: httpx.Response, provider: str) -> None:
        if response.status_code == 404:
            raise ScraperError(f"{provider}: profile not found")
        if response.status_code == 429:
            raise ScraperError(f"{provider}: rate limit exceeded")
        if response.status_code >= 400:
            logger.error(f"{provider} API error: {response.status_code} - {response.text[:500]}")
            raise ScraperError(f"{provider} API error: {response.status_code}")


class ScrapingDogGateway(ProfileScraperGateway):
    """ScrapingDog LinkedIn profile API."""

    name = "scrapingdog"
    API_URL = "https://api.scrapingdog.com/profile"

    def __init__(self, api_key: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key if api_key is not None else settings.SCRAPINGDOG_API_KEY
        self.timeout = timeout or settings.SCRAPER_TIMEOUT_SECONDS
        self.transport = transport

    async def fetch_profile(self, url: str) -> NormalizedCandidate:
        if not self.api_key:
            raise ScraperError("SCRAPINGDOG_API_KEY is not configured")

        profile_id = extract_profile_id(url)
        if not profile_id:
            raise ScraperError(f"Could not extract profile id from {url}")

        params = {
            "api_key": self.api_key,
            "id": profile_id,
            "type": "profile",
            "premium": "true",
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.get(self.API_URL, params=params)

        self._raise_for_status(response, "ScrapingDog")

        payload = response.json()
        # The API answers with a list holding one profile
        if isinstance(payload, list):
            payload = payload[0] if payload else None
        if not isinstance(payload, dict):
            raise ScraperError(f"ScrapingDog returned no profile for {url}")

        return self.normalize(payload, url)

    def normalize(self, data: Dict[str, Any], url: str) -> NormalizedCandidate:
        first_name = _text(data, "first_name", "firstName")
        last_name = _text(data, "last_name", "lastName")
        if not first_name:
            first_name, split_last = split_full_name(_text(data, "fullName", "full_name", "name"))
            last_name = last_name or split_last

        self._require_first_name(first_name, url)

        experience = [
            ExperienceEntry(
                title=_text(item, "position", "title") or MISSING,
                company=_text(item, "company_name", "companyName", "company") or MISSING,
                duration=_text(item, "duration", "summary") or self._date_range(item),
            )
            for item in _items(data, "experience", "experiences")
        ]

        education = [
            EducationEntry(
                school=_text(item, "college_name", "school", "schoolName") or MISSING,
                degree=_text(item, "college_degree", "degree", "degreeName") or MISSING,
            )
            for item in _items(data, "education", "educations")
        ]

        return NormalizedCandidate(
            first_name=first_name,
            last_name=last_name or MISSING,
            headline=_text(data, "headline", "sub_title"),
            location=_text(data, "location", "addressWithCountry"),
            linkedin_url=url,
            experience=experience,
            education=education,
            skills=_skills(data),
            about=_text(data, "about", "summary"),
        )

    @staticmethod
    def _date_range(item: Dict[str, Any]) -> str:
        start = _text(item, "starts_at", "start_date")
        end = _text(item, "ends_at", "end_date")
        if not start:
            return MISSING
        return f"{start} - {end or 'Present'}"


class ApifyGateway(ProfileScraperGateway):
    """Apify LinkedIn profile actor, run synchronously."""

    name = "apify"
    API_BASE = "https://api.apify.com/v2/acts"

    def __init__(self, api_token: Optional[str] = None, actor_id: Optional[str] = None,
                 timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_token = api_token if api_token is not None else settings.APIFY_API_TOKEN
        self.actor_id = actor_id or settings.APIFY_ACTOR_ID
        self.timeout = timeout or settings.SCRAPER_TIMEOUT_SECONDS
        self.transport = transport

    async def fetch_profile(self, url: str) -> NormalizedCandidate:
        if not self.api_token:
            raise ScraperError("APIFY_API_TOKEN is not configured")

        endpoint = f"{self.API_BASE}/{self.actor_id}/run-sync-get-dataset-items"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                endpoint,
                params={"token": self.api_token},
                json={"profileUrls": [url]},
            )

        self._raise_for_status(response, "Apify")

        items = response.json()
        if not isinstance(items, list) or not items or not isinstance(items[0], dict):
            raise ScraperError(f"Apify returned no profile for {url}")

        return self.normalize(items[0], url)

    def normalize(self, data: Dict[str, Any], url: str) -> NormalizedCandidate:
        first_name, last_name = split_full_name(_text(data, "fullName"))
        first_name = _text(data, "firstName") or first_name
        last_name = _text(data, "lastName") or last_name

        self._require_first_name(first_name, url)

        experience = [
            ExperienceEntry(
                title=_text(item, "title") or MISSING,
                company=_text(item, "companyName", "subtitle") or MISSING,
                duration=self._duration(item),
            )
            for item in _items(data, "experiences")
        ]

        # Apify puts the school in "title" and the degree in "subtitle"
        education = [
            EducationEntry(
                school=_text(item, "title") or MISSING,
                degree=_text(item, "subtitle") or MISSING,
            )
            for item in _items(data, "educations")
        ]

        return NormalizedCandidate(
            first_name=first_name,
            last_name=last_name,
            headline=_text(data, "headline"),
            location=_text(data, "addressWithCountry", "location"),
            linkedin_url=url,
            experience=experience,
            education=education,
            skills=_skills(data),
            about=_text(data, "about"),
        )

    @staticmethod
    def _duration(item: Dict[str, Any]) -> str:
        start = _text(item, "jobStartedOn")
        if not start:
            return _text(item, "caption") or MISSING
        if item.get("jobStillWorking"):
            return f"{start} - Present"
        end = _text(item, "jobEndedOn")
        return f"{start} - {end}" if end else start


def get_scraper(provider: Optional[str] = None) -> ProfileScraperGateway:
    """
    Build the gateway for the configured provider.

    Raises:
        ValueError: Unknown provider name
    """
    provider = (provider or settings.SCRAPER_PROVIDER).lower()
    if provider == "scrapingdog":
        return ScrapingDogGateway()
    if provider == "apify":
        return ApifyGateway()
    raise ValueError(f"Unknown scraper provider: {provider}")
