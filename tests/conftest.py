"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Database setup/teardown
- FastAPI test client with bearer tokens per role
- Fake scraper and scorer gateways
- Captured notifications and a disabled rate limiter
"""

import json
import uuid
from typing import Dict, List, Optional, Union

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.models.job import Job, JobStatus, SeniorityLevel
from app.models.user import User, UserRole
from app.schemas.candidate import EducationEntry, ExperienceEntry, NormalizedCandidate
from app.schemas.intake import MatchResult
from app.services.match_scorer import MatchScorer, parse_score_response
from app.services.profile_scraper import ProfileScraperGateway
from main import app


# Use in-memory SQLite for testing (fast, isolated)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def profile_url(slug: str) -> str:
    return f"https://www.linkedin.com/in/{slug}"


def make_profile(slug: str, first_name: str = "Ada", last_name: str = "Lovelace") -> NormalizedCandidate:
    return NormalizedCandidate(
        first_name=first_name,
        last_name=last_name,
        headline="Senior Python Engineer",
        location="London, UK",
        linkedin_url=profile_url(slug),
        experience=[ExperienceEntry(title="Backend Engineer", company="Analytical Engines", duration="2019 - Present")],
        education=[EducationEntry(school="University of London", degree="BSc Mathematics")],
        skills=["Python", "FastAPI", "PostgreSQL"],
    )


class FakeScraper(ProfileScraperGateway):
    """
    Scraper that answers from a dict keyed by URL.

    Values may be a NormalizedCandidate or an exception to raise. Unknown
    URLs get a generated profile.
    """

    name = "fake"

    def __init__(self, responses: Optional[Dict[str, Union[NormalizedCandidate, Exception]]] = None):
        self.responses = responses or {}
        self.calls: List[str] = []

    async def fetch_profile(self, url: str) -> NormalizedCandidate:
        self.calls.append(url)
        response = self.responses.get(url)
        if isinstance(response, Exception):
            raise response
        if response is None:
            return make_profile(url.rstrip("/").rsplit("/", 1)[-1]).model_copy(update={"linkedin_url": url})
        return response


class FakeScorer(MatchScorer):
    """
    Scorer that returns a fixed score, with per-URL overrides.

    Override values may be an int score, a raw model reply to parse, or an
    exception to raise.
    """

    name = "fake"

    def __init__(self, default_score: int = 80, overrides: Optional[Dict[str, Union[int, str, Exception]]] = None):
        self.default_score = default_score
        self.overrides = overrides or {}
        self.calls: List[str] = []

    async def complete(self, prompt: str) -> str:
        return json.dumps({"score": self.default_score, "reasoning": "fake"})

    async def score(self, job, candidate):
        self.calls.append(candidate.linkedin_url)
        override = self.overrides.get(candidate.linkedin_url, self.default_score)
        if isinstance(override, Exception):
            raise override
        if isinstance(override, str):
            return parse_score_response(override)
        return MatchResult(score=override, reasoning=f"Scored {override} by fake scorer")


@pytest.fixture
def db_session():
    """
    Create a fresh database session for each test.
    Tables are dropped after the test completes.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """
    FastAPI test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def captured_notifications(monkeypatch):
    """
    Record outbound webhook notifications instead of queueing them on Celery.
    """
    sent = []

    def fake_enqueue(url, payload):
        sent.append(payload)
        return True

    monkeypatch.setattr("app.services.notifications._enqueue", fake_enqueue)
    return sent


@pytest.fixture(autouse=True)
def no_rate_limit(monkeypatch):
    """Disable the Redis rate limiter."""
    from app.core.rate_limiter import rate_limiter

    monkeypatch.setattr(rate_limiter, "check_rate_limit", lambda *args, **kwargs: None)


@pytest.fixture
def fake_scraper():
    return FakeScraper()


@pytest.fixture
def fake_scorer():
    return FakeScorer()


@pytest.fixture
def use_fakes(monkeypatch, fake_scraper, fake_scorer):
    """Make the intake pipeline use the fake gateways by default."""
    monkeypatch.setattr("app.services.intake_pipeline.get_scraper", lambda: fake_scraper)
    monkeypatch.setattr("app.services.intake_pipeline.get_match_scorer", lambda: fake_scorer)
    return fake_scraper, fake_scorer


def _create_user(db, email: str, role: UserRole, full_name: str) -> User:
    user = User(id=uuid.uuid4(), email=email, full_name=full_name, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def client_user(db_session):
    return _create_user(db_session, "client@example.com", UserRole.CLIENT, "Clara Client")


@pytest.fixture
def sourcer(db_session):
    return _create_user(db_session, "sourcer@example.com", UserRole.SOURCER, "Sam Sourcer")


@pytest.fixture
def other_sourcer(db_session):
    return _create_user(db_session, "rival@example.com", UserRole.SOURCER, "Riley Rival")


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client_headers(client_user):
    return auth_headers(client_user)


@pytest.fixture
def sourcer_headers(sourcer):
    return auth_headers(sourcer)


@pytest.fixture
def other_sourcer_headers(other_sourcer):
    return auth_headers(other_sourcer)


@pytest.fixture
def sample_job_data():
    """Sample job data for testing"""
    return {
        "title": "Senior Python Developer",
        "description": """
        We are looking for a Senior Python Developer with 5+ years of experience.

        Requirements:
        - Expert knowledge of Python and FastAPI
        - Strong experience with PostgreSQL
        - Experience with Docker and containerization
        """,
        "company_name": "Acme Robotics",
        "seniority_level": "Senior",
        "key_skills": ["Python", "FastAPI", "PostgreSQL"],
        "candidates_requested": 3,
        "location": "San Francisco, CA",
        "work_arrangement": "Remote",
    }


def _create_job(db, owner: User, status: JobStatus = JobStatus.UNCLAIMED,
                sourcer: Optional[User] = None, candidates_requested: int = 3) -> Job:
    job = Job(
        user_id=owner.id,
        title="Senior Python Developer",
        description="Build and run FastAPI services backed by PostgreSQL.",
        company_name="Acme Robotics",
        seniority_level=SeniorityLevel.SENIOR,
        key_skills=["Python", "FastAPI", "PostgreSQL"],
        candidates_requested=candidates_requested,
        status=status,
        sourcer_id=sourcer.id if sourcer else None,
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


@pytest.fixture
def unclaimed_job(db_session, client_user):
    return _create_job(db_session, client_user)


@pytest.fixture
def claimed_job(db_session, client_user, sourcer):
    return _create_job(db_session, client_user, status=JobStatus.CLAIMED, sourcer=sourcer)


@pytest.fixture
def job_factory(db_session, client_user):
    def factory(**kwargs):
        return _create_job(db_session, client_user, **kwargs)
    return factory
