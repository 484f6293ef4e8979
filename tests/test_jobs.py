"""
Test suite for job endpoints.

Tests cover:
- Job creation and role checks
- Job listing and visibility
- Claiming and completion over HTTP
- Quota and sourcer stats
"""

import uuid

from app.models.candidate import Candidate
from app.models.job import JobStatus
from app.models.user import User, UserRole
from tests.conftest import auth_headers


def add_candidates(db, job, count):
    for i in range(count):
        db.add(Candidate(
            job_id=job.id,
            first_name=f"Candidate{i}",
            last_name="Test",
            linkedin_url=f"https://linkedin.com/in/api-candidate-{i}",
            match_score=70 + i,
            match_reasoning="Relevant experience",
        ))
    db.commit()


class TestJobCreation:
    """Tests for job creation endpoint"""

    def test_create_job_success(self, client, client_headers, client_user, sample_job_data):
        response = client.post("/api/v1/jobs/", json=sample_job_data, headers=client_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "Unclaimed"
        assert data["user_id"] == str(client_user.id)
        assert data["sourcer_id"] is None
        assert data["candidates_requested"] == 3
        assert data["key_skills"] == ["Python", "FastAPI", "PostgreSQL"]

    def test_create_job_queues_notifications(self, client, client_headers, sample_job_data, captured_notifications):
        client.post("/api/v1/jobs/", json=sample_job_data, headers=client_headers)

        events = [payload["event"] for payload in captured_notifications]
        assert events == ["job_submitted", "job_status_update"]
        assert captured_notifications[0]["userEmail"] == "client@example.com"
        assert captured_notifications[1]["message"] == "Job Unclaimed: Senior Python Developer at Acme Robotics"

    def test_create_job_missing_fields(self, client, client_headers):
        response = client.post("/api/v1/jobs/", json={"title": "Test Job"}, headers=client_headers)

        assert response.status_code == 422

    def test_create_job_requires_positive_target(self, client, client_headers, sample_job_data):
        sample_job_data["candidates_requested"] = 0

        response = client.post("/api/v1/jobs/", json=sample_job_data, headers=client_headers)

        assert response.status_code == 422

    def test_create_job_rejects_unknown_seniority(self, client, client_headers, sample_job_data):
        sample_job_data["seniority_level"] = "Wizard"

        response = client.post("/api/v1/jobs/", json=sample_job_data, headers=client_headers)

        assert response.status_code == 422

    def test_sourcer_cannot_create_job(self, client, sourcer_headers, sample_job_data):
        response = client.post("/api/v1/jobs/", json=sample_job_data, headers=sourcer_headers)

        assert response.status_code == 403

    def test_requires_authentication(self, client, sample_job_data):
        response = client.post("/api/v1/jobs/", json=sample_job_data)

        assert response.status_code in (401, 403)

    def test_rejects_token_for_unknown_user(self, client, sample_job_data):
        ghost = User(id=uuid.uuid4(), email="ghost@example.com", role=UserRole.CLIENT)

        response = client.post("/api/v1/jobs/", json=sample_job_data, headers=auth_headers(ghost))

        assert response.status_code == 401


class TestJobRetrieval:
    """Tests for job listing and lookup"""

    def test_sourcer_sees_all_jobs(self, client, sourcer_headers, job_factory):
        job_factory()
        job_factory()

        response = client.get("/api/v1/jobs/", headers=sourcer_headers)

        assert response.status_code == 200
        assert len(response.json()) == 2

    def test_filter_by_status(self, client, sourcer_headers, job_factory, sourcer):
        job_factory()
        claimed = job_factory(status=JobStatus.CLAIMED, sourcer=sourcer)

        response = client.get("/api/v1/jobs/?status=Claimed", headers=sourcer_headers)

        assert [job["id"] for job in response.json()] == [str(claimed.id)]

    def test_mine_lists_held_jobs(self, client, sourcer_headers, job_factory, sourcer, other_sourcer):
        mine = job_factory(status=JobStatus.CLAIMED, sourcer=sourcer)
        job_factory(status=JobStatus.CLAIMED, sourcer=other_sourcer)
        job_factory()

        response = client.get("/api/v1/jobs/?mine=true", headers=sourcer_headers)

        assert [job["id"] for job in response.json()] == [str(mine.id)]

    def test_client_sees_only_own_jobs(self, client, db_session, client_headers, job_factory):
        own = job_factory()
        stranger = User(id=uuid.uuid4(), email="other-client@example.com", role=UserRole.CLIENT)
        db_session.add(stranger)
        db_session.commit()

        response = client.get("/api/v1/jobs/", headers=auth_headers(stranger))
        assert response.json() == []

        response = client.get("/api/v1/jobs/", headers=client_headers)
        assert [job["id"] for job in response.json()] == [str(own.id)]

    def test_get_job_by_id(self, client, sourcer_headers, unclaimed_job):
        response = client.get(f"/api/v1/jobs/{unclaimed_job.id}", headers=sourcer_headers)

        assert response.status_code == 200
        assert response.json()["title"] == "Senior Python Developer"

    def test_get_nonexistent_job(self, client, sourcer_headers):
        response = client.get(f"/api/v1/jobs/{uuid.uuid4()}", headers=sourcer_headers)

        assert response.status_code == 404
        assert "not found" in response.json()["detail"].lower()

    def test_other_client_gets_404(self, client, db_session, unclaimed_job):
        stranger = User(id=uuid.uuid4(), email="nosy@example.com", role=UserRole.CLIENT)
        db_session.add(stranger)
        db_session.commit()

        response = client.get(f"/api/v1/jobs/{unclaimed_job.id}", headers=auth_headers(stranger))

        assert response.status_code == 404


class TestClaimEndpoint:

    def test_claim(self, client, sourcer_headers, sourcer, unclaimed_job):
        response = client.post(f"/api/v1/jobs/{unclaimed_job.id}/claim", headers=sourcer_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Claimed"
        assert data["sourcer_id"] == str(sourcer.id)
        assert data["claimed_at"] is not None

    def test_second_claim_conflicts(self, client, sourcer_headers, other_sourcer_headers, unclaimed_job):
        client.post(f"/api/v1/jobs/{unclaimed_job.id}/claim", headers=sourcer_headers)

        response = client.post(f"/api/v1/jobs/{unclaimed_job.id}/claim", headers=other_sourcer_headers)

        assert response.status_code == 409
        assert response.json()["error"] == "AlreadyClaimed"

    def test_claim_missing_job(self, client, sourcer_headers):
        response = client.post(f"/api/v1/jobs/{uuid.uuid4()}/claim", headers=sourcer_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "JobNotFound"

    def test_client_cannot_claim(self, client, client_headers, unclaimed_job):
        response = client.post(f"/api/v1/jobs/{unclaimed_job.id}/claim", headers=client_headers)

        assert response.status_code == 403


class TestCompleteEndpoint:

    def test_quota_not_met(self, client, db_session, sourcer_headers, claimed_job):
        add_candidates(db_session, claimed_job, 2)

        response = client.post(f"/api/v1/jobs/{claimed_job.id}/complete", headers=sourcer_headers)

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "QuotaNotMet"
        assert body["current"] == 2
        assert body["required"] == 3

    def test_complete_with_link(self, client, db_session, sourcer_headers, claimed_job):
        add_candidates(db_session, claimed_job, 3)

        response = client.post(
            f"/api/v1/jobs/{claimed_job.id}/complete",
            json={"completion_link": "https://docs.example.com/shortlist"},
            headers=sourcer_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Completed"
        assert data["completion_link"] == "https://docs.example.com/shortlist"
        assert data["completed_at"] is not None

    def test_complete_without_body(self, client, db_session, sourcer_headers, claimed_job):
        add_candidates(db_session, claimed_job, 3)

        response = client.post(f"/api/v1/jobs/{claimed_job.id}/complete", headers=sourcer_headers)

        assert response.status_code == 200
        assert response.json()["completion_link"] is None

    def test_other_sourcer_forbidden(self, client, db_session, other_sourcer_headers, claimed_job):
        add_candidates(db_session, claimed_job, 3)

        response = client.post(f"/api/v1/jobs/{claimed_job.id}/complete", headers=other_sourcer_headers)

        assert response.status_code == 403
        assert response.json()["error"] == "NotJobOwner"

    def test_unclaimed_job_conflicts(self, client, sourcer_headers, unclaimed_job):
        response = client.post(f"/api/v1/jobs/{unclaimed_job.id}/complete", headers=sourcer_headers)

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "InvalidState"
        assert body["current_status"] == "Unclaimed"


class TestQuotaAndStats:

    def test_quota_endpoint(self, client, db_session, client_headers, claimed_job):
        add_candidates(db_session, claimed_job, 1)

        response = client.get(f"/api/v1/jobs/{claimed_job.id}/quota", headers=client_headers)

        assert response.status_code == 200
        assert response.json() == {
            "job_id": str(claimed_job.id),
            "accepted": 1,
            "requested": 3,
            "remaining": 2,
            "progress_percent": 33,
            "quota_met": False,
        }

    def test_sourcer_stats(self, client, sourcer_headers, sourcer, job_factory):
        job_factory(status=JobStatus.CLAIMED, sourcer=sourcer)
        job_factory(status=JobStatus.COMPLETED, sourcer=sourcer)

        response = client.get("/api/v1/sourcers/me/stats", headers=sourcer_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["claimed_jobs"] == 1
        assert data["completed_jobs"] == 1
        assert data["success_rate"] == 50

    def test_stats_require_sourcer(self, client, client_headers):
        response = client.get("/api/v1/sourcers/me/stats", headers=client_headers)

        assert response.status_code == 403
