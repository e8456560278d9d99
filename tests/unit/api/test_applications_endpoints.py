"""
Tests for application endpoints.
"""

import pytest
from sqlalchemy import select

from database.models.jobs import Job, JobStatus
from database.models.notifications import Notification, NotificationType
from database.models.users import UserRole


async def _apply(client, headers, job_id, **extra):
    return await client.post("/api/applications", json={"job_id": job_id, **extra}, headers=headers)


class TestSubmitApplication:
    """Test POST /api/applications."""

    async def test_submit(self, client, make_job, recruiter, seeker, auth_headers, session_factory):
        job = await make_job(recruiter)

        response = await _apply(
            client,
            auth_headers(seeker),
            job.id,
            cover_letter="I like APIs",
            resume="https://files.example.com/cv.pdf",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Application submitted successfully"
        application = data["data"]
        assert application["status"] == "applied"
        assert application["applicant_id"] == seeker.id
        assert application["resume"] == "https://files.example.com/cv.pdf"
        assert application["job"]["title"] == "Backend Engineer"

        async with session_factory() as session:
            stored = await session.get(Job, job.id)
            assert stored.application_ids == [application["id"]]
            types = (await session.execute(select(Notification.type))).scalars().all()
            assert sorted(t.value for t in types) == [
                NotificationType.APPLICATION_SUBMITTED.value,
                NotificationType.NEW_APPLICATION_RECEIVED.value,
            ]

    async def test_duplicate(self, client, make_job, recruiter, seeker, auth_headers):
        job = await make_job(recruiter)
        await _apply(client, auth_headers(seeker), job.id)

        response = await _apply(client, auth_headers(seeker), job.id)

        assert response.status_code == 400
        assert response.json()["message"] == "You have already applied for this job"

    async def test_closed_job(self, client, make_job, recruiter, seeker, auth_headers):
        job = await make_job(recruiter, status=JobStatus.CLOSED)

        response = await _apply(client, auth_headers(seeker), job.id)

        assert response.status_code == 400
        assert response.json()["message"] == "This job is no longer accepting applications"

    async def test_missing_job(self, client, seeker, auth_headers):
        response = await _apply(client, auth_headers(seeker), 9999)
        assert response.status_code == 404

    async def test_recruiter_cannot_apply(self, client, make_job, recruiter, auth_headers):
        job = await make_job(recruiter)

        response = await _apply(client, auth_headers(recruiter), job.id)

        assert response.status_code == 403

    @pytest.mark.parametrize("extra,field", [
        ({"cover_letter": "x" * 2001}, "cover_letter"),
        ({"resume": "not a url"}, "resume"),
    ])
    async def test_validation(self, client, make_job, recruiter, seeker, auth_headers, extra, field):
        job = await make_job(recruiter)

        response = await _apply(client, auth_headers(seeker), job.id, **extra)

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == field


class TestUpdateApplicationStatus:
    """Test PUT /api/applications/{id}/status."""

    @pytest.fixture
    async def application(self, client, make_job, recruiter, seeker, auth_headers):
        job = await make_job(recruiter)
        response = await _apply(client, auth_headers(seeker), job.id)
        return response.json()["data"]

    async def test_owner_moves_status(self, client, application, recruiter, seeker, auth_headers):
        response = await client.put(
            f"/api/applications/{application['id']}/status",
            json={"status": "shortlisted", "notes": "Strong profile"},
            headers=auth_headers(recruiter),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Application status updated successfully"
        assert data["data"]["status"] == "shortlisted"
        assert data["data"]["notes"] == "Strong profile"

        inbox = await client.get("/api/notifications", headers=auth_headers(seeker))
        latest = inbox.json()["data"][0]
        assert latest["type"] == "application_status_changed"
        assert latest["message"] == "Your application for Backend Engineer at Acme has been shortlisted"

    async def test_invalid_status(self, client, application, recruiter, auth_headers):
        response = await client.put(
            f"/api/applications/{application['id']}/status",
            json={"status": "ghosted"},
            headers=auth_headers(recruiter),
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "status"

    async def test_other_recruiter_forbidden(self, client, application, make_user, auth_headers):
        other = await make_user(UserRole.RECRUITER)

        response = await client.put(
            f"/api/applications/{application['id']}/status",
            json={"status": "rejected"},
            headers=auth_headers(other),
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Not authorized to update this application"

    async def test_missing_application(self, client, recruiter, auth_headers):
        response = await client.put(
            "/api/applications/9999/status", json={"status": "hired"}, headers=auth_headers(recruiter)
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Application not found"


class TestWithdrawApplication:
    """Test DELETE /api/applications/{id}."""

    async def test_withdraw(self, client, make_job, recruiter, seeker, auth_headers, session_factory):
        job = await make_job(recruiter)
        application = (await _apply(client, auth_headers(seeker), job.id)).json()["data"]

        response = await client.delete(
            f"/api/applications/{application['id']}", headers=auth_headers(seeker)
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Application withdrawn successfully"
        async with session_factory() as session:
            assert (await session.get(Job, job.id)).application_ids == []

    async def test_other_seeker_forbidden(self, client, make_job, recruiter, seeker, make_user, auth_headers):
        job = await make_job(recruiter)
        application = (await _apply(client, auth_headers(seeker), job.id)).json()["data"]
        other = await make_user(UserRole.SEEKER)

        response = await client.delete(
            f"/api/applications/{application['id']}", headers=auth_headers(other)
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Not authorized to withdraw this application"


class TestListApplications:
    """Test GET /api/applications/my and /api/applications/job/{job_id}."""

    async def test_my_applications(self, client, make_job, recruiter, seeker, auth_headers):
        first = await make_job(recruiter, title="First")
        second = await make_job(recruiter, title="Second")
        await _apply(client, auth_headers(seeker), first.id)
        await _apply(client, auth_headers(seeker), second.id)

        response = await client.get("/api/applications/my", headers=auth_headers(seeker))

        data = response.json()
        assert data["count"] == 2
        assert [a["job"]["title"] for a in data["data"]] == ["Second", "First"]

    async def test_job_applications_for_owner(self, client, make_job, recruiter, seeker, auth_headers):
        job = await make_job(recruiter)
        await _apply(client, auth_headers(seeker), job.id)

        response = await client.get(f"/api/applications/job/{job.id}", headers=auth_headers(recruiter))

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["data"][0]["applicant"]["email"] == seeker.email

    async def test_job_applications_forbidden_for_others(
        self, client, make_job, recruiter, make_user, auth_headers
    ):
        job = await make_job(recruiter)
        other = await make_user(UserRole.RECRUITER)

        response = await client.get(f"/api/applications/job/{job.id}", headers=auth_headers(other))

        assert response.status_code == 403

    async def test_admin_sees_any_job(self, client, make_job, recruiter, admin, auth_headers):
        job = await make_job(recruiter)

        response = await client.get(f"/api/applications/job/{job.id}", headers=auth_headers(admin))

        assert response.status_code == 200
        assert response.json()["count"] == 0
