"""
Tests for the application status workflow.

Covers submission, status changes, withdrawal and job-delete cascade, and
the notifications each of them produces.
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from api.services.applications import ApplicationWorkflow
from api.services.notifications import NotificationDispatcher, STATUS_MESSAGES
from core.middleware.error_handling import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
)
from database.models.applications import Application, ApplicationStatus
from database.models.jobs import Job, JobStatus
from database.models.notifications import Notification, NotificationType
from database.models.users import UserRole


async def _count(session_factory, model, *conditions) -> int:
    async with session_factory() as session:
        result = await session.execute(select(func.count(model.id)).where(*conditions))
        return result.scalar_one()


async def _fresh_job(session_factory, job_id: int) -> Job:
    async with session_factory() as session:
        return await session.get(Job, job_id)


@pytest.fixture
def workflow(db_session, dispatcher):
    return ApplicationWorkflow(db_session, dispatcher)


@pytest.fixture
async def job(make_job, recruiter):
    return await make_job(recruiter)


class TestSubmit:
    """Test application submission."""

    async def test_creates_applied_application(self, workflow, job, seeker):
        """A new application starts in `applied` with its job and applicant loaded."""
        application = await workflow.submit(job.id, seeker, cover_letter="Hello")

        assert application.status == ApplicationStatus.APPLIED
        assert application.job.id == job.id
        assert application.applicant.email == seeker.email
        assert application.cover_letter == "Hello"

    async def test_appends_exactly_one_id_to_job(self, workflow, job, seeker, session_factory):
        """The job's application list grows by exactly one."""
        application = await workflow.submit(job.id, seeker)

        stored = await _fresh_job(session_factory, job.id)
        assert stored.application_ids == [application.id]

    async def test_dispatches_two_notifications(
        self, workflow, job, seeker, recruiter, session_factory
    ):
        """One notification to the applicant and one to the job owner."""
        await workflow.submit(job.id, seeker)

        assert await _count(session_factory, Notification) == 2
        assert await _count(
            session_factory,
            Notification,
            Notification.recipient_id == seeker.id,
            Notification.type == NotificationType.APPLICATION_SUBMITTED,
        ) == 1
        assert await _count(
            session_factory,
            Notification,
            Notification.recipient_id == recruiter.id,
            Notification.type == NotificationType.NEW_APPLICATION_RECEIVED,
        ) == 1

    async def test_missing_job(self, workflow, seeker):
        """Unknown job ids raise NotFoundError."""
        with pytest.raises(NotFoundError, match="Job not found"):
            await workflow.submit(9999, seeker)

    @pytest.mark.parametrize("status", [JobStatus.CLOSED, JobStatus.DRAFT])
    async def test_inactive_job_rejected(
        self, workflow, make_job, recruiter, seeker, session_factory, status
    ):
        """Jobs that are not active accept no applications."""
        job = await make_job(recruiter, status=status)

        with pytest.raises(InvalidStateError, match="no longer accepting applications"):
            await workflow.submit(job.id, seeker)

        assert await _count(session_factory, Application) == 0
        assert await _count(session_factory, Notification) == 0

    async def test_duplicate_submission_conflicts(self, workflow, job, seeker, session_factory):
        """A second application to the same job leaves state unchanged."""
        await workflow.submit(job.id, seeker)

        with pytest.raises(ConflictError, match="already applied"):
            await workflow.submit(job.id, seeker)

        assert await _count(session_factory, Application) == 1
        assert len((await _fresh_job(session_factory, job.id)).application_ids) == 1
        assert await _count(session_factory, Notification) == 2

    async def test_same_seeker_may_apply_to_other_jobs(
        self, workflow, make_job, recruiter, seeker, session_factory
    ):
        """Uniqueness is per (job, applicant) pair."""
        first = await make_job(recruiter)
        second = await make_job(recruiter, title="Data Engineer")

        await workflow.submit(first.id, seeker)
        await workflow.submit(second.id, seeker)

        assert await _count(session_factory, Application) == 2

    async def test_notification_failure_does_not_fail_submission(
        self, db_session, job, seeker, session_factory
    ):
        """A dispatcher that cannot persist still lets the application through."""
        broken_engine = create_async_engine("sqlite+aiosqlite://")
        broken = NotificationDispatcher(
            async_sessionmaker(broken_engine, class_=AsyncSession, expire_on_commit=False)
        )
        workflow = ApplicationWorkflow(db_session, broken)

        application = await workflow.submit(job.id, seeker)

        assert application.id is not None
        assert await _count(session_factory, Application) == 1
        assert await _count(session_factory, Notification) == 0
        await broken_engine.dispose()


class TestUpdateStatus:
    """Test status changes by the job owner."""

    @pytest.fixture
    async def application(self, workflow, job, seeker):
        return await workflow.submit(job.id, seeker)

    async def test_changed_status_notifies_once(
        self, workflow, application, recruiter, seeker, session_factory
    ):
        """A real status change produces one notification to the applicant."""
        updated = await workflow.update_status(
            application.id, recruiter, status=ApplicationStatus.SHORTLISTED
        )

        assert updated.status == ApplicationStatus.SHORTLISTED
        async with session_factory() as session:
            result = await session.execute(
                select(Notification).where(
                    Notification.type == NotificationType.APPLICATION_STATUS_CHANGED
                )
            )
            notifications = result.scalars().all()
        assert len(notifications) == 1
        assert notifications[0].recipient_id == seeker.id
        assert "has been shortlisted" in notifications[0].message
        assert notifications[0].data["status"] == "shortlisted"

    @pytest.mark.parametrize("status", list(STATUS_MESSAGES))
    async def test_message_follows_lookup_table(
        self, workflow, application, recruiter, job, session_factory, status
    ):
        """Message text is keyed on the target status."""
        await workflow.update_status(application.id, recruiter, status=status)

        async with session_factory() as session:
            result = await session.execute(
                select(Notification.message).where(
                    Notification.type == NotificationType.APPLICATION_STATUS_CHANGED
                )
            )
            message = result.scalar_one()
        assert message == f"Your application for {job.title} at {job.company} {STATUS_MESSAGES[status]}"

    async def test_same_status_is_silent(self, workflow, application, recruiter, session_factory):
        """Setting the current status again dispatches nothing."""
        await workflow.update_status(application.id, recruiter, status=ApplicationStatus.APPLIED)

        assert await _count(
            session_factory,
            Notification,
            Notification.type == NotificationType.APPLICATION_STATUS_CHANGED,
        ) == 0

    async def test_arbitrary_jump_is_allowed(self, workflow, application, recruiter):
        """Any status may be set directly, e.g. applied -> hired."""
        updated = await workflow.update_status(
            application.id, recruiter, status=ApplicationStatus.HIRED
        )

        assert updated.status == ApplicationStatus.HIRED
        assert updated.is_terminal

    async def test_final_status_is_logged(self, workflow, application, recruiter, caplog):
        """Reaching `rejected` or `hired` is logged once, intermediate moves are not."""
        with caplog.at_level("INFO", logger="api.services.applications"):
            await workflow.update_status(application.id, recruiter, status=ApplicationStatus.REVIEWING)
            await workflow.update_status(application.id, recruiter, status=ApplicationStatus.REJECTED)

        closed = [r.getMessage() for r in caplog.records if "final status" in r.getMessage()]
        assert closed == [f"Application {application.id} closed with final status rejected"]

    async def test_unmapped_status_skips_notification(
        self, workflow, application, recruiter, session_factory
    ):
        """Moving back to `applied` persists but has no message to send."""
        await workflow.update_status(application.id, recruiter, status=ApplicationStatus.REVIEWING)
        updated = await workflow.update_status(
            application.id, recruiter, status=ApplicationStatus.APPLIED
        )

        assert updated.status == ApplicationStatus.APPLIED
        assert await _count(
            session_factory,
            Notification,
            Notification.type == NotificationType.APPLICATION_STATUS_CHANGED,
        ) == 1

    async def test_notes_only(self, workflow, application, recruiter, session_factory):
        """Notes are written without a status change or notification."""
        updated = await workflow.update_status(application.id, recruiter, notes="Strong CV")

        assert updated.notes == "Strong CV"
        assert updated.status == ApplicationStatus.APPLIED
        assert await _count(session_factory, Notification) == 2

    async def test_admin_may_update(self, workflow, application, admin):
        """Platform admins manage every job."""
        updated = await workflow.update_status(
            application.id, admin, status=ApplicationStatus.REVIEWING
        )
        assert updated.status == ApplicationStatus.REVIEWING

    async def test_other_recruiter_forbidden(
        self, workflow, application, make_user, session_factory
    ):
        """Recruiters cannot touch applications of jobs they did not post."""
        stranger = await make_user(UserRole.RECRUITER)

        with pytest.raises(ForbiddenError, match="Not authorized to update this application"):
            await workflow.update_status(
                application.id, stranger, status=ApplicationStatus.REJECTED, notes="x"
            )

        async with session_factory() as session:
            stored = await session.get(Application, application.id)
        assert stored.status == ApplicationStatus.APPLIED
        assert stored.notes is None

    async def test_missing_application(self, workflow, recruiter):
        with pytest.raises(NotFoundError, match="Application not found"):
            await workflow.update_status(9999, recruiter, status=ApplicationStatus.REVIEWING)


class TestWithdraw:
    """Test withdrawal by the applicant."""

    async def test_applicant_withdraws(self, workflow, job, seeker, session_factory):
        """The application is deleted and its id leaves the job's list."""
        application = await workflow.submit(job.id, seeker)
        notifications_before = await _count(session_factory, Notification)

        await workflow.withdraw(application.id, seeker)

        assert await _count(session_factory, Application) == 0
        assert (await _fresh_job(session_factory, job.id)).application_ids == []
        assert await _count(session_factory, Notification) == notifications_before

    @pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.SEEKER])
    async def test_others_cannot_withdraw(
        self, workflow, job, seeker, make_user, session_factory, role
    ):
        """Not even admins may withdraw someone else's application."""
        application = await workflow.submit(job.id, seeker)
        other = await make_user(role)

        with pytest.raises(ForbiddenError, match="withdraw"):
            await workflow.withdraw(application.id, other)

        assert await _count(session_factory, Application) == 1

    async def test_job_owner_cannot_withdraw(self, workflow, job, seeker, recruiter):
        application = await workflow.submit(job.id, seeker)

        with pytest.raises(ForbiddenError):
            await workflow.withdraw(application.id, recruiter)


class TestOverlappingWrites:
    """Test writes to one job's application list from separate sessions."""

    async def test_overlapping_submissions_keep_both_ids(
        self, job, make_user, dispatcher, session_factory
    ):
        """Both sessions load the job before either records its application."""
        first, second = await make_user(), await make_user()

        async with session_factory() as session_one, session_factory() as session_two:
            job_one = await session_one.get(Job, job.id)
            job_two = await session_two.get(Job, job.id)

            first_application = await ApplicationWorkflow(session_one, dispatcher).persist_submission(
                job_one, first, None, None
            )
            second_application = await ApplicationWorkflow(session_two, dispatcher).persist_submission(
                job_two, second, None, None
            )

        stored = await _fresh_job(session_factory, job.id)
        assert stored.application_ids == [first_application.id, second_application.id]
        assert stored.application_count == 2

    async def test_withdrawal_overlapping_submission(
        self, job, make_user, dispatcher, session_factory
    ):
        """A submission working from a list read before a withdrawal does not restore the withdrawn id."""
        leaving, arriving = await make_user(), await make_user()
        async with session_factory() as session:
            withdrawn = await ApplicationWorkflow(session, dispatcher).persist_submission(
                await session.get(Job, job.id), leaving, None, None
            )

        async with session_factory() as session_one, session_factory() as session_two:
            stale_job = await session_two.get(Job, job.id)
            assert stale_job.application_ids == [withdrawn.id]

            await ApplicationWorkflow(session_one, dispatcher).withdraw(withdrawn.id, leaving)
            kept = await ApplicationWorkflow(session_two, dispatcher).persist_submission(
                stale_job, arriving, None, None
            )

        assert (await _fresh_job(session_factory, job.id)).application_ids == [kept.id]
        assert await _count(session_factory, Application, Application.job_id == job.id) == 1


class TestCascadeDelete:
    """Test bulk removal when a job is deleted."""

    async def test_removes_all_applications_of_job(
        self, workflow, make_job, recruiter, make_user, session_factory
    ):
        job = await make_job(recruiter)
        other_job = await make_job(recruiter, title="Other")
        for _ in range(3):
            await workflow.submit(job.id, await make_user())
        kept = await workflow.submit(other_job.id, await make_user())
        notifications_before = await _count(session_factory, Notification)

        removed = await workflow.cascade_delete_for_job(job.id)

        assert removed == 3
        assert await _count(session_factory, Application, Application.job_id == job.id) == 0
        assert await _count(session_factory, Application, Application.id == kept.id) == 1
        assert await _count(session_factory, Notification) == notifications_before


class TestListing:
    """Test listing for applicants and job owners."""

    async def test_list_for_applicant_newest_first(self, workflow, make_job, recruiter, seeker):
        first = await make_job(recruiter)
        second = await make_job(recruiter, title="Second")
        a1 = await workflow.submit(first.id, seeker)
        a2 = await workflow.submit(second.id, seeker)

        applications = await workflow.list_for_applicant(seeker)

        assert [a.id for a in applications] == [a2.id, a1.id]

    async def test_list_for_job_requires_owner(self, workflow, job, seeker, make_user):
        await workflow.submit(job.id, seeker)
        stranger = await make_user(UserRole.RECRUITER)

        with pytest.raises(ForbiddenError, match="view these applications"):
            await workflow.list_for_job(job.id, stranger)

    async def test_list_for_job(self, workflow, job, seeker, recruiter):
        await workflow.submit(job.id, seeker)

        applications = await workflow.list_for_job(job.id, recruiter)

        assert len(applications) == 1
        assert applications[0].applicant.email == seeker.email


class TestScenarios:
    """End-to-end workflow scenarios."""

    async def test_submit_shortlist_withdraw(
        self, workflow, job, seeker, recruiter, session_factory
    ):
        application = await workflow.submit(job.id, seeker)
        assert application.status == ApplicationStatus.APPLIED
        assert await _count(session_factory, Notification, Notification.recipient_id == seeker.id) == 1
        assert await _count(session_factory, Notification, Notification.recipient_id == recruiter.id) == 1

        updated = await workflow.update_status(
            application.id, recruiter, status=ApplicationStatus.SHORTLISTED
        )
        assert updated.status == ApplicationStatus.SHORTLISTED
        async with session_factory() as session:
            result = await session.execute(
                select(Notification.message)
                .where(Notification.recipient_id == seeker.id)
                .order_by(Notification.id.desc())
            )
            assert "has been shortlisted" in result.scalars().first()

        await workflow.withdraw(application.id, seeker)
        assert await _count(session_factory, Application, Application.id == application.id) == 0
        assert application.id not in (await _fresh_job(session_factory, job.id)).application_ids

    async def test_double_submit(self, workflow, job, make_user, session_factory):
        seeker_two = await make_user()

        await workflow.submit(job.id, seeker_two)
        with pytest.raises(ConflictError):
            await workflow.submit(job.id, seeker_two)

        assert await _count(
            session_factory,
            Application,
            Application.job_id == job.id,
            Application.applicant_id == seeker_two.id,
        ) == 1
