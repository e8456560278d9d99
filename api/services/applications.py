"""
Application status workflow.

Governs an application's life: submission to an active job, status changes
by the job's owner, withdrawal by the applicant and bulk removal when the
job is deleted. Submissions and user-visible status changes are paired with
notifications through the `NotificationDispatcher`.

Submission writes happen as separate commits in a fixed order:

1. create the application (status `applied`)
2. append its id to the job's `application_ids`
3. notify the applicant, then the job owner

Step 2 re-reads the job under a row lock, so overlapping submissions and
withdrawals on one job never drop each other's ids.

There is no enclosing transaction; a failure between 1 and 2 leaves an
application that is missing from its job's list. Steps 1-2 live in
`persist_submission` so a deployment can override it to wrap them in one
transaction. Notification failures never change the result of an operation.
"""

import logging
from typing import List, Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from api.services.notifications import NotificationDispatcher
from core.middleware.authorization import ensure_may_manage
from core.middleware.error_handling import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
)
from database.models.applications import Application, ApplicationStatus
from database.models.jobs import Job, JobStatus
from database.models.users import User

logger = logging.getLogger(__name__)


class ApplicationWorkflow:
    """
    Application operations bound to one request's session.

    Args:
        session: Session used for every workflow read and write
        dispatcher: Notification producer for submission and status events
    """

    def __init__(self, session: AsyncSession, dispatcher: NotificationDispatcher):
        self.session = session
        self.dispatcher = dispatcher

    # ==================== Lookups ===================== #
    async def _get_job(self, job_id: int) -> Job:
        job = await self.session.get(Job, job_id)
        if job is None:
            raise NotFoundError("Job not found")
        return job

    async def _lock_job(self, job_id: int) -> Job:
        """
        Re-read a job under a row lock, replacing any stale copy in the session.

        `application_ids` is written back whole on commit; read and write it
        only through the copy returned here.
        """
        result = await self.session.execute(
            select(Job)
            .where(Job.id == job_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        job = result.scalar_one_or_none()
        if job is None:
            raise NotFoundError("Job not found")
        return job

    async def _get_application(self, application_id: int) -> Application:
        result = await self.session.execute(
            select(Application)
            .options(selectinload(Application.job))
            .where(Application.id == application_id)
        )
        application = result.scalar_one_or_none()
        if application is None:
            raise NotFoundError("Application not found")
        return application

    async def load(self, application_id: int) -> Application:
        """Fresh copy of an application with its job and applicant loaded."""
        result = await self.session.execute(
            select(Application)
            .options(
                selectinload(Application.job),
                selectinload(Application.applicant),
            )
            .where(Application.id == application_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def _find_existing(self, job_id: int, applicant_id: int) -> Optional[Application]:
        result = await self.session.execute(
            select(Application).where(
                Application.job_id == job_id,
                Application.applicant_id == applicant_id,
            )
        )
        return result.scalar_one_or_none()

    # ==================== Submit ===================== #
    async def submit(
        self,
        job_id: int,
        applicant: User,
        cover_letter: Optional[str] = None,
        resume_url: Optional[str] = None,
    ) -> Application:
        """
        Apply `applicant` to a job.

        Raises:
            NotFoundError: Job does not exist
            InvalidStateError: Job is not active
            ConflictError: Applicant already applied to this job
        """
        job = await self._get_job(job_id)
        if job.status != JobStatus.ACTIVE:
            raise InvalidStateError("This job is no longer accepting applications")

        if await self._find_existing(job.id, applicant.id) is not None:
            raise ConflictError("You have already applied for this job")

        application = await self.persist_submission(job, applicant, cover_letter, resume_url)
        logger.info(
            f"User {applicant.id} applied to job {job.id} (application {application.id})"
        )

        await self.dispatcher.notify_application_submitted(application, job)
        await self.dispatcher.notify_new_application(
            job.posted_by_id, application, job, applicant
        )

        return await self.load(application.id)

    async def persist_submission(
        self,
        job: Job,
        applicant: User,
        cover_letter: Optional[str],
        resume_url: Optional[str],
    ) -> Application:
        """
        Create the application, then record it on the job.

        Each step commits on its own. Override to change the consistency
        guarantees of submission.
        """
        application = Application(
            job_id=job.id,
            applicant_id=applicant.id,
            cover_letter=cover_letter,
            resume=resume_url,
            status=ApplicationStatus.APPLIED,
        )
        self.session.add(application)
        try:
            await self.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent submission for the same pair
            await self.session.rollback()
            raise ConflictError("You have already applied for this job")

        job = await self._lock_job(job.id)
        job.application_ids.append(application.id)
        await self.session.commit()
        return application

    # ==================== Status ===================== #
    async def update_status(
        self,
        application_id: int,
        caller: User,
        status: Optional[ApplicationStatus] = None,
        notes: Optional[str] = None,
    ) -> Application:
        """
        Move an application to `status` and/or replace its notes.

        A notification goes to the applicant only when the status actually
        changes.

        Raises:
            NotFoundError: Application does not exist
            ForbiddenError: Caller is neither the job owner nor an admin
        """
        application = await self._get_application(application_id)
        job = application.job
        ensure_may_manage(job, caller, "update this application")

        previous = application.status
        changed = status is not None and status != previous
        if changed:
            application.status = status
        if notes is not None:
            application.notes = notes
        await self.session.commit()

        if changed:
            logger.info(
                f"Application {application.id} moved {previous.value} -> "
                f"{status.value} by user {caller.id}"
            )
            if application.is_terminal:
                logger.info(f"Application {application.id} closed with final status {status.value}")
            await self.dispatcher.notify_application_status_changed(application, job)

        return await self.load(application.id)

    # ==================== Withdraw / Delete ===================== #
    async def withdraw(self, application_id: int, caller: User) -> None:
        """
        Remove the caller's own application.

        Raises:
            NotFoundError: Application does not exist
            ForbiddenError: Caller is not the applicant
        """
        application = await self._get_application(application_id)
        if application.applicant_id != caller.id:
            raise ForbiddenError("Not authorized to withdraw this application")

        if application.job is not None:
            job = await self._lock_job(application.job_id)
            if application.id in job.application_ids:
                job.application_ids.remove(application.id)
            await self.session.commit()

        await self.session.delete(application)
        await self.session.commit()
        logger.info(f"Application {application_id} withdrawn by user {caller.id}")

    async def cascade_delete_for_job(self, job_id: int) -> int:
        """Delete every application of a job. Returns how many were removed."""
        result = await self.session.execute(
            delete(Application).where(Application.job_id == job_id)
        )
        await self.session.commit()
        if result.rowcount:
            logger.info(f"Removed {result.rowcount} applications of deleted job {job_id}")
        return result.rowcount

    # ==================== Listing ===================== #
    async def list_for_applicant(self, applicant: User) -> List[Application]:
        """Applicant's applications, newest first, with their jobs."""
        result = await self.session.execute(
            select(Application)
            .options(
                selectinload(Application.job),
                selectinload(Application.applicant),
            )
            .where(Application.applicant_id == applicant.id)
            .order_by(Application.created_at.desc(), Application.id.desc())
        )
        return list(result.scalars().all())

    async def list_for_job(self, job_id: int, caller: User) -> List[Application]:
        """
        A job's applications, newest first, with applicant e-mails.

        Raises:
            NotFoundError: Job does not exist
            ForbiddenError: Caller is neither the job owner nor an admin
        """
        job = await self._get_job(job_id)
        ensure_may_manage(job, caller, "view these applications")

        result = await self.session.execute(
            select(Application)
            .options(
                selectinload(Application.job),
                selectinload(Application.applicant),
            )
            .where(Application.job_id == job.id)
            .order_by(Application.created_at.desc(), Application.id.desc())
        )
        return list(result.scalars().all())
