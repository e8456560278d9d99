"""
Notification service.

`NotificationDispatcher` is the only writer of notification rows. Dispatch is
best-effort: it persists in its own session so a failure never rolls back
or poisons the caller's unit of work, and it reports failure by returning
None instead of raising.

The inbox functions below serve the recipient-facing endpoints (listing,
read/unread toggling, deletion).
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, func, update, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.middleware.error_handling import NotFoundError
from database.models.applications import Application, ApplicationStatus
from database.models.jobs import Job
from database.models.notifications import Notification, NotificationType
from database.models.users import User

logger = logging.getLogger(__name__)


# Message fragment keyed on the target status of a transition
STATUS_MESSAGES: Dict[ApplicationStatus, str] = {
    ApplicationStatus.REVIEWING: "is now being reviewed",
    ApplicationStatus.SHORTLISTED: "has been shortlisted",
    ApplicationStatus.INTERVIEW: "has advanced to interview stage",
    ApplicationStatus.REJECTED: "was not selected",
    ApplicationStatus.HIRED: "Congratulations! You've been selected",
}


def status_message(job: Job, status: ApplicationStatus) -> Optional[str]:
    """Applicant-facing text for a status, or None when the status has no entry."""
    fragment = STATUS_MESSAGES.get(status)
    if fragment is None:
        return None
    return f"Your application for {job.title} at {job.company} {fragment}"


# ==================== Dispatcher ===================== #
class NotificationDispatcher:
    """
    Creates notification records.

    Args:
        session_factory: Factory for the sessions each dispatch runs in
            (normally `database.engine.AsyncSessionLocal`).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def dispatch(
        self,
        recipient_id: int,
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        action_url: Optional[str] = None,
    ) -> Optional[Notification]:
        """
        Persist one notification.

        Returns:
            The stored notification, or None when it could not be persisted
        """
        notification = Notification(
            recipient_id=recipient_id,
            type=type,
            title=title,
            message=message,
            data=data or {},
            read=False,
            action_url=action_url,
        )
        try:
            async with self.session_factory() as session:
                session.add(notification)
                await session.commit()
        except SQLAlchemyError:
            logger.error(
                f"Failed to create {type.value} notification for user {recipient_id}",
                exc_info=True,
            )
            return None

        logger.debug(f"Notification {notification.id} ({type.value}) sent to user {recipient_id}")
        return notification

    # ==================== Canned events ===================== #
    async def notify_application_submitted(
        self, application: Application, job: Job
    ) -> Optional[Notification]:
        return await self.dispatch(
            recipient_id=application.applicant_id,
            type=NotificationType.APPLICATION_SUBMITTED,
            title="Application Submitted",
            message=(
                f"Your application for {job.title} at {job.company} "
                f"has been submitted successfully"
            ),
            data={"application_id": application.id, "job_id": job.id},
            action_url=f"/applications/{application.id}",
        )

    async def notify_application_status_changed(
        self, application: Application, job: Job
    ) -> Optional[Notification]:
        """
        Tell the applicant their application moved to `application.status`.

        Statuses without a message (e.g. back to `applied`) are skipped.
        """
        message = status_message(job, application.status)
        if message is None:
            logger.info(
                f"No status message for '{application.status.value}'; "
                f"skipping notification for application {application.id}"
            )
            return None

        return await self.dispatch(
            recipient_id=application.applicant_id,
            type=NotificationType.APPLICATION_STATUS_CHANGED,
            title="Application Status Updated",
            message=message,
            data={
                "application_id": application.id,
                "job_id": job.id,
                "status": application.status.value,
            },
            action_url=f"/applications/{application.id}",
        )

    async def notify_new_application(
        self,
        recruiter_id: int,
        application: Application,
        job: Job,
        applicant: User,
    ) -> Optional[Notification]:
        return await self.dispatch(
            recipient_id=recruiter_id,
            type=NotificationType.NEW_APPLICATION_RECEIVED,
            title="New Application Received",
            message=f"{applicant.email} has applied for {job.title}",
            data={
                "application_id": application.id,
                "job_id": job.id,
                "applicant_id": applicant.id,
            },
            action_url=f"/jobs/{job.id}/applications",
        )

    # Called by an external scheduler, not by any request handler
    async def notify_job_deadline_approaching(
        self, user_id: int, job: Job, days_left: int
    ) -> Optional[Notification]:
        return await self.dispatch(
            recipient_id=user_id,
            type=NotificationType.JOB_DEADLINE_APPROACHING,
            title="Job Deadline Approaching",
            message=f"The deadline for {job.title} at {job.company} is in {days_left} days",
            data={"job_id": job.id, "days_left": days_left},
            action_url=f"/jobs/{job.id}",
        )

    async def notify_job_match(self, user_id: int, job: Job) -> Optional[Notification]:
        return await self.dispatch(
            recipient_id=user_id,
            type=NotificationType.NEW_JOB_MATCH,
            title="New Job Match",
            message=f"A new job matching your preferences: {job.title} at {job.company}",
            data={"job_id": job.id},
            action_url=f"/jobs/{job.id}",
        )


# ==================== Inbox ===================== #
async def count_unread(session: AsyncSession, user_id: int) -> int:
    result = await session.execute(
        select(func.count(Notification.id)).where(
            Notification.recipient_id == user_id,
            Notification.read.is_(False),
        )
    )
    return result.scalar_one()


async def list_notifications(
    session: AsyncSession,
    user_id: int,
    offset: int,
    limit: int,
    read: Optional[bool] = None,
) -> Tuple[List[Notification], int]:
    """
    Caller's notifications, newest first.

    Returns:
        (page of notifications, total matching the filter)
    """
    conditions = [Notification.recipient_id == user_id]
    if read is not None:
        conditions.append(Notification.read.is_(read))

    total = (
        await session.execute(select(func.count(Notification.id)).where(*conditions))
    ).scalar_one()

    result = await session.execute(
        select(Notification)
        .where(*conditions)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def _get_own(session: AsyncSession, notification_id: int, user_id: int) -> Notification:
    result = await session.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.recipient_id == user_id,
        )
    )
    notification = result.scalar_one_or_none()
    if notification is None:
        raise NotFoundError("Notification not found")
    return notification


async def set_read(
    session: AsyncSession, notification_id: int, user_id: int, read: bool
) -> Notification:
    """Toggle the read flag on one of the caller's notifications."""
    notification = await _get_own(session, notification_id, user_id)
    notification.read = read
    await session.commit()
    await session.refresh(notification)
    return notification


async def mark_all_read(session: AsyncSession, user_id: int) -> int:
    result = await session.execute(
        update(Notification)
        .where(Notification.recipient_id == user_id, Notification.read.is_(False))
        .values(read=True)
    )
    await session.commit()
    return result.rowcount


async def delete_notification(session: AsyncSession, notification_id: int, user_id: int) -> None:
    notification = await _get_own(session, notification_id, user_id)
    await session.delete(notification)
    await session.commit()


async def delete_read(session: AsyncSession, user_id: int) -> int:
    """Clear every read notification of the caller."""
    result = await session.execute(
        delete(Notification).where(
            Notification.recipient_id == user_id, Notification.read.is_(True)
        )
    )
    await session.commit()
    return result.rowcount
