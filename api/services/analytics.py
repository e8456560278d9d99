"""
Dashboard analytics.

Counts are computed with SQL aggregates. Daily timelines group on
`func.date(created_at)` and are returned oldest first as
`[{"date": "YYYY-MM-DD", "count": n}]`.
"""

from typing import Any, Dict, List
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.middleware.authorization import ensure_may_manage
from core.middleware.error_handling import NotFoundError
from core.utils.datetime import date_key, days_ago
from database.models.applications import Application, SUCCESSFUL_STATUSES
from database.models.jobs import Job, JobStatus
from database.models.users import User

logger = logging.getLogger(__name__)

RECENT_WINDOW_DAYS = 30
RECRUITER_TIMELINE_DAYS = 7
USER_GROWTH_DAYS = 90
TOP_JOBS_LIMIT = 5
LATEST_APPLICATIONS_LIMIT = 5


# ==================== Aggregate helpers ===================== #
async def _count(session: AsyncSession, column, *conditions) -> int:
    result = await session.execute(select(func.count(column)).where(*conditions))
    return result.scalar_one()


async def _count_by(session: AsyncSession, column, *conditions) -> Dict[str, int]:
    """`{value: count}` for each distinct value of an enum column."""
    result = await session.execute(
        select(column, func.count()).where(*conditions).group_by(column)
    )
    return {getattr(value, "value", value): count for value, count in result.all()}


async def _timeline(session: AsyncSession, created_at, *conditions) -> List[Dict[str, Any]]:
    day = func.date(created_at)
    result = await session.execute(
        select(day, func.count()).where(*conditions).group_by(day).order_by(day)
    )
    return [{"date": date_key(value), "count": count} for value, count in result.all()]


# ==================== Recruiter ===================== #
async def recruiter_analytics(session: AsyncSession, caller: User) -> Dict[str, Any]:
    result = await session.execute(
        select(Job)
        .where(Job.posted_by_id == caller.id)
        .order_by(Job.created_at.desc(), Job.id.desc())
    )
    jobs = list(result.scalars().all())
    job_ids = [job.id for job in jobs]
    of_my_jobs = Application.job_id.in_(job_ids)

    top_jobs = sorted(jobs, key=lambda job: job.application_count, reverse=True)
    return {
        "summary": {
            "total_jobs": len(jobs),
            "active_jobs": sum(1 for job in jobs if job.status == JobStatus.ACTIVE),
            "total_applications": await _count(session, Application.id, of_my_jobs),
            "recent_applications": await _count(
                session,
                Application.id,
                of_my_jobs,
                Application.created_at >= days_ago(RECENT_WINDOW_DAYS),
            ),
        },
        "applications_by_status": await _count_by(session, Application.status, of_my_jobs),
        "top_jobs": [
            {
                "id": job.id,
                "title": job.title,
                "company": job.company,
                "application_count": job.application_count,
            }
            for job in top_jobs[:TOP_JOBS_LIMIT]
        ],
        "timeline": await _timeline(
            session,
            Application.created_at,
            of_my_jobs,
            Application.created_at >= days_ago(RECRUITER_TIMELINE_DAYS),
        ),
    }


# ==================== Seeker ===================== #
async def seeker_analytics(session: AsyncSession, caller: User) -> Dict[str, Any]:
    """
    Success rate is the share of the seeker's applications that reached
    shortlisted, interview or hired, as a percentage with one decimal.
    """
    mine = Application.applicant_id == caller.id
    since = days_ago(RECENT_WINDOW_DAYS)

    total = await _count(session, Application.id, mine)
    successful = await _count(
        session, Application.id, mine, Application.status.in_(SUCCESSFUL_STATUSES)
    )
    success_rate = round(successful / total * 100, 1) if total else 0.0

    latest = await session.execute(
        select(Application)
        .options(selectinload(Application.job), selectinload(Application.applicant))
        .where(mine)
        .order_by(Application.created_at.desc(), Application.id.desc())
        .limit(LATEST_APPLICATIONS_LIMIT)
    )

    return {
        "summary": {
            "total_applications": total,
            "recent_applications": await _count(
                session, Application.id, mine, Application.created_at >= since
            ),
            "success_rate": success_rate,
        },
        "applications_by_status": await _count_by(session, Application.status, mine),
        "latest_applications": list(latest.scalars().all()),
        "timeline": await _timeline(
            session, Application.created_at, mine, Application.created_at >= since
        ),
    }


# ==================== Admin ===================== #
async def admin_analytics(session: AsyncSession) -> Dict[str, Any]:
    since = days_ago(RECENT_WINDOW_DAYS)
    return {
        "summary": {
            "total_users": await _count(session, User.id),
            "total_jobs": await _count(session, Job.id),
            "total_applications": await _count(session, Application.id),
        },
        "users_by_role": await _count_by(session, User.role),
        "jobs_by_status": await _count_by(session, Job.status),
        "recent_activity": {
            "new_users": await _count(session, User.id, User.created_at >= since),
            "new_jobs": await _count(session, Job.id, Job.created_at >= since),
            "new_applications": await _count(
                session, Application.id, Application.created_at >= since
            ),
        },
        "user_growth": await _timeline(
            session, User.created_at, User.created_at >= days_ago(USER_GROWTH_DAYS)
        ),
    }


# ==================== Single job ===================== #
async def job_analytics(session: AsyncSession, job_id: int, caller: User) -> Dict[str, Any]:
    """
    Raises:
        NotFoundError: Job does not exist
        ForbiddenError: Caller is neither the owner nor an admin
    """
    job = await session.get(Job, job_id)
    if job is None:
        raise NotFoundError("Job not found")
    ensure_may_manage(job, caller, "view analytics for this job")

    of_job = Application.job_id == job.id
    logger.debug(f"Job analytics for job {job.id} requested by user {caller.id}")
    return {
        "job": job,
        "total_applications": job.application_count,
        "applications_by_status": await _count_by(session, Application.status, of_job),
        "application_timeline": await _timeline(session, Application.created_at, of_job),
    }
