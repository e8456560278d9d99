"""
Job service functions for API endpoints.

Job writes are gated by `ensure_may_manage` (owner or admin). Deleting a job
removes its applications through the application workflow first.
"""

from typing import Any, Dict, List, Optional, Tuple
import logging

from sqlalchemy import select, func, or_, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from api.schemas.jobs import JobCreate, JobUpdate
from api.services.applications import ApplicationWorkflow
from core.middleware.authorization import ensure_may_manage
from core.middleware.error_handling import NotFoundError
from core.utils.formatting import LIKE_ESCAPE, like_pattern
from database.models.applications import Application
from database.models.jobs import Job, JobStatus, JobType, ExperienceLevel
from database.models.saved_jobs import SavedJob
from database.models.users import User

logger = logging.getLogger(__name__)


def _apply_salary(job: Job, salary: Dict[str, Any]) -> None:
    job.salary_min = salary["min"]
    job.salary_max = salary["max"]
    job.salary_currency = salary["currency"]


async def get_job(session: AsyncSession, job_id: int) -> Job:
    """
    Load a job with its poster.

    Raises:
        NotFoundError: Job does not exist
    """
    result = await session.execute(
        select(Job)
        .options(selectinload(Job.posted_by))
        .where(Job.id == job_id)
        .execution_options(populate_existing=True)
    )
    job = result.scalar_one_or_none()
    if job is None:
        raise NotFoundError("Job not found")
    return job


async def create_job(session: AsyncSession, data: JobCreate, caller: User) -> Job:
    payload = data.model_dump(exclude={"salary"})
    job = Job(**payload, posted_by_id=caller.id, application_ids=[])
    _apply_salary(job, data.salary.model_dump())

    session.add(job)
    await session.commit()
    logger.info(f"Job {job.id} posted by user {caller.id}")
    return await get_job(session, job.id)


async def list_jobs(
    session: AsyncSession,
    offset: int,
    limit: int,
    search: Optional[str] = None,
    location: Optional[str] = None,
    job_type: Optional[JobType] = None,
    experience_level: Optional[ExperienceLevel] = None,
    min_salary: Optional[float] = None,
    status: JobStatus = JobStatus.ACTIVE,
) -> Tuple[List[Job], int]:
    """
    Public job search, newest first.

    Args:
        search: Case-insensitive match on title, description or company
        location: Case-insensitive substring of the location
        min_salary: Lower bound on the salary range minimum

    Returns:
        (page of jobs, total matching)
    """
    conditions = [Job.status == status]
    if search:
        pattern = like_pattern(search)
        conditions.append(
            or_(
                Job.title.ilike(pattern, escape=LIKE_ESCAPE),
                Job.description.ilike(pattern, escape=LIKE_ESCAPE),
                Job.company.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    if location:
        conditions.append(Job.location.ilike(like_pattern(location), escape=LIKE_ESCAPE))
    if job_type:
        conditions.append(Job.job_type == job_type)
    if experience_level:
        conditions.append(Job.experience_level == experience_level)
    if min_salary is not None:
        conditions.append(Job.salary_min >= min_salary)

    total = (
        await session.execute(select(func.count(Job.id)).where(*conditions))
    ).scalar_one()

    result = await session.execute(
        select(Job)
        .options(selectinload(Job.posted_by))
        .where(*conditions)
        .order_by(Job.created_at.desc(), Job.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def update_job(
    session: AsyncSession, job_id: int, data: JobUpdate, caller: User
) -> Job:
    """
    Apply the fields present in `data`, including status transitions.

    Raises:
        NotFoundError: Job does not exist
        ForbiddenError: Caller is neither the owner nor an admin
    """
    job = await get_job(session, job_id)
    ensure_may_manage(job, caller, "update this job")

    changes = data.model_dump(exclude_unset=True)
    salary = changes.pop("salary", None)
    for field, value in changes.items():
        if value is None and field not in ("deadline",):
            continue
        setattr(job, field, value)
    if salary is not None:
        _apply_salary(job, salary)

    await session.commit()
    logger.info(f"Job {job.id} updated by user {caller.id}: {sorted(changes)}")
    return await get_job(session, job.id)


async def delete_job(
    session: AsyncSession, job_id: int, caller: User, workflow: ApplicationWorkflow
) -> None:
    """
    Delete a job and everything that references it.

    Raises:
        NotFoundError: Job does not exist
        ForbiddenError: Caller is neither the owner nor an admin
    """
    job = await get_job(session, job_id)
    ensure_may_manage(job, caller, "delete this job")

    await workflow.cascade_delete_for_job(job.id)
    await session.execute(delete(SavedJob).where(SavedJob.job_id == job.id))
    await session.delete(job)
    await session.commit()
    logger.info(f"Job {job_id} deleted by user {caller.id}")


async def list_my_jobs(
    session: AsyncSession, caller: User
) -> List[Tuple[Job, List[Application]]]:
    """
    Jobs posted by the caller, newest first, each with its applications in
    submission order.
    """
    result = await session.execute(
        select(Job)
        .options(selectinload(Job.posted_by))
        .where(Job.posted_by_id == caller.id)
        .order_by(Job.created_at.desc(), Job.id.desc())
    )
    jobs = list(result.scalars().all())

    application_ids = [app_id for job in jobs for app_id in job.application_ids]
    by_id: Dict[int, Application] = {}
    if application_ids:
        apps = await session.execute(
            select(Application)
            .options(selectinload(Application.applicant))
            .where(Application.id.in_(application_ids))
        )
        by_id = {app.id: app for app in apps.scalars().all()}

    return [
        (job, [by_id[app_id] for app_id in job.application_ids if app_id in by_id])
        for job in jobs
    ]
