"""Saved job service functions. Every operation is scoped to the caller."""

from typing import List, Optional, Tuple
import logging

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.middleware.error_handling import ConflictError, NotFoundError
from database.models.jobs import Job
from database.models.saved_jobs import SavedJob
from database.models.users import User

logger = logging.getLogger(__name__)


async def _load(session: AsyncSession, saved_job_id: int, user_id: int) -> SavedJob:
    result = await session.execute(
        select(SavedJob)
        .options(selectinload(SavedJob.job))
        .where(SavedJob.id == saved_job_id, SavedJob.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    saved = result.scalar_one_or_none()
    if saved is None:
        raise NotFoundError("Saved job not found")
    return saved


async def save_job(
    session: AsyncSession, caller: User, job_id: int, notes: Optional[str] = None
) -> SavedJob:
    """
    Bookmark a job.

    Raises:
        NotFoundError: Job does not exist
        ConflictError: Job already saved by the caller
    """
    if await session.get(Job, job_id) is None:
        raise NotFoundError("Job not found")

    existing = await session.execute(
        select(SavedJob.id).where(SavedJob.user_id == caller.id, SavedJob.job_id == job_id)
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("Job already saved")

    saved = SavedJob(user_id=caller.id, job_id=job_id, notes=notes)
    session.add(saved)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("Job already saved")

    return await _load(session, saved.id, caller.id)


async def list_saved_jobs(
    session: AsyncSession, caller: User, offset: int, limit: int
) -> Tuple[List[SavedJob], int]:
    total = (
        await session.execute(
            select(func.count(SavedJob.id)).where(SavedJob.user_id == caller.id)
        )
    ).scalar_one()

    result = await session.execute(
        select(SavedJob)
        .options(selectinload(SavedJob.job))
        .where(SavedJob.user_id == caller.id)
        .order_by(SavedJob.created_at.desc(), SavedJob.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def update_notes(
    session: AsyncSession, caller: User, saved_job_id: int, notes: Optional[str]
) -> SavedJob:
    saved = await _load(session, saved_job_id, caller.id)
    saved.notes = notes
    await session.commit()
    return await _load(session, saved.id, caller.id)


async def remove_saved_job(session: AsyncSession, caller: User, saved_job_id: int) -> None:
    saved = await _load(session, saved_job_id, caller.id)
    await session.delete(saved)
    await session.commit()


async def is_saved(session: AsyncSession, caller: User, job_id: int) -> bool:
    result = await session.execute(
        select(SavedJob.id).where(SavedJob.user_id == caller.id, SavedJob.job_id == job_id)
    )
    return result.scalar_one_or_none() is not None
