"""
Company page service functions.

A company's admins (its creator first) and platform admins may edit it.
Jobs are linked to a company by name, so the page's active jobs are looked
up by `Job.company == Company.name`.
"""

from typing import List, Optional, Tuple
import logging

from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from api.schemas.companies import CompanyCreate, CompanyUpdate
from core.middleware.authorization import caller_may_manage_company
from core.middleware.error_handling import ConflictError, ForbiddenError, NotFoundError
from core.utils.formatting import LIKE_ESCAPE, like_pattern, slugify
from database.models.companies import Company, company_followers
from database.models.jobs import Job, JobStatus
from database.models.users import User

logger = logging.getLogger(__name__)

ACTIVE_JOBS_LIMIT = 10

# Columns that cannot be cleared with an explicit null
NON_NULLABLE_FIELDS = frozenset({"name", "offices", "specialties", "social_media", "benefits"})

_LOAD_OPTIONS = (
    selectinload(Company.created_by),
    selectinload(Company.admins),
    selectinload(Company.followers),
)


async def _get(session: AsyncSession, **criteria) -> Optional[Company]:
    result = await session.execute(
        select(Company)
        .options(*_LOAD_OPTIONS)
        .filter_by(**criteria)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_company_by_id(session: AsyncSession, company_id: int) -> Company:
    company = await _get(session, id=company_id)
    if company is None:
        raise NotFoundError("Company not found")
    return company


async def _commit_unique(session: AsyncSession) -> None:
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("A company with this name already exists")


async def create_company(session: AsyncSession, data: CompanyCreate, caller: User) -> Company:
    """
    Create a company page with the caller as creator and first admin.

    Raises:
        ConflictError: Name (or its slug) is already taken
    """
    values = data.model_dump(mode="json")
    company = Company(**values, slug=slugify(data.name), created_by_id=caller.id)
    company.admins = [caller]
    company.followers = []

    session.add(company)
    await _commit_unique(session)
    logger.info(f"Company {company.id} ({company.slug}) created by user {caller.id}")
    return await get_company_by_id(session, company.id)


async def list_companies(
    session: AsyncSession,
    offset: int,
    limit: int,
    search: Optional[str] = None,
    industry: Optional[str] = None,
    size: Optional[str] = None,
    verified: Optional[bool] = None,
) -> Tuple[List[Company], int]:
    conditions = []
    if search:
        pattern = like_pattern(search)
        conditions.append(
            or_(
                Company.name.ilike(pattern, escape=LIKE_ESCAPE),
                Company.description.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    if industry:
        conditions.append(Company.industry == industry)
    if size:
        conditions.append(Company.size == size)
    if verified is not None:
        conditions.append(Company.verified.is_(verified))

    total = (
        await session.execute(select(func.count(Company.id)).where(*conditions))
    ).scalar_one()

    result = await session.execute(
        select(Company)
        .options(*_LOAD_OPTIONS)
        .where(*conditions)
        .order_by(Company.created_at.desc(), Company.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def get_company(session: AsyncSession, identifier: str) -> Tuple[Company, List[Job]]:
    """
    Look a company up by numeric id, falling back to its slug.

    Returns:
        (company, up to ten of its active jobs)
    """
    company = None
    if identifier.isdigit():
        company = await _get(session, id=int(identifier))
    if company is None:
        company = await _get(session, slug=identifier.lower())
    if company is None:
        raise NotFoundError("Company not found")

    jobs = await session.execute(
        select(Job)
        .where(Job.company == company.name, Job.status == JobStatus.ACTIVE)
        .order_by(Job.created_at.desc())
        .limit(ACTIVE_JOBS_LIMIT)
    )
    return company, list(jobs.scalars().all())


async def update_company(
    session: AsyncSession, company_id: int, data: CompanyUpdate, caller: User
) -> Company:
    """
    Raises:
        NotFoundError: Company does not exist
        ForbiddenError: Caller is not a company admin or platform admin
        ConflictError: New name is already taken
    """
    company = await get_company_by_id(session, company_id)
    if not caller_may_manage_company(company.admin_ids, caller):
        raise ForbiddenError("Not authorized to update this company")

    changes = data.model_dump(mode="json", exclude_unset=True)
    for field, value in changes.items():
        if value is None and field in NON_NULLABLE_FIELDS:
            continue
        setattr(company, field, value)
    if changes.get("name"):
        company.slug = slugify(changes["name"])

    await _commit_unique(session)
    return await get_company_by_id(session, company.id)


async def delete_company(session: AsyncSession, company_id: int) -> None:
    company = await get_company_by_id(session, company_id)
    await session.delete(company)
    await session.commit()
    logger.info(f"Company {company_id} deleted")


async def toggle_follow(session: AsyncSession, company_id: int, caller: User) -> bool:
    """Follow the company, or unfollow it when already following. Returns the new state."""
    company = await get_company_by_id(session, company_id)
    if any(user.id == caller.id for user in company.followers):
        company.followers = [user for user in company.followers if user.id != caller.id]
        following = False
    else:
        company.followers.append(caller)
        following = True
    await session.commit()
    return following


async def list_following(session: AsyncSession, caller: User) -> List[Company]:
    result = await session.execute(
        select(Company)
        .options(*_LOAD_OPTIONS)
        .join(company_followers, company_followers.c.company_id == Company.id)
        .where(company_followers.c.user_id == caller.id)
        .order_by(Company.name)
    )
    return list(result.scalars().all())
