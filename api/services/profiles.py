"""
Profile service functions.

Profile completion is recomputed on every save from the weights in
`COMPLETION_WEIGHTS`.
"""

from typing import Optional, Tuple
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from api.schemas.profiles import EducationCreate, ExperienceCreate, ProfileUpsert
from core.middleware.error_handling import NotFoundError
from database.models.profiles import Profile, ProfileEducation, ProfileExperience
from database.models.users import User

logger = logging.getLogger(__name__)

COMPLETION_WEIGHTS = {
    "first_name": 5,
    "last_name": 5,
    "phone": 5,
    "location": 5,
    "headline": 10,
    "summary": 10,
    "experience": 20,
    "education": 15,
    "skills": 15,
    "resume": 10,
}

MIN_SKILLS_FOR_COMPLETION = 3


def calculate_completion(profile: Profile) -> int:
    """
    Percentage of the profile that is filled in.

    Location counts once a city is set, skills once at least three are
    listed and the resume once it has a URL.
    """
    filled = {
        "first_name": bool(profile.first_name),
        "last_name": bool(profile.last_name),
        "phone": bool(profile.phone),
        "location": bool((profile.location or {}).get("city")),
        "headline": bool(profile.headline),
        "summary": bool(profile.summary),
        "experience": len(profile.experience) > 0,
        "education": len(profile.education) > 0,
        "skills": len(profile.skills or []) >= MIN_SKILLS_FOR_COMPLETION,
        "resume": bool((profile.resume or {}).get("url")),
    }
    return sum(weight for field, weight in COMPLETION_WEIGHTS.items() if filled[field])


async def _find(session: AsyncSession, *criteria) -> Optional[Profile]:
    result = await session.execute(
        select(Profile)
        .options(
            selectinload(Profile.user),
            selectinload(Profile.experience),
            selectinload(Profile.education),
        )
        .where(*criteria)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_my_profile(session: AsyncSession, caller: User) -> Profile:
    profile = await _find(session, Profile.user_id == caller.id)
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile


async def get_public_profile(session: AsyncSession, user_id: int) -> Profile:
    """Another user's profile; private profiles look missing."""
    profile = await _find(session, Profile.user_id == user_id, Profile.is_public.is_(True))
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile


async def _save(session: AsyncSession, profile: Profile, caller: User) -> Profile:
    profile.profile_completion = calculate_completion(profile)
    await session.commit()
    return await get_my_profile(session, caller)


async def upsert_profile(
    session: AsyncSession, caller: User, data: ProfileUpsert
) -> Tuple[Profile, bool]:
    """
    Create the caller's profile, or update the fields present in `data`.

    Returns:
        (profile, True when it was created)
    """
    changes = data.model_dump(mode="json", exclude_unset=True)
    profile = await _find(session, Profile.user_id == caller.id)
    created = profile is None

    if created:
        profile = Profile(user_id=caller.id, skills=[], experience=[], education=[])
        profile.user = caller
        session.add(profile)

    for field, value in changes.items():
        if value is None and field in ("skills", "is_public"):
            continue
        setattr(profile, field, value)

    profile = await _save(session, profile, caller)
    logger.info(
        f"Profile {'created' if created else 'updated'} for user {caller.id} "
        f"({profile.profile_completion}% complete)"
    )
    return profile, created


async def delete_profile(session: AsyncSession, caller: User) -> None:
    profile = await get_my_profile(session, caller)
    await session.delete(profile)
    await session.commit()
    logger.info(f"Profile deleted for user {caller.id}")


async def add_experience(session: AsyncSession, caller: User, data: ExperienceCreate) -> Profile:
    profile = await get_my_profile(session, caller)
    profile.experience.append(ProfileExperience(**data.model_dump()))
    return await _save(session, profile, caller)


async def delete_experience(session: AsyncSession, caller: User, experience_id: int) -> Profile:
    profile = await get_my_profile(session, caller)
    entry = next((exp for exp in profile.experience if exp.id == experience_id), None)
    if entry is None:
        raise NotFoundError("Experience not found")
    profile.experience.remove(entry)
    return await _save(session, profile, caller)


async def add_education(session: AsyncSession, caller: User, data: EducationCreate) -> Profile:
    profile = await get_my_profile(session, caller)
    profile.education.append(ProfileEducation(**data.model_dump()))
    return await _save(session, profile, caller)


async def delete_education(session: AsyncSession, caller: User, education_id: int) -> Profile:
    profile = await get_my_profile(session, caller)
    entry = next((edu for edu in profile.education if edu.id == education_id), None)
    if entry is None:
        raise NotFoundError("Education not found")
    profile.education.remove(entry)
    return await _save(session, profile, caller)
