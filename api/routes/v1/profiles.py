"""
Candidate profile endpoints.

Each user has at most one profile. Completion is recalculated on every save.
"""

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_current_user
from api.schemas.common import Envelope, MessageResponse
from api.schemas.profiles import EducationCreate, ExperienceCreate, ProfileResponse, ProfileUpsert
from api.services import profiles as profile_service
from database.engine import get_db
from database.models.users import User

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("/me", response_model=Envelope[ProfileResponse], summary="My Profile")
async def my_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.get_my_profile(db, current_user)
    return Envelope(data=ProfileResponse.model_validate(profile))


@router.get(
    "/user/{user_id}",
    response_model=Envelope[ProfileResponse],
    summary="Public Profile",
    description="Another user's profile. Private profiles are reported as not found.",
)
async def public_profile(
    user_id: int = Path(..., description="User ID"),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.get_public_profile(db, user_id)
    return Envelope(data=ProfileResponse.model_validate(profile))


@router.post("", response_model=Envelope[ProfileResponse], summary="Create or Update Profile")
@router.put("", response_model=Envelope[ProfileResponse], summary="Create or Update Profile")
async def upsert_profile(
    body: ProfileUpsert,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile, created = await profile_service.upsert_profile(db, current_user, body)
    if created:
        response.status_code = status.HTTP_201_CREATED
    message = "Profile created successfully" if created else "Profile updated successfully"
    return Envelope(message=message, data=ProfileResponse.model_validate(profile))


@router.delete("", response_model=MessageResponse, summary="Delete Profile")
async def delete_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await profile_service.delete_profile(db, current_user)
    return MessageResponse(message="Profile deleted successfully")


@router.put("/experience", response_model=Envelope[ProfileResponse], summary="Add Experience")
async def add_experience(
    body: ExperienceCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.add_experience(db, current_user, body)
    return Envelope(message="Experience added successfully", data=ProfileResponse.model_validate(profile))


@router.delete(
    "/experience/{experience_id}",
    response_model=Envelope[ProfileResponse],
    summary="Delete Experience",
)
async def delete_experience(
    experience_id: int = Path(..., description="Experience entry ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.delete_experience(db, current_user, experience_id)
    return Envelope(message="Experience deleted successfully", data=ProfileResponse.model_validate(profile))


@router.put("/education", response_model=Envelope[ProfileResponse], summary="Add Education")
async def add_education(
    body: EducationCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.add_education(db, current_user, body)
    return Envelope(message="Education added successfully", data=ProfileResponse.model_validate(profile))


@router.delete(
    "/education/{education_id}",
    response_model=Envelope[ProfileResponse],
    summary="Delete Education",
)
async def delete_education(
    education_id: int = Path(..., description="Education entry ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.delete_education(db, current_user, education_id)
    return Envelope(message="Education deleted successfully", data=ProfileResponse.model_validate(profile))
