"""Dashboard analytics endpoints."""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import require_admin, require_recruiter_or_admin, require_seeker
from api.schemas.analytics import AdminAnalytics, JobAnalytics, RecruiterAnalytics, SeekerAnalytics
from api.schemas.common import Envelope
from api.services import analytics as analytics_service
from database.engine import get_db
from database.models.users import User

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/recruiter", response_model=Envelope[RecruiterAnalytics], summary="Recruiter Dashboard")
async def recruiter_analytics(
    current_user: User = Depends(require_recruiter_or_admin),
    db: AsyncSession = Depends(get_db),
):
    data = await analytics_service.recruiter_analytics(db, current_user)
    return Envelope(data=RecruiterAnalytics.model_validate(data))


@router.get("/seeker", response_model=Envelope[SeekerAnalytics], summary="Seeker Dashboard")
async def seeker_analytics(
    current_user: User = Depends(require_seeker),
    db: AsyncSession = Depends(get_db),
):
    data = await analytics_service.seeker_analytics(db, current_user)
    return Envelope(data=SeekerAnalytics.model_validate(data, from_attributes=True))


@router.get("/admin", response_model=Envelope[AdminAnalytics], summary="Platform Dashboard")
async def admin_analytics(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    data = await analytics_service.admin_analytics(db)
    return Envelope(data=AdminAnalytics.model_validate(data))


@router.get(
    "/jobs/{job_id}",
    response_model=Envelope[JobAnalytics],
    summary="Job Analytics",
    description="Application breakdown for one job. Only the job's poster or an admin.",
)
async def job_analytics(
    job_id: int = Path(..., description="Job ID"),
    current_user: User = Depends(require_recruiter_or_admin),
    db: AsyncSession = Depends(get_db),
):
    data = await analytics_service.job_analytics(db, job_id, current_user)
    return Envelope(data=JobAnalytics.model_validate(data, from_attributes=True))
