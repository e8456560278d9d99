"""Saved job (bookmark) endpoints. Seekers only."""

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_pagination_params, require_seeker
from api.schemas.common import Envelope, MessageResponse, Pagination, PaginationParams
from api.schemas.saved_jobs import (
    SavedCheckResponse,
    SavedJobCreate,
    SavedJobPage,
    SavedJobResponse,
    SavedJobUpdate,
)
from api.services import saved_jobs as saved_job_service
from database.engine import get_db
from database.models.users import User

router = APIRouter(prefix="/saved-jobs", tags=["saved-jobs"])


@router.post(
    "",
    response_model=Envelope[SavedJobResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Save Job",
)
async def save_job(
    body: SavedJobCreate,
    current_user: User = Depends(require_seeker),
    db: AsyncSession = Depends(get_db),
):
    saved = await saved_job_service.save_job(db, current_user, body.job_id, body.notes)
    return Envelope(message="Job saved successfully", data=SavedJobResponse.model_validate(saved))


@router.get("", response_model=SavedJobPage, summary="List Saved Jobs")
async def list_saved_jobs(
    pagination: PaginationParams = Depends(get_pagination_params),
    current_user: User = Depends(require_seeker),
    db: AsyncSession = Depends(get_db),
):
    saved, total = await saved_job_service.list_saved_jobs(
        db, current_user, offset=pagination.offset, limit=pagination.limit
    )
    return SavedJobPage(
        count=len(saved),
        data=[SavedJobResponse.model_validate(s) for s in saved],
        pagination=Pagination.create(total, pagination),
    )


@router.get("/check/{job_id}", response_model=SavedCheckResponse, summary="Is Job Saved")
async def check_saved(
    job_id: int = Path(..., description="Job ID"),
    current_user: User = Depends(require_seeker),
    db: AsyncSession = Depends(get_db),
):
    return SavedCheckResponse(is_saved=await saved_job_service.is_saved(db, current_user, job_id))


@router.put("/{saved_job_id}", response_model=Envelope[SavedJobResponse], summary="Update Notes")
async def update_notes(
    body: SavedJobUpdate,
    saved_job_id: int = Path(..., description="Saved job ID"),
    current_user: User = Depends(require_seeker),
    db: AsyncSession = Depends(get_db),
):
    saved = await saved_job_service.update_notes(db, current_user, saved_job_id, body.notes)
    return Envelope(message="Notes updated successfully", data=SavedJobResponse.model_validate(saved))


@router.delete("/{saved_job_id}", response_model=MessageResponse, summary="Remove Saved Job")
async def remove_saved_job(
    saved_job_id: int = Path(..., description="Saved job ID"),
    current_user: User = Depends(require_seeker),
    db: AsyncSession = Depends(get_db),
):
    await saved_job_service.remove_saved_job(db, current_user, saved_job_id)
    return MessageResponse(message="Job removed from saved list")
