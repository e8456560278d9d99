"""
Job posting endpoints.

Listing and detail are public; writes need a recruiter or admin, and only
the job's poster or an admin may change or delete a job.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_pagination_params, get_workflow, require_recruiter_or_admin
from api.schemas.common import Envelope, ListEnvelope, MessageResponse, PageEnvelope, Pagination, PaginationParams
from api.schemas.jobs import JobApplicationBrief, JobCreate, JobResponse, JobUpdate, MyJobResponse
from api.services import jobs as job_service
from api.services.applications import ApplicationWorkflow
from database.engine import get_db
from database.models.jobs import ExperienceLevel, JobStatus, JobType
from database.models.users import User

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post(
    "",
    response_model=Envelope[JobResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Post Job",
)
async def create_job(
    body: JobCreate,
    current_user: User = Depends(require_recruiter_or_admin),
    db: AsyncSession = Depends(get_db),
):
    job = await job_service.create_job(db, body, current_user)
    return Envelope(message="Job posted successfully", data=JobResponse.model_validate(job))


@router.get(
    "",
    response_model=PageEnvelope[JobResponse],
    summary="List Jobs",
    description="Search job postings, newest first. Only active jobs unless `status` is given.",
)
async def list_jobs(
    search: Optional[str] = Query(None, description="Match title, description or company"),
    location: Optional[str] = Query(None, description="Substring of the location"),
    job_type: Optional[JobType] = Query(None),
    experience_level: Optional[ExperienceLevel] = Query(None),
    min_salary: Optional[float] = Query(None, ge=0, description="Minimum salary floor"),
    job_status: JobStatus = Query(JobStatus.ACTIVE, alias="status"),
    pagination: PaginationParams = Depends(get_pagination_params),
    db: AsyncSession = Depends(get_db),
):
    jobs, total = await job_service.list_jobs(
        db,
        offset=pagination.offset,
        limit=pagination.limit,
        search=search,
        location=location,
        job_type=job_type,
        experience_level=experience_level,
        min_salary=min_salary,
        status=job_status,
    )
    return PageEnvelope(
        data=[JobResponse.model_validate(job) for job in jobs],
        pagination=Pagination.create(total, pagination),
    )


@router.get(
    "/my/jobs",
    response_model=ListEnvelope[MyJobResponse],
    summary="My Jobs",
    description="Jobs posted by the caller with the applications each has received.",
)
async def my_jobs(
    current_user: User = Depends(require_recruiter_or_admin),
    db: AsyncSession = Depends(get_db),
):
    rows = await job_service.list_my_jobs(db, current_user)
    data = [
        MyJobResponse(
            **JobResponse.model_validate(job).model_dump(),
            applications=[JobApplicationBrief.model_validate(app) for app in applications],
        )
        for job, applications in rows
    ]
    return ListEnvelope(data=data, count=len(data))


@router.get("/{job_id}", response_model=Envelope[JobResponse], summary="Get Job")
async def get_job(
    job_id: int = Path(..., description="Job ID"),
    db: AsyncSession = Depends(get_db),
):
    job = await job_service.get_job(db, job_id)
    return Envelope(data=JobResponse.model_validate(job))


@router.put("/{job_id}", response_model=Envelope[JobResponse], summary="Update Job")
async def update_job(
    body: JobUpdate,
    job_id: int = Path(..., description="Job ID"),
    current_user: User = Depends(require_recruiter_or_admin),
    db: AsyncSession = Depends(get_db),
):
    job = await job_service.update_job(db, job_id, body, current_user)
    return Envelope(message="Job updated successfully", data=JobResponse.model_validate(job))


@router.delete(
    "/{job_id}",
    response_model=MessageResponse,
    summary="Delete Job",
    description="Delete a job together with its applications and saved entries.",
)
async def delete_job(
    job_id: int = Path(..., description="Job ID"),
    current_user: User = Depends(require_recruiter_or_admin),
    db: AsyncSession = Depends(get_db),
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    await job_service.delete_job(db, job_id, current_user, workflow)
    return MessageResponse(message="Job deleted successfully")
