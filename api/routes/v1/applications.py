"""
Application workflow endpoints.

Seekers submit, list and withdraw their own applications; recruiters and
admins review the applications of jobs they manage and move them through
the hiring stages.
"""

from fastapi import APIRouter, Depends, Path, status

from api.dependencies import get_workflow, require_recruiter_or_admin, require_seeker
from api.schemas.applications import (
    ApplicationCreate,
    ApplicationResponse,
    ApplicationStatusUpdate,
)
from api.schemas.common import Envelope, ListEnvelope, MessageResponse
from api.services.applications import ApplicationWorkflow
from database.models.users import User

router = APIRouter(prefix="/applications", tags=["applications"])


@router.post(
    "",
    response_model=Envelope[ApplicationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Apply to Job",
    description="Submit an application to an active job. One application per job and applicant.",
)
async def submit_application(
    body: ApplicationCreate,
    current_user: User = Depends(require_seeker),
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    application = await workflow.submit(
        job_id=body.job_id,
        applicant=current_user,
        cover_letter=body.cover_letter,
        resume_url=str(body.resume) if body.resume else None,
    )
    return Envelope(
        message="Application submitted successfully",
        data=ApplicationResponse.model_validate(application),
    )


@router.get(
    "/my",
    response_model=ListEnvelope[ApplicationResponse],
    summary="My Applications",
)
async def my_applications(
    current_user: User = Depends(require_seeker),
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    applications = await workflow.list_for_applicant(current_user)
    return ListEnvelope(
        data=[ApplicationResponse.model_validate(app) for app in applications],
        count=len(applications),
    )


@router.get(
    "/job/{job_id}",
    response_model=ListEnvelope[ApplicationResponse],
    summary="Job Applications",
    description="Applications received by a job. Only the job's poster or an admin.",
)
async def job_applications(
    job_id: int = Path(..., description="Job ID"),
    current_user: User = Depends(require_recruiter_or_admin),
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    applications = await workflow.list_for_job(job_id, current_user)
    return ListEnvelope(
        data=[ApplicationResponse.model_validate(app) for app in applications],
        count=len(applications),
    )


@router.put(
    "/{application_id}/status",
    response_model=Envelope[ApplicationResponse],
    summary="Update Application Status",
    description="Change the status and/or recruiter notes. The applicant is notified of status changes.",
)
async def update_application_status(
    body: ApplicationStatusUpdate,
    application_id: int = Path(..., description="Application ID"),
    current_user: User = Depends(require_recruiter_or_admin),
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    application = await workflow.update_status(
        application_id, current_user, status=body.status, notes=body.notes
    )
    return Envelope(
        message="Application status updated successfully",
        data=ApplicationResponse.model_validate(application),
    )


@router.delete(
    "/{application_id}",
    response_model=MessageResponse,
    summary="Withdraw Application",
)
async def withdraw_application(
    application_id: int = Path(..., description="Application ID"),
    current_user: User = Depends(require_seeker),
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    await workflow.withdraw(application_id, current_user)
    return MessageResponse(message="Application withdrawn successfully")
