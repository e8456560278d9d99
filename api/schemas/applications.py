"""Job application API schemas."""

from typing import Optional
from pydantic import BaseModel, Field, HttpUrl

from api.schemas.common import TimestampMixin, UserSummary
from api.schemas.jobs import JobSummary
from database.models.applications import ApplicationStatus, COVER_LETTER_MAX_LENGTH


class ApplicationCreate(BaseModel):
    """Schema for applying to a job."""

    job_id: int = Field(..., ge=1, description="Job to apply to")
    cover_letter: Optional[str] = Field(
        None,
        max_length=COVER_LETTER_MAX_LENGTH,
        description="Cover letter cannot exceed 2000 characters",
    )
    resume: Optional[HttpUrl] = Field(None, description="URL of the resume file")


class ApplicationStatusUpdate(BaseModel):
    """
    Status and/or notes change by the job owner.

    Omitted fields are left as they are.
    """

    status: Optional[ApplicationStatus] = None
    notes: Optional[str] = Field(None, max_length=5000)


class ApplicationResponse(TimestampMixin):
    id: int
    job_id: int
    applicant_id: int
    resume: Optional[str] = None
    cover_letter: Optional[str] = None
    status: ApplicationStatus
    notes: Optional[str] = None
    job: Optional[JobSummary] = None
    applicant: Optional[UserSummary] = None

    class Config:
        from_attributes = True
