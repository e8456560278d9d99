"""Job posting API schemas."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from api.schemas.common import TimestampMixin, UserSummary
from database.models.applications import ApplicationStatus
from database.models.jobs import ExperienceLevel, JobStatus, JobType


class Salary(BaseModel):
    min: float = Field(default=0, ge=0)
    max: float = Field(default=0, ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)

    @model_validator(mode="after")
    def check_range(self) -> "Salary":
        if self.max and self.max < self.min:
            raise ValueError("Maximum salary cannot be lower than minimum salary")
        return self


class JobCreate(BaseModel):
    """Schema for creating a job posting."""

    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=5000)
    company: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    salary: Salary = Field(default_factory=Salary)
    job_type: JobType = JobType.FULL_TIME
    experience_level: ExperienceLevel = ExperienceLevel.ENTRY
    skills: list[str] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)
    responsibilities: list[str] = Field(default_factory=list)
    openings: int = Field(default=1, ge=1, description="Must have at least 1 opening")
    deadline: Optional[datetime] = None
    status: JobStatus = JobStatus.ACTIVE

    @field_validator("title", "description", "company", "location", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        """Strip whitespace so blank strings fail the length check."""
        if isinstance(v, str):
            return v.strip()
        return v


class JobUpdate(BaseModel):
    """Partial update; only fields present in the request are applied."""

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    company: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    salary: Optional[Salary] = None
    job_type: Optional[JobType] = None
    experience_level: Optional[ExperienceLevel] = None
    skills: Optional[list[str]] = None
    requirements: Optional[list[str]] = None
    responsibilities: Optional[list[str]] = None
    openings: Optional[int] = Field(None, ge=1)
    deadline: Optional[datetime] = None
    status: Optional[JobStatus] = None


class JobResponse(TimestampMixin):
    id: int
    title: str
    description: str
    company: str
    location: str
    salary: Salary
    job_type: JobType
    experience_level: ExperienceLevel
    skills: list[str]
    requirements: list[str]
    responsibilities: list[str]
    openings: int
    deadline: Optional[datetime] = None
    status: JobStatus
    posted_by: UserSummary
    application_count: int

    class Config:
        from_attributes = True


class JobSummary(BaseModel):
    """Job fields shown next to a seeker's application."""

    id: int
    title: str
    company: str
    location: str
    job_type: JobType
    status: JobStatus

    class Config:
        from_attributes = True


class JobApplicationBrief(BaseModel):
    """Application as listed under its job on the recruiter dashboard."""

    id: int
    status: ApplicationStatus
    applicant: UserSummary
    created_at: datetime

    class Config:
        from_attributes = True


class MyJobResponse(JobResponse):
    applications: list[JobApplicationBrief] = Field(default_factory=list)
