"""Saved job API schemas."""

from typing import Optional
from pydantic import BaseModel, Field

from api.schemas.common import Pagination, TimestampMixin
from api.schemas.jobs import JobSummary, Salary
from database.models.saved_jobs import SAVED_JOB_NOTES_MAX_LENGTH


class SavedJobCreate(BaseModel):
    job_id: int = Field(..., ge=1)
    notes: Optional[str] = Field(None, max_length=SAVED_JOB_NOTES_MAX_LENGTH)


class SavedJobUpdate(BaseModel):
    notes: Optional[str] = Field(None, max_length=SAVED_JOB_NOTES_MAX_LENGTH)


class SavedJobDetail(JobSummary):
    salary: Salary


class SavedJobResponse(TimestampMixin):
    id: int
    job_id: int
    notes: Optional[str] = None
    job: SavedJobDetail

    class Config:
        from_attributes = True


class SavedJobPage(BaseModel):
    success: bool = True
    count: int
    data: list[SavedJobResponse]
    pagination: Pagination


class SavedCheckResponse(BaseModel):
    success: bool = True
    is_saved: bool
