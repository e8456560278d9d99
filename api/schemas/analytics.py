"""Dashboard analytics schemas."""

from datetime import datetime
from pydantic import BaseModel, Field

from api.schemas.applications import ApplicationResponse
from database.models.jobs import JobStatus


class TimelinePoint(BaseModel):
    date: str = Field(description="Day in YYYY-MM-DD")
    count: int


class RecruiterSummary(BaseModel):
    total_jobs: int
    active_jobs: int
    total_applications: int
    recent_applications: int = Field(description="Applications in the last 30 days")


class TopJob(BaseModel):
    id: int
    title: str
    company: str
    application_count: int


class RecruiterAnalytics(BaseModel):
    summary: RecruiterSummary
    applications_by_status: dict[str, int]
    top_jobs: list[TopJob]
    timeline: list[TimelinePoint]


class SeekerSummary(BaseModel):
    total_applications: int
    recent_applications: int
    success_rate: float = Field(description="Percent shortlisted, interviewed or hired")


class SeekerAnalytics(BaseModel):
    summary: SeekerSummary
    applications_by_status: dict[str, int]
    latest_applications: list[ApplicationResponse]
    timeline: list[TimelinePoint]


class AdminSummary(BaseModel):
    total_users: int
    total_jobs: int
    total_applications: int


class RecentActivity(BaseModel):
    new_users: int
    new_jobs: int
    new_applications: int


class AdminAnalytics(BaseModel):
    summary: AdminSummary
    users_by_role: dict[str, int]
    jobs_by_status: dict[str, int]
    recent_activity: RecentActivity
    user_growth: list[TimelinePoint]


class AnalyticsJob(BaseModel):
    id: int
    title: str
    company: str
    status: JobStatus
    created_at: datetime

    class Config:
        from_attributes = True


class JobAnalytics(BaseModel):
    job: AnalyticsJob
    total_applications: int
    applications_by_status: dict[str, int]
    application_timeline: list[TimelinePoint]
