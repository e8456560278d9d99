"""Profile API schemas."""

import re
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from api.schemas.common import TimestampMixin, UserSummary
from core.utils.datetime import ensure_aware
from database.models.jobs import JobType
from database.models.profiles import SkillLevel

PHONE_PATTERN = re.compile(
    r"^[+]?[(]?[0-9]{1,4}[)]?[-\s.]?[(]?[0-9]{1,4}[)]?[-\s.]?[0-9]{1,9}$"
)


class ProfileLocation(BaseModel):
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None


class Skill(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    level: SkillLevel = SkillLevel.INTERMEDIATE


class Resume(BaseModel):
    url: Optional[str] = None
    filename: Optional[str] = None
    uploaded_at: Optional[datetime] = None


class JobPreferences(BaseModel):
    job_types: list[JobType] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    min_salary: Optional[float] = Field(None, ge=0)
    willing_to_relocate: bool = False


class ProfileUpsert(BaseModel):
    """
    Create-or-update payload.

    On update only the fields present in the request are changed.
    """

    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=30)
    location: Optional[ProfileLocation] = None
    headline: Optional[str] = Field(
        None, max_length=120, description="Headline cannot exceed 120 characters"
    )
    summary: Optional[str] = Field(
        None, max_length=2000, description="Summary cannot exceed 2000 characters"
    )
    skills: Optional[list[Skill]] = None
    portfolio: Optional[str] = Field(None, max_length=1000)
    linkedin: Optional[str] = Field(None, max_length=1000)
    github: Optional[str] = Field(None, max_length=1000)
    website: Optional[str] = Field(None, max_length=1000)
    resume: Optional[Resume] = None
    job_preferences: Optional[JobPreferences] = None
    is_public: Optional[bool] = None

    @field_validator("first_name", "last_name", "phone", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        if v and not PHONE_PATTERN.match(v):
            raise ValueError("Invalid phone number format")
        return v


class ExperienceCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    company: str = Field(..., min_length=1, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    start_date: datetime
    end_date: Optional[datetime] = None
    current: bool = False
    description: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self) -> "ExperienceCreate":
        if self.end_date and ensure_aware(self.end_date) < ensure_aware(self.start_date):
            raise ValueError("End date must be after start date")
        return self


class EducationCreate(BaseModel):
    school: str = Field(..., min_length=1, max_length=255)
    degree: str = Field(..., min_length=1, max_length=255)
    field: Optional[str] = Field(None, max_length=255)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    grade: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None


class ExperienceResponse(ExperienceCreate):
    id: int

    class Config:
        from_attributes = True


class EducationResponse(EducationCreate):
    id: int

    class Config:
        from_attributes = True


class ProfileResponse(TimestampMixin):
    id: int
    user: UserSummary
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: str
    phone: Optional[str] = None
    location: Optional[ProfileLocation] = None
    headline: Optional[str] = None
    summary: Optional[str] = None
    experience: list[ExperienceResponse]
    education: list[EducationResponse]
    skills: list[Skill]
    portfolio: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    website: Optional[str] = None
    resume: Optional[Resume] = None
    job_preferences: Optional[JobPreferences] = None
    profile_completion: int
    is_public: bool

    class Config:
        from_attributes = True
