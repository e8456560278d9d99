"""Company page API schemas."""

from typing import Optional
from pydantic import BaseModel, Field, HttpUrl, field_validator

from api.schemas.common import TimestampMixin, UserSummary
from api.schemas.jobs import JobSummary
from database.models.companies import CompanyBenefit, CompanySize


class Place(BaseModel):
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


class SocialMedia(BaseModel):
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    instagram: Optional[str] = None


class Rating(BaseModel):
    average: float = Field(default=0, ge=0, le=5)
    count: int = Field(default=0, ge=0)


class CompanyBase(BaseModel):
    description: Optional[str] = Field(
        None, max_length=3000, description="Description cannot exceed 3000 characters"
    )
    logo: Optional[str] = Field(None, max_length=1000)
    website: Optional[HttpUrl] = None
    industry: Optional[str] = Field(None, max_length=100)
    size: Optional[CompanySize] = None
    headquarters: Optional[Place] = None
    offices: list[Place] = Field(default_factory=list)
    founded: Optional[int] = Field(None, ge=1600, le=2100)
    specialties: list[str] = Field(default_factory=list)
    social_media: SocialMedia = Field(default_factory=SocialMedia)
    benefits: list[CompanyBenefit] = Field(default_factory=list)
    culture: Optional[str] = Field(None, max_length=2000)


class CompanyCreate(CompanyBase):
    """Schema for creating a company page; the creator becomes its first admin."""

    name: str = Field(..., min_length=1, max_length=255)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class CompanyUpdate(BaseModel):
    """Partial update; only fields present in the request are applied."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=3000)
    logo: Optional[str] = Field(None, max_length=1000)
    website: Optional[HttpUrl] = None
    industry: Optional[str] = Field(None, max_length=100)
    size: Optional[CompanySize] = None
    headquarters: Optional[Place] = None
    offices: Optional[list[Place]] = None
    founded: Optional[int] = Field(None, ge=1600, le=2100)
    specialties: Optional[list[str]] = None
    social_media: Optional[SocialMedia] = None
    benefits: Optional[list[CompanyBenefit]] = None
    culture: Optional[str] = Field(None, max_length=2000)


class CompanyResponse(TimestampMixin):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    logo: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[str] = None
    headquarters: Optional[Place] = None
    offices: list[Place]
    founded: Optional[int] = None
    specialties: list[str]
    social_media: SocialMedia
    benefits: list[str]
    culture: Optional[str] = None
    created_by: UserSummary
    admin_ids: list[int]
    verified: bool
    follower_count: int
    rating: Rating

    class Config:
        from_attributes = True


class CompanyDetail(CompanyResponse):
    active_jobs: list[JobSummary] = Field(default_factory=list)


class FollowResponse(BaseModel):
    success: bool = True
    message: str
    is_following: bool
