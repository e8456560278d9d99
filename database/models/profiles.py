"""
Profile Models

One profile per user. Experience and education entries are child rows,
newest first; skills, location, links and preferences are stored inline.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    BigInteger,
    ForeignKey,
    DateTime,
    Integer,
    Text,
    JSON,
)
from database.engine import Base, BigIntPK
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.users import User


class SkillLevel(str, PyEnum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class Profile(Base):
    """Seeker or recruiter profile with a derived completion percentage."""

    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    # Personal information
    first_name: Mapped[str | None] = mapped_column(String(50))
    last_name: Mapped[str | None] = mapped_column(String(50))
    phone: Mapped[str | None] = mapped_column(String(30))
    # {"city", "state", "country", "zip_code"}
    location: Mapped[dict[str, Any] | None] = mapped_column(JSON)

    # Professional information
    headline: Mapped[str | None] = mapped_column(String(120))
    summary: Mapped[str | None] = mapped_column(Text)
    # [{"name", "level"}]
    skills: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    # Links
    portfolio: Mapped[str | None] = mapped_column(String(1000))
    linkedin: Mapped[str | None] = mapped_column(String(1000))
    github: Mapped[str | None] = mapped_column(String(1000))
    website: Mapped[str | None] = mapped_column(String(1000))

    # {"url", "filename", "uploaded_at"}
    resume: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    # {"job_types", "locations", "min_salary", "willing_to_relocate"}
    job_preferences: Mapped[dict[str, Any] | None] = mapped_column(JSON)

    profile_completion: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, onupdate=now
    )

    # Relationships
    user: Mapped["User"] = relationship("User")
    experience: Mapped[list["ProfileExperience"]] = relationship(
        "ProfileExperience",
        cascade="all, delete-orphan",
        order_by="ProfileExperience.id.desc()",
    )
    education: Mapped[list["ProfileEducation"]] = relationship(
        "ProfileEducation",
        cascade="all, delete-orphan",
        order_by="ProfileEducation.id.desc()",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class ProfileExperience(Base):
    __tablename__ = "profile_experience"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    profile_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    company: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str | None] = mapped_column(String(255))
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    description: Mapped[str | None] = mapped_column(Text)


class ProfileEducation(Base):
    __tablename__ = "profile_education"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    profile_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    school: Mapped[str] = mapped_column(String(255), nullable=False)
    degree: Mapped[str] = mapped_column(String(255), nullable=False)
    field: Mapped[str | None] = mapped_column(String(255))
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    grade: Mapped[str | None] = mapped_column(String(50))
    description: Mapped[str | None] = mapped_column(Text)
