"""
Job Models

Job postings owned by a recruiter. A job keeps an ordered list of the ids of
the applications submitted to it; the list is appended to and pulled from by
the application workflow, never rewritten wholesale.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy import (
    String,
    BigInteger,
    ForeignKey,
    DateTime,
    Integer,
    Float,
    Text,
    JSON,
    Enum as SQLEnum,
    Index,
)
from database.engine import Base, BigIntPK
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.users import User


# ==================== Job Enums ===================== #
class JobType(str, PyEnum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"
    REMOTE = "remote"


class ExperienceLevel(str, PyEnum):
    ENTRY = "entry"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"


class JobStatus(str, PyEnum):
    ACTIVE = "active"  # accepting applications
    CLOSED = "closed"
    DRAFT = "draft"


# ==================== Job Model ===================== #
class Job(Base):
    """A job posting. Only `active` jobs accept applications."""

    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    company: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False)

    # Salary range
    salary_min: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    salary_max: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    salary_currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="USD"
    )

    job_type: Mapped[JobType] = mapped_column(
        SQLEnum(JobType, native_enum=False, length=20),
        nullable=False,
        default=JobType.FULL_TIME,
    )
    experience_level: Mapped[ExperienceLevel] = mapped_column(
        SQLEnum(ExperienceLevel, native_enum=False, length=20),
        nullable=False,
        default=ExperienceLevel.ENTRY,
    )

    skills: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    requirements: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    responsibilities: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )

    openings: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    status: Mapped[JobStatus] = mapped_column(
        SQLEnum(JobStatus, native_enum=False, length=20),
        nullable=False,
        default=JobStatus.ACTIVE,
    )

    posted_by_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Ids of submitted applications, in submission order
    application_ids: Mapped[list[int]] = mapped_column(
        MutableList.as_mutable(JSON), nullable=False, default=list
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, onupdate=now
    )

    # Relationships
    posted_by: Mapped["User"] = relationship("User")

    __table_args__ = (Index("ix_jobs_status_created_at", "status", "created_at"),)

    @property
    def application_count(self) -> int:
        return len(self.application_ids or [])

    @property
    def salary(self) -> dict:
        return {
            "min": self.salary_min,
            "max": self.salary_max,
            "currency": self.salary_currency,
        }

    def __repr__(self) -> str:
        return f"<Job id={self.id} title={self.title!r} status={self.status.value}>"
