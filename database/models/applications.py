"""
Application Models

A seeker's application to a job. At most one application exists per
(job, applicant) pair; the status field follows the hiring workflow
applied -> reviewing -> shortlisted -> interview -> rejected | hired.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    BigInteger,
    ForeignKey,
    DateTime,
    Text,
    Enum as SQLEnum,
    Index,
    UniqueConstraint,
)
from database.engine import Base, BigIntPK
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.jobs import Job
    from database.models.users import User


COVER_LETTER_MAX_LENGTH = 2000


# ==================== Application Enums ===================== #
class ApplicationStatus(str, PyEnum):
    APPLIED = "applied"  # initial state, set on submission
    REVIEWING = "reviewing"
    SHORTLISTED = "shortlisted"
    INTERVIEW = "interview"
    REJECTED = "rejected"  # terminal
    HIRED = "hired"  # terminal


TERMINAL_STATUSES = frozenset({ApplicationStatus.REJECTED, ApplicationStatus.HIRED})

# Statuses counted as a positive outcome in seeker analytics
SUCCESSFUL_STATUSES = (
    ApplicationStatus.SHORTLISTED,
    ApplicationStatus.INTERVIEW,
    ApplicationStatus.HIRED,
)


# ==================== Application Model ===================== #
class Application(Base):
    """
    Job application - references exactly one job and one applicant.
    The application does not own either; it is removed when the applicant
    withdraws or when its job is deleted.
    """

    __tablename__ = "applications"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    job_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    applicant_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    resume: Mapped[str | None] = mapped_column(String(1000))  # URL to resume file
    cover_letter: Mapped[str | None] = mapped_column(Text)
    status: Mapped[ApplicationStatus] = mapped_column(
        SQLEnum(ApplicationStatus, native_enum=False, length=20),
        nullable=False,
        default=ApplicationStatus.APPLIED,
    )
    notes: Mapped[str | None] = mapped_column(Text)  # recruiter notes

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, onupdate=now
    )

    # Relationships
    job: Mapped["Job"] = relationship("Job")
    applicant: Mapped["User"] = relationship("User")

    __table_args__ = (
        UniqueConstraint("job_id", "applicant_id", name="uq_applications_job_applicant"),
        Index("ix_applications_job_status", "job_id", "status"),
        Index("ix_applications_applicant_status", "applicant_id", "status"),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def __repr__(self) -> str:
        return (
            f"<Application id={self.id} job_id={self.job_id} "
            f"applicant_id={self.applicant_id} status={self.status.value}>"
        )
