from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    BigInteger,
    ForeignKey,
    DateTime,
    UniqueConstraint,
)
from database.engine import Base, BigIntPK
from core.utils.datetime import now
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.jobs import Job


SAVED_JOB_NOTES_MAX_LENGTH = 500


class SavedJob(Base):
    """A job bookmarked by a user, with optional private notes."""

    __tablename__ = "saved_jobs"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    job_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(String(SAVED_JOB_NOTES_MAX_LENGTH))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, onupdate=now
    )

    job: Mapped["Job"] = relationship("Job")

    __table_args__ = (
        UniqueConstraint("user_id", "job_id", name="uq_saved_jobs_user_job"),
    )
