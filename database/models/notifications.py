from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    Boolean,
    BigInteger,
    ForeignKey,
    DateTime,
    Text,
    JSON,
    Enum as SQLEnum,
    Index,
)
from database.engine import Base, BigIntPK
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum
from typing import Any


class NotificationType(str, PyEnum):
    """Closed set of event kinds a notification can describe."""

    APPLICATION_SUBMITTED = "application_submitted"
    APPLICATION_STATUS_CHANGED = "application_status_changed"
    NEW_JOB_MATCH = "new_job_match"
    JOB_DEADLINE_APPROACHING = "job_deadline_approaching"
    NEW_APPLICATION_RECEIVED = "new_application_received"
    JOB_POSTED = "job_posted"
    PROFILE_VIEWED = "profile_viewed"
    MESSAGE_RECEIVED = "message_received"


class Notification(Base):
    """
    In-app notification addressed to one user.
    Created only by the dispatcher; afterwards only the read flag changes.
    """

    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    recipient_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[NotificationType] = mapped_column(
        SQLEnum(NotificationType, native_enum=False, length=50), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True
    )
    action_url: Mapped[str | None] = mapped_column(String(500))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, onupdate=now
    )

    __table_args__ = (
        Index("ix_notifications_recipient_read_created", "recipient_id", "read", "created_at"),
    )
