from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, DateTime, Enum as SQLEnum
from database.engine import Base, BigIntPK
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum


# ==================== User Role ===================== #
class UserRole(str, PyEnum):
    ADMIN = "admin"  # platform admin, may manage every job and company
    RECRUITER = "recruiter"  # posts jobs and reviews applications
    SEEKER = "seeker"  # applies to jobs


class User(Base):
    """Account identity. Authorization keys off `role` and direct ownership."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, native_enum=False, length=20),
        nullable=False,
        default=UserRole.SEEKER,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, onupdate=now
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        return f"<User id={self.id} role={self.role.value}>"
