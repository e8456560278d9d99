"""
Company Models

Company pages managed by recruiters. Admins and followers are plain
user-to-company association tables.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    Column,
    Table,
    String,
    Boolean,
    BigInteger,
    ForeignKey,
    DateTime,
    Integer,
    Float,
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


class CompanySize(str, PyEnum):
    TINY = "1-10"
    SMALL = "11-50"
    MEDIUM = "51-200"
    LARGE = "201-500"
    XLARGE = "501-1000"
    ENTERPRISE = "1000+"


class CompanyBenefit(str, PyEnum):
    HEALTH_INSURANCE = "Health Insurance"
    DENTAL_INSURANCE = "Dental Insurance"
    VISION_INSURANCE = "Vision Insurance"
    RETIREMENT_401K = "401k"
    FLEXIBLE_HOURS = "Flexible Hours"
    REMOTE_WORK = "Remote Work"
    PAID_TIME_OFF = "Paid Time Off"
    PARENTAL_LEAVE = "Parental Leave"
    PROFESSIONAL_DEVELOPMENT = "Professional Development"
    STOCK_OPTIONS = "Stock Options"
    GYM_MEMBERSHIP = "Gym Membership"
    FREE_MEALS = "Free Meals"


company_admins = Table(
    "company_admins",
    Base.metadata,
    Column("company_id", BigInteger, ForeignKey("companies.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", BigInteger, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

company_followers = Table(
    "company_followers",
    Base.metadata,
    Column("company_id", BigInteger, ForeignKey("companies.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", BigInteger, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Company(Base):
    """Public company page. Jobs link to it by company name, not by key."""

    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    logo: Mapped[str | None] = mapped_column(String(1000))
    website: Mapped[str | None] = mapped_column(String(1000))
    industry: Mapped[str | None] = mapped_column(String(100), index=True)
    size: Mapped[str | None] = mapped_column(String(20))

    # {"city", "state", "country"}
    headquarters: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    offices: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    founded: Mapped[int | None] = mapped_column(Integer)
    specialties: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    social_media: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    benefits: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    culture: Mapped[str | None] = mapped_column(Text)

    created_by_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False
    )
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    rating_average: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now, onupdate=now
    )

    # Relationships
    created_by: Mapped["User"] = relationship("User", foreign_keys=[created_by_id])
    admins: Mapped[list["User"]] = relationship("User", secondary=company_admins)
    followers: Mapped[list["User"]] = relationship("User", secondary=company_followers)

    @property
    def admin_ids(self) -> list[int]:
        return [user.id for user in self.admins]

    @property
    def follower_count(self) -> int:
        return len(self.followers)

    @property
    def rating(self) -> dict:
        return {"average": self.rating_average, "count": self.rating_count}
