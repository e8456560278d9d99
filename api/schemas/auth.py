"""Authentication API schemas."""

from datetime import datetime
from typing import Literal
from pydantic import BaseModel, EmailStr, Field, field_validator

from database.models.users import UserRole

# Admin accounts are provisioned out of band, never self-registered
RegistrableRole = Literal["recruiter", "seeker"]


class RegisterRequest(BaseModel):
    """Account registration request."""

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: RegistrableRole = "seeker"

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        """Password must contain a number."""
        if not any(c.isdigit() for c in v):
            raise ValueError("Password must contain at least one number")
        return v


class LoginRequest(BaseModel):
    """Email/password login request."""

    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class UserResponse(BaseModel):
    id: int
    email: str
    role: UserRole
    created_at: datetime

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    """Token plus the account it was issued for."""

    success: bool = True
    token: str
    user: UserResponse
