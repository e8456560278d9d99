"""
User service functions for API endpoints.

Registration and credential checks. Token issuing lives in `core.security`.
"""

from typing import Optional
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.auth import RegisterRequest
from core.middleware.error_handling import AuthenticationError, ConflictError
from core.security import hash_password, verify_password
from database.models.users import User, UserRole

logger = logging.getLogger(__name__)


async def get_user(session: AsyncSession, user_id: int) -> Optional[User]:
    return await session.get(User, user_id)


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def register_user(session: AsyncSession, data: RegisterRequest) -> User:
    """
    Create an account.

    Raises:
        ConflictError: Email is already registered
    """
    if await get_user_by_email(session, data.email) is not None:
        raise ConflictError("User already exists")

    user = User(
        email=data.email,
        password_hash=hash_password(data.password),
        role=UserRole(data.role),
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("User already exists")

    logger.info(f"Registered user {user.id} as {user.role.value}")
    return user


async def authenticate_user(session: AsyncSession, email: str, password: str) -> User:
    """
    Raises:
        AuthenticationError: Unknown email or wrong password
    """
    user = await get_user_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt")
        raise AuthenticationError("Invalid credentials")
    return user
