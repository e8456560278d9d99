"""FastAPI dependencies for dependency injection."""

import logging
from typing import Optional

import jwt
from fastapi import Depends, Query, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.common import PaginationParams
from api.services.applications import ApplicationWorkflow
from api.services.notifications import NotificationDispatcher
from core.config import settings
from core.middleware.authorization import check_role
from core.middleware.error_handling import AuthenticationError
from core.security import verify_jwt_token
from database.engine import AsyncSessionLocal, get_db
from database.models.users import User, UserRole

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


# ==================== Authentication ===================== #
async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the caller from the `Authorization: Bearer` token.

    Raises:
        AuthenticationError: Token missing, invalid or expired, or the user
            no longer exists
    """
    if credentials is None:
        raise AuthenticationError("Not authorized, no token")

    try:
        payload = verify_jwt_token(credentials.credentials)
        user_id = int(payload["sub"])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        raise AuthenticationError()
    except (jwt.InvalidTokenError, ValueError):
        logger.warning("Rejected invalid token")
        raise AuthenticationError()

    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError()

    # Picked up by the request logging middleware
    request.state.user_id = user.id
    return user


def require_roles(*roles: UserRole):
    """
    Dependency factory gating a route on the caller's role.

    Example:
        @router.post("", dependencies=[Depends(require_roles(UserRole.SEEKER))])
    """

    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        check_role(current_user, roles)
        return current_user

    return dependency


require_seeker = require_roles(UserRole.SEEKER)
require_recruiter_or_admin = require_roles(UserRole.RECRUITER, UserRole.ADMIN)
require_admin = require_roles(UserRole.ADMIN)


# ==================== Services ===================== #
def get_notification_dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher(AsyncSessionLocal)


def get_workflow(
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> ApplicationWorkflow:
    return ApplicationWorkflow(db, dispatcher)


# ==================== Pagination ===================== #
def get_pagination_params(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    limit: Optional[int] = Query(None, ge=1, description="Items per page"),
) -> PaginationParams:
    """Page and limit from the query string; limit is capped at MAX_PAGE_SIZE."""
    if limit is None:
        limit = settings.default_page_size
    return PaginationParams(page=page, limit=min(limit, settings.max_page_size))
