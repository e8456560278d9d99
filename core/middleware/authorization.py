"""
Authorization checks.

Ownership rules are expressed once here and applied by every service:

1. Job management (edit/delete a job, list its applications, move an
   application through the workflow, job analytics) is allowed to the
   job's poster and to platform admins.
2. Company management is allowed to the company's admins and to platform
   admins.
3. Role gates on routes are declared with `require_roles` in
   `api.dependencies`, which delegates to `check_role`.
"""

import logging
from typing import Iterable

from core.middleware.error_handling import ForbiddenError
from database.models.users import User, UserRole
from database.models.jobs import Job

logger = logging.getLogger(__name__)


def caller_may_manage(job: Job, caller: User) -> bool:
    """Admin role, or the caller posted the job."""
    return caller.role == UserRole.ADMIN or job.posted_by_id == caller.id


def ensure_may_manage(job: Job, caller: User, action: str) -> None:
    """
    Raise unless `caller_may_manage(job, caller)`.

    Args:
        job: Job whose ownership gates the action
        caller: Authenticated user
        action: Phrase completing "Not authorized to ..."

    Raises:
        ForbiddenError: Caller is neither the job owner nor an admin
    """
    if not caller_may_manage(job, caller):
        logger.warning(
            f"User {caller.id} denied '{action}' on job {job.id} "
            f"owned by {job.posted_by_id}"
        )
        raise ForbiddenError(f"Not authorized to {action}")


def caller_may_manage_company(admin_ids: Iterable[int], caller: User) -> bool:
    """Admin role, or the caller is one of the company's admins."""
    return caller.role == UserRole.ADMIN or caller.id in set(admin_ids)


def check_role(caller: User, allowed_roles: Iterable[UserRole]) -> None:
    """
    Raise unless the caller's role is one of `allowed_roles`.

    Raises:
        ForbiddenError: Role not listed
    """
    allowed = set(allowed_roles)
    if caller.role not in allowed:
        logger.warning(
            f"User {caller.id} with role {caller.role.value} attempted action "
            f"requiring roles: {sorted(role.value for role in allowed)}"
        )
        raise ForbiddenError(
            f"User role '{caller.role.value}' is not authorized to access this route"
        )
