"""
Company page endpoints.

Browsing is public. Recruiters and admins create pages; a page's admins or a
platform admin edit it; only platform admins delete one.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import (
    get_current_user,
    get_pagination_params,
    require_admin,
    require_recruiter_or_admin,
)
from api.schemas.common import (
    Envelope,
    ListEnvelope,
    MessageResponse,
    PageEnvelope,
    Pagination,
    PaginationParams,
)
from api.schemas.companies import (
    CompanyCreate,
    CompanyDetail,
    CompanyResponse,
    CompanyUpdate,
    FollowResponse,
)
from api.schemas.jobs import JobSummary
from api.services import companies as company_service
from database.engine import get_db
from database.models.companies import CompanySize
from database.models.users import User

router = APIRouter(prefix="/companies", tags=["companies"])


@router.post(
    "",
    response_model=Envelope[CompanyResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create Company",
    description="Create a company page. The creator becomes its first admin.",
)
async def create_company(
    body: CompanyCreate,
    current_user: User = Depends(require_recruiter_or_admin),
    db: AsyncSession = Depends(get_db),
):
    company = await company_service.create_company(db, body, current_user)
    return Envelope(
        message="Company created successfully", data=CompanyResponse.model_validate(company)
    )


@router.get("", response_model=PageEnvelope[CompanyResponse], summary="List Companies")
async def list_companies(
    search: Optional[str] = Query(None, description="Match name or description"),
    industry: Optional[str] = Query(None),
    size: Optional[CompanySize] = Query(None),
    verified: Optional[bool] = Query(None),
    pagination: PaginationParams = Depends(get_pagination_params),
    db: AsyncSession = Depends(get_db),
):
    companies, total = await company_service.list_companies(
        db,
        offset=pagination.offset,
        limit=pagination.limit,
        search=search,
        industry=industry,
        size=size.value if size else None,
        verified=verified,
    )
    return PageEnvelope(
        data=[CompanyResponse.model_validate(c) for c in companies],
        pagination=Pagination.create(total, pagination),
    )


@router.get(
    "/user/following",
    response_model=ListEnvelope[CompanyResponse],
    summary="Followed Companies",
)
async def followed_companies(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    companies = await company_service.list_following(db, current_user)
    return ListEnvelope(
        data=[CompanyResponse.model_validate(c) for c in companies], count=len(companies)
    )


@router.get(
    "/{identifier}",
    response_model=Envelope[CompanyDetail],
    summary="Get Company",
    description="Look a company up by id or slug. Includes up to ten of its active jobs.",
)
async def get_company(
    identifier: str = Path(..., description="Company ID or slug"),
    db: AsyncSession = Depends(get_db),
):
    company, jobs = await company_service.get_company(db, identifier)
    detail = CompanyDetail(
        **CompanyResponse.model_validate(company).model_dump(),
        active_jobs=[JobSummary.model_validate(job) for job in jobs],
    )
    return Envelope(data=detail)


@router.put("/{company_id}", response_model=Envelope[CompanyResponse], summary="Update Company")
async def update_company(
    body: CompanyUpdate,
    company_id: int = Path(..., description="Company ID"),
    current_user: User = Depends(require_recruiter_or_admin),
    db: AsyncSession = Depends(get_db),
):
    company = await company_service.update_company(db, company_id, body, current_user)
    return Envelope(
        message="Company updated successfully", data=CompanyResponse.model_validate(company)
    )


@router.delete("/{company_id}", response_model=MessageResponse, summary="Delete Company")
async def delete_company(
    company_id: int = Path(..., description="Company ID"),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await company_service.delete_company(db, company_id)
    return MessageResponse(message="Company deleted successfully")


@router.post("/{company_id}/follow", response_model=FollowResponse, summary="Follow / Unfollow")
async def toggle_follow(
    company_id: int = Path(..., description="Company ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    following = await company_service.toggle_follow(db, company_id, current_user)
    message = "Company followed successfully" if following else "Company unfollowed successfully"
    return FollowResponse(message=message, is_following=following)
