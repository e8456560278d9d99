"""
Account endpoints.

Registration and login both answer with a bearer token for the account.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_current_user
from api.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from api.schemas.common import Envelope
from api.services import users as user_service
from core.security import create_access_token
from database.engine import get_db
from database.models.users import User

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        token=create_access_token(user.id, user.role.value),
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a recruiter or seeker account.",
)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    user = await user_service.register_user(db, body)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse, summary="Log In")
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await user_service.authenticate_user(db, body.email, body.password)
    return _auth_response(user)


@router.get("/me", response_model=Envelope[UserResponse], summary="Current User")
async def me(current_user: User = Depends(get_current_user)):
    return Envelope(data=UserResponse.model_validate(current_user))
