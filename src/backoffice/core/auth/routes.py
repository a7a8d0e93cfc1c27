"""Authentication API routes.

Provides endpoints for:
- Customer registration
- Login
- The current user's profile
"""

from fastapi import APIRouter, status
from pydantic import BaseModel

from backoffice.core.auth.dependencies import CurrentUser
from backoffice.core.auth.schemas import LoginRequest, RegisterRequest, TokenResponse
from backoffice.core.auth.service import AuthSvc
from backoffice.core.responses import SuccessResponse
from backoffice.modules.users.schemas import UserResponse


router = APIRouter(prefix="/auth", tags=["auth"])


class AuthPayload(BaseModel):
    """A user together with a freshly issued access token."""

    user: UserResponse
    token: TokenResponse


@router.post(
    "/register",
    response_model=SuccessResponse[AuthPayload],
    status_code=status.HTTP_201_CREATED,
    summary="Register customer",
    description="Creates a customer account and returns an access token.",
)
async def register(data: RegisterRequest, service: AuthSvc) -> SuccessResponse[AuthPayload]:
    user, token = await service.register(data)
    return SuccessResponse(
        data=AuthPayload(user=UserResponse.model_validate(user), token=token),
    )


@router.post(
    "/login",
    response_model=SuccessResponse[AuthPayload],
    summary="Login with email and password",
)
async def login(data: LoginRequest, service: AuthSvc) -> SuccessResponse[AuthPayload]:
    """Login with email and password."""
    user, token = await service.login(email=data.email, password=data.password)
    return SuccessResponse(
        data=AuthPayload(user=UserResponse.model_validate(user), token=token),
    )


@router.get(
    "/me",
    response_model=SuccessResponse[UserResponse],
    summary="Get current user",
    description="Returns the currently authenticated user's profile.",
)
async def get_me(current_user: CurrentUser) -> SuccessResponse[UserResponse]:
    return SuccessResponse(data=UserResponse.model_validate(current_user))
