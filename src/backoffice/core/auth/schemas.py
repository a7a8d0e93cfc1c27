"""Authentication schemas for token handling."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from backoffice.core.constants import (
    MAX_NAME_LENGTH,
    MAX_PASSWORD_LENGTH,
    MAX_USERNAME_LENGTH,
    MIN_PASSWORD_LENGTH,
)


class TokenData(BaseModel):
    """Data extracted from a JWT token.

    Attributes:
        user_id: The user's UUID
        exp: Token expiration time
        type: Token type
    """

    user_id: UUID
    exp: datetime
    type: str = "access"


class TokenResponse(BaseModel):
    """Access token issued on login or registration."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token expiration in seconds")


class LoginRequest(BaseModel):
    """Schema for email/password login."""

    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    """Schema for customer self-registration."""

    username: str = Field(..., min_length=3, max_length=MAX_USERNAME_LENGTH)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH)
    first_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)
    last_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)
