"""Authentication module for JWT and password handling."""

from backoffice.core.auth.backend import (
    create_access_token,
    decode_token,
    hash_password,
    verify_and_rehash,
    verify_password,
)
from backoffice.core.auth.dependencies import (
    CurrentUser,
    PrincipalId,
    get_current_user,
    get_principal_id,
)
from backoffice.core.auth.middleware import RequestIdMiddleware
from backoffice.core.auth.schemas import TokenData, TokenResponse


__all__ = [
    # Dependencies
    "CurrentUser",
    "PrincipalId",
    # Middleware
    "RequestIdMiddleware",
    # Schemas
    "TokenData",
    "TokenResponse",
    # Token utilities
    "create_access_token",
    "decode_token",
    "get_current_user",
    "get_principal_id",
    # Password utilities
    "hash_password",
    "verify_and_rehash",
    "verify_password",
]
