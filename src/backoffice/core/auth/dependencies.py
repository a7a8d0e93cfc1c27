"""Resolve the ``Authorization: Bearer`` header into a principal.

Two entry points:

- ``PrincipalId``: the token's user id, or None for anonymous requests.
  The authorization gate works from this.
- ``CurrentUser``: the active ``User`` row; a token is mandatory.
"""

from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.api.dependencies import DBSession
from backoffice.core.auth.backend import ACCESS_TOKEN_TYPE, decode_token
from backoffice.core.errors import UnauthorizedError


BearerCredentials = Annotated[
    HTTPAuthorizationCredentials | None, Depends(HTTPBearer(auto_error=False))
]


def _principal_from_token(token: str) -> UUID:
    token_data = decode_token(token)
    if token_data is None:
        raise UnauthorizedError("Invalid or expired token", error_code="invalid_token")
    if token_data.type != ACCESS_TOKEN_TYPE:
        raise UnauthorizedError("Invalid token type", error_code="invalid_token_type")
    return token_data.user_id


async def get_principal_id(credentials: BearerCredentials) -> UUID | None:
    """The token's user id, or None when no token was sent.

    A token that is present but unusable is rejected rather than treated as
    anonymous.
    """
    if credentials is None:
        return None
    return _principal_from_token(credentials.credentials)


async def load_active_user(db: AsyncSession, user_id: UUID) -> Any:
    """Load the user behind a principal id.

    Raises:
        UnauthorizedError: If the user was deleted or deactivated after the token was issued
    """
    # Deferred: the users module imports the auth package
    from backoffice.modules.users.repos import UserRepository  # noqa: PLC0415

    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        raise UnauthorizedError(
            "The user belonging to this token no longer exists",
            error_code="user_not_found",
        )
    if not user.is_active:
        raise UnauthorizedError("Your account has been deactivated", error_code="user_inactive")
    return user


async def get_current_user(credentials: BearerCredentials, db: DBSession) -> Any:
    """The authenticated, active user (a ``User``; typed Any to avoid an import cycle).

    Raises:
        UnauthorizedError: If no token was sent, the token is unusable, or the user is gone
    """
    if credentials is None:
        raise UnauthorizedError("You are not logged in", error_code="missing_token")
    return await load_active_user(db, _principal_from_token(credentials.credentials))


PrincipalId = Annotated[UUID | None, Depends(get_principal_id)]
CurrentUser = Annotated[Any, Depends(get_current_user)]
