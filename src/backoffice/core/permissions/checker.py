"""Role and permission checking logic.

This module provides the authorization gate: given a principal and a
set of accepted roles or permission tokens, decide whether the request
may proceed. Role tables are read on every call; nothing is cached.
"""

from collections.abc import Iterable
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.errors import ForbiddenError, InternalError, UnauthorizedError
from backoffice.core.permissions.models import Role, UserRole


logger = structlog.get_logger()


class PermissionChecker:
    """Service for checking user roles and permissions.

    The ``check_*`` methods raise on denial; the ``has_*`` methods return
    a bool for handlers that combine the answer with an ownership check.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_user_roles(self, user_id: UUID) -> list[Role] | None:
        """Get all roles assigned to a user.

        Args:
            user_id: The user's UUID

        Returns:
            List of roles assigned to the user, or None if the user
            does not exist

        Raises:
            InternalError: If the role store cannot be read
        """
        # Imported here to avoid a circular import with the users module
        from backoffice.modules.users.models import User  # noqa: PLC0415

        try:
            exists = await self.session.scalar(select(User.id).where(User.id == user_id))
            if exists is None:
                return None

            stmt = (
                select(Role)
                .join(UserRole, UserRole.role_id == Role.id)
                .where(UserRole.user_id == user_id)
            )
            result = await self.session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.exception(
                "role_lookup_failed",
                user_id=str(user_id),
                error=str(e),
            )
            raise InternalError(
                "Error checking user permissions",
                error_code="permission_check_failed",
            ) from e

    async def get_role_names(self, user_id: UUID) -> set[str] | None:
        """Get the names of a user's roles, or None if the user does not exist."""
        roles = await self.get_user_roles(user_id)
        if roles is None:
            return None
        return {role.name for role in roles}

    async def get_user_permissions(self, user_id: UUID) -> set[str] | None:
        """Get the union of permission tokens across a user's roles.

        Returns:
            Set of permission strings in "resource:action" format, or None
            if the user does not exist
        """
        roles = await self.get_user_roles(user_id)
        if roles is None:
            return None

        permissions: set[str] = set()
        for role in roles:
            permissions |= role.permission_set
        return permissions

    async def has_any_role(self, user_id: UUID, roles: Iterable[str]) -> bool:
        """Check if a user holds at least one of the given roles."""
        names = await self.get_role_names(user_id)
        return bool(names and names & set(roles))

    async def has_any_permission(self, user_id: UUID, permissions: Iterable[str]) -> bool:
        """Check if a user holds at least one of the given permission tokens."""
        granted = await self.get_user_permissions(user_id)
        return bool(granted and granted & set(permissions))

    async def check_role(self, user_id: UUID | None, roles: Iterable[str]) -> None:
        """Allow the request only if the user holds one of ``roles``.

        Args:
            user_id: The principal's UUID, or None when unauthenticated
            roles: Accepted role names (non-empty)

        Raises:
            UnauthorizedError: If there is no principal or it no longer exists
            ForbiddenError: If none of the user's roles is accepted
            InternalError: If the role store cannot be read
        """
        accepted = _require_non_empty(roles, "roles")
        if user_id is None:
            raise UnauthorizedError("Not authenticated", error_code="auth_required")

        names = await self.get_role_names(user_id)
        if names is None:
            raise UnauthorizedError("User not found", error_code="user_not_found")

        if not names & accepted:
            logger.info(
                "role_check_denied",
                user_id=str(user_id),
                required_roles=sorted(accepted),
            )
            raise ForbiddenError(
                error_code="role_denied",
                details={"required_roles": sorted(accepted)},
            )

    async def check_permission(self, user_id: UUID | None, permissions: Iterable[str]) -> None:
        """Allow the request only if the user holds one of ``permissions``.

        Args:
            user_id: The principal's UUID, or None when unauthenticated
            permissions: Accepted permission tokens (non-empty)

        Raises:
            UnauthorizedError: If there is no principal or it no longer exists
            ForbiddenError: If the union of the user's permissions misses them all
            InternalError: If the role store cannot be read
        """
        accepted = _require_non_empty(permissions, "permissions")
        if user_id is None:
            raise UnauthorizedError("Not authenticated", error_code="auth_required")

        granted = await self.get_user_permissions(user_id)
        if granted is None:
            raise UnauthorizedError("User not found", error_code="user_not_found")

        if not granted & accepted:
            logger.info(
                "permission_check_denied",
                user_id=str(user_id),
                required_permissions=sorted(accepted),
            )
            raise ForbiddenError(
                error_code="permission_denied",
                details={"required_permissions": sorted(accepted)},
            )


def _require_non_empty(values: Iterable[str], label: str) -> set[str]:
    accepted = set(values)
    if not accepted:
        raise ValueError(f"At least one of {label} must be given")
    return accepted
