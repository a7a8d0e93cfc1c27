"""Route guards built on the authorization gate.

Usage:
    @router.delete("/users/{user_id}")
    async def delete_user(
        user_id: UUID,
        current_user: Annotated[Any, Depends(require_permissions("user:delete"))],
    ):
        ...

Each guard runs the gate for the token's principal and then resolves to
the active user, so routes receive the same object as ``CurrentUser``.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from backoffice.api.dependencies import DBSession
from backoffice.core.auth.dependencies import PrincipalId, load_active_user
from backoffice.core.permissions.checker import PermissionChecker


Guard = Callable[..., Awaitable[Any]]


def require_roles(*roles: str) -> Guard:
    """Dependency factory that requires any one of ``roles``.

    Raises:
        ValueError: If no role is given
    """
    if not roles:
        raise ValueError("require_roles needs at least one role")
    accepted = frozenset(roles)

    async def role_guard(principal_id: PrincipalId, db: DBSession) -> Any:
        await PermissionChecker(db).check_role(principal_id, accepted)
        return await load_active_user(db, principal_id)  # type: ignore[arg-type]

    return role_guard


def require_permissions(*permissions: str) -> Guard:
    """Dependency factory that requires any one of ``permissions``.

    Raises:
        ValueError: If no permission is given
    """
    if not permissions:
        raise ValueError("require_permissions needs at least one permission")
    accepted = frozenset(permissions)

    async def permission_guard(principal_id: PrincipalId, db: DBSession) -> Any:
        await PermissionChecker(db).check_permission(principal_id, accepted)
        return await load_active_user(db, principal_id)  # type: ignore[arg-type]

    return permission_guard
