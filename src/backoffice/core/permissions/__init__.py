"""Role/permission store and the authorization gate built on it."""

from backoffice.core.permissions.checker import PermissionChecker
from backoffice.core.permissions.models import Role, UserRole, format_permissions


__all__ = [
    "PermissionChecker",
    "Role",
    "UserRole",
    "format_permissions",
]
