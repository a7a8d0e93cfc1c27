"""Permission system database models.

This module defines the RBAC (Role-Based Access Control) models:
- Role: A named bundle of permission tokens
- UserRole: Explicit join rows linking users to roles

Permissions are not stored as rows of their own. A permission is an opaque
``resource:action`` token held in a role's permission set.
"""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.core.constants import MAX_DESCRIPTION_LENGTH, MAX_ROLE_NAME_LENGTH
from backoffice.core.database.base import Base, TimestampMixin, UUIDMixin


def format_permissions(resource_actions: dict[str, Iterable[str]]) -> list[str]:
    """Expand ``{"order": ["view", "update"]}`` into ``["order:view", "order:update"]``."""
    return [
        f"{resource}:{action}"
        for resource, actions in resource_actions.items()
        for action in actions
    ]


class Role(Base, UUIDMixin, TimestampMixin):
    """Role model representing a named set of permissions.

    Attributes:
        name: Unique role name used as the lookup key
            (superadmin, admin, manager, supplier, customer, ...)
        description: Human-readable description of the role
        permissions: Permission tokens in "resource:action" form
    """

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(
        String(MAX_ROLE_NAME_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )
    permissions: Mapped[list[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )

    @property
    def permission_set(self) -> frozenset[str]:
        return frozenset(self.permissions or ())

    def set_permissions(self, permissions: Iterable[str]) -> None:
        """Replace the permission set.

        The column is a JSON list, so it is always reassigned rather than
        mutated in place; duplicates are collapsed and order is normalized.
        """
        self.permissions = sorted(set(permissions))

    def has_permission(self, permission: str) -> bool:
        """Check if this role holds an exact permission token.

        Matching is flat: no wildcards and no implied permissions.
        """
        return permission in self.permission_set

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name})>"


class UserRole(Base, TimestampMixin):
    """Join rows linking users to roles.

    A user can hold several roles; their effective permissions are the
    union of all their roles' permissions.
    """

    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role_id", name="uq_user_role"),)

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<UserRole(user_id={self.user_id}, role_id={self.role_id})>"
