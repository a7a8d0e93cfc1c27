"""User repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import delete, func, or_, select, update

from backoffice.api.dependencies import DBSession
from backoffice.core.permissions.models import Role, UserRole
from backoffice.modules.users.models import User


class UserRepository:
    """Repository for User database operations.

    Role assignments are stored as explicit ``UserRole`` rows and are
    only ever written here.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, user: User) -> User:
        """Create a new user.

        Args:
            user: User instance to create

        Returns:
            The created user with ID populated
        """
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def get_by_id(self, user_id: UUID) -> User | None:
        """Get a user by ID.

        Args:
            user_id: The user's UUID

        Returns:
            User with roles loaded if found, None otherwise
        """
        stmt = select(User).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email address, ignoring case.

        Args:
            email: The user's email

        Returns:
            User if found, None otherwise
        """
        stmt = select(User).where(func.lower(User.email) == email.lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_conflicting(
        self,
        email: str | None,
        username: str | None,
        exclude_id: UUID | None = None,
    ) -> list[User]:
        """Find other users already holding this email or username.

        Args:
            email: Email to check, if it is being set
            username: Username to check, if it is being set
            exclude_id: User to ignore (the one being updated)

        Returns:
            Users that would collide
        """
        clauses = []
        if email:
            clauses.append(func.lower(User.email) == email.lower())
        if username:
            clauses.append(User.username == username)
        if not clauses:
            return []

        stmt = select(User).where(or_(*clauses))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_paginated(
        self,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[User], int]:
        """List users with pagination, newest first.

        Args:
            offset: Rows to skip
            limit: Maximum rows to return

        Returns:
            Tuple of (users list, total count)
        """
        total = await self.session.scalar(select(func.count()).select_from(User))

        stmt = (
            select(User)
            .order_by(User.created_at.desc(), User.username)
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def update(self, user: User) -> User:
        """Update a user.

        Args:
            user: User instance with updated fields

        Returns:
            The updated user
        """
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def delete(self, user: User) -> None:
        """Delete a user with their role assignments.

        Args:
            user: User instance to delete
        """
        # Drop the pointer first so the wishlist cascade never updates a deleted row
        await self.set_default_wishlist(user.id, None)
        await self.session.execute(delete(UserRole).where(UserRole.user_id == user.id))
        await self.session.delete(user)
        await self.session.flush()

    async def set_roles(self, user: User, roles: list[Role]) -> User:
        """Replace a user's role assignments.

        Args:
            user: The user whose roles are replaced
            roles: The complete new set of roles

        Returns:
            The user with ``roles`` reloaded
        """
        await self.session.execute(delete(UserRole).where(UserRole.user_id == user.id))
        for role_id in {role.id for role in roles}:
            self.session.add(UserRole(user_id=user.id, role_id=role_id))
        await self.session.flush()
        await self.session.refresh(user, attribute_names=["roles"])
        return user

    async def add_role(self, user: User, role: Role) -> None:
        """Assign a single role if the user does not already hold it."""
        existing = await self.session.scalar(
            select(UserRole).where(UserRole.user_id == user.id, UserRole.role_id == role.id)
        )
        if existing is None:
            self.session.add(UserRole(user_id=user.id, role_id=role.id))
            await self.session.flush()
        await self.session.refresh(user, attribute_names=["roles"])

    async def set_default_wishlist_if_unset(self, user_id: UUID, wishlist_id: UUID) -> bool:
        """Point a user's default wishlist at ``wishlist_id`` unless one is set.

        This is a compare-and-set on the pointer column: of several
        concurrent callers, exactly one sees ``True``.

        Returns:
            True if this call wrote the pointer
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.default_wishlist_id.is_(None))
            .values(default_wishlist_id=wishlist_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def set_default_wishlist(self, user_id: UUID, wishlist_id: UUID | None) -> None:
        """Overwrite a user's default wishlist pointer.

        Args:
            user_id: The user's UUID
            wishlist_id: New default wishlist, or None to clear it
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(default_wishlist_id=wishlist_id)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def clear_default_wishlist(self, user_id: UUID, wishlist_id: UUID) -> None:
        """Clear the pointer only if it still references ``wishlist_id``."""
        stmt = (
            update(User)
            .where(User.id == user_id, User.default_wishlist_id == wishlist_id)
            .values(default_wishlist_id=None)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def refresh_default_wishlist(self, user: User) -> None:
        """Reload the pointer on ``user`` after a bulk UPDATE changed it."""
        await self.session.refresh(user, attribute_names=["default_wishlist_id"])

    async def get_default_wishlist_id(self, user_id: UUID) -> UUID | None:
        """Read the pointer straight from the database, bypassing the identity map."""
        return await self.session.scalar(
            select(User.default_wishlist_id).where(User.id == user_id)
        )


# Type alias for dependency injection
UserRepo = Annotated[UserRepository, Depends(UserRepository)]
