"""User service for business logic."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from backoffice.core.auth.backend import hash_password
from backoffice.core.errors import NotFoundError, ValidationError
from backoffice.core.permissions.roles import get_roles_by_ids
from backoffice.modules.users.models import User
from backoffice.modules.users.repos import UserRepo
from backoffice.modules.users.schemas import UserCreate, UserUpdate


logger = structlog.get_logger()


def user_exists_error(errors: list[dict[str, str]] | None = None) -> ValidationError:
    message = "; ".join(e["message"] for e in errors) if errors else None
    return ValidationError(
        message or "A user with this email or username already exists",
        error_code="user_exists",
        errors=errors,
    )


class UserService:
    """Service for user management operations.

    Contains business logic for user CRUD operations, uniqueness
    checks and role assignment.
    """

    def __init__(self, repo: UserRepo) -> None:
        self.repo = repo

    async def _ensure_unique(
        self,
        email: str | None,
        username: str | None,
        exclude_id: UUID | None = None,
    ) -> None:
        """Re-check email and username uniqueness against the store.

        Raises:
            ValidationError: If another user already holds either value
        """
        conflicts = await self.repo.find_conflicting(email, username, exclude_id=exclude_id)
        errors = []
        if email and any(u.email.lower() == email.lower() for u in conflicts):
            errors.append({"field": "email", "message": "Email already in use"})
        if username and any(u.username == username for u in conflicts):
            errors.append({"field": "username", "message": "Username already in use"})

        if errors:
            raise user_exists_error(errors)

    async def _save(self, user: User, *, new: bool = False) -> User:
        """Flush a new or changed user.

        Raises:
            ValidationError: If a concurrent write took the email or username
                after the uniqueness check
        """
        try:
            save = self.repo.create if new else self.repo.update
            return await save(user)
        except IntegrityError as e:
            logger.warning("user_unique_violation", username=user.username)
            raise user_exists_error() from e

    async def create_user(self, data: UserCreate) -> User:
        """Create a new user and assign roles.

        Raises:
            ValidationError: If email or username is taken, or a role ID is unknown
        """
        await self._ensure_unique(data.email, data.username)
        roles = await get_roles_by_ids(self.repo.session, data.role_ids)

        user = User(
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            is_active=data.is_active,
        )
        user = await self._save(user, new=True)
        if roles:
            user = await self.repo.set_roles(user, roles)

        logger.info("user_created", user_id=str(user.id), roles=user.role_names)
        return user

    async def get_user(self, user_id: UUID) -> User:
        """Get a user by ID.

        Raises:
            NotFoundError: If user not found
        """
        user = await self.repo.get_by_id(user_id)
        if not user:
            raise NotFoundError(
                "User not found",
                resource="user",
                resource_id=str(user_id),
            )
        return user

    async def list_users(self, offset: int = 0, limit: int = 20) -> tuple[list[User], int]:
        return await self.repo.list_paginated(offset, limit)

    async def update_user(self, user_id: UUID, data: UserUpdate) -> User:
        """Update a user.

        Raises:
            NotFoundError: If user not found
            ValidationError: If the new email or username is taken
        """
        user = await self.get_user(user_id)

        new_email = data.email if data.email and data.email != user.email else None
        new_username = data.username if data.username and data.username != user.username else None
        await self._ensure_unique(new_email, new_username, exclude_id=user.id)

        if new_email:
            user.email = new_email
        if new_username:
            user.username = new_username
        if "first_name" in data.model_fields_set:
            user.first_name = data.first_name
        if "last_name" in data.model_fields_set:
            user.last_name = data.last_name
        if data.is_active is not None:
            user.is_active = data.is_active

        user = await self._save(user)

        if data.role_ids is not None:
            roles = await get_roles_by_ids(self.repo.session, data.role_ids)
            user = await self.repo.set_roles(user, roles)

        return user

    async def update_password(self, user_id: UUID, password: str) -> None:
        user = await self.get_user(user_id)
        user.password_hash = hash_password(password)
        await self.repo.update(user)
        logger.info("user_password_updated", user_id=str(user_id))

    async def delete_user(self, user_id: UUID) -> None:
        user = await self.get_user(user_id)
        await self.repo.delete(user)
        logger.info("user_deleted", user_id=str(user_id))


# Type alias for dependency injection
UserSvc = Annotated[UserService, Depends(UserService)]
