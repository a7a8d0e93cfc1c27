"""Authentication service for login and registration."""

from datetime import UTC, datetime
from typing import Annotated

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from backoffice.api.dependencies import DBSession
from backoffice.config import settings
from backoffice.core.auth.backend import create_access_token, hash_password, verify_and_rehash
from backoffice.core.auth.schemas import RegisterRequest, TokenResponse
from backoffice.core.errors import InternalError, UnauthorizedError
from backoffice.core.permissions.roles import CUSTOMER, get_role_by_name
from backoffice.modules.users.models import User
from backoffice.modules.users.repos import UserRepository
from backoffice.modules.users.services import user_exists_error


logger = structlog.get_logger()


class AuthService:
    """Service for authentication operations.

    Handles customer self-registration and email/password login.
    """

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.user_repo = UserRepository(db)

    async def register(self, data: RegisterRequest) -> tuple[User, TokenResponse]:
        """Register a new customer account.

        The new user is given the ``customer`` role.

        Raises:
            ValidationError: If email or username already exists
            InternalError: If the customer role has not been seeded
        """
        if await self.user_repo.find_conflicting(data.email, data.username):
            raise user_exists_error()

        customer_role = await get_role_by_name(self.db, CUSTOMER)
        if customer_role is None:
            logger.error("customer_role_missing")
            raise InternalError(
                "Customer role is not configured",
                error_code="role_missing",
            )

        user = User(
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            last_login=datetime.now(UTC),
        )
        try:
            user = await self.user_repo.create(user)
        except IntegrityError as e:
            # Another signup took the email or username since the check above
            raise user_exists_error() from e
        await self.user_repo.add_role(user, customer_role)

        logger.info("user_registered", user_id=str(user.id))
        return user, self._issue_token(user)

    async def login(self, email: str, password: str) -> tuple[User, TokenResponse]:
        """Authenticate a user with email and password.

        Raises:
            UnauthorizedError: If credentials are invalid or the account is inactive
        """
        user = await self.user_repo.get_by_email(email)
        matches, new_hash = (
            verify_and_rehash(password, user.password_hash) if user else (False, None)
        )
        if not user or not matches:
            raise UnauthorizedError(
                "Invalid email or password",
                error_code="invalid_credentials",
            )

        if not user.is_active:
            raise UnauthorizedError(
                "Account is deactivated",
                error_code="account_inactive",
            )

        if new_hash:
            user.password_hash = new_hash
            logger.info("password_rehashed", user_id=str(user.id))
        user.last_login = datetime.now(UTC)
        user = await self.user_repo.update(user)

        logger.info("user_logged_in", user_id=str(user.id))
        return user, self._issue_token(user)

    def _issue_token(self, user: User) -> TokenResponse:
        return TokenResponse(
            access_token=create_access_token(user.id),
            expires_in=settings.access_token_expire_minutes * 60,
        )


# Type alias for dependency injection
AuthSvc = Annotated[AuthService, Depends(AuthService)]
