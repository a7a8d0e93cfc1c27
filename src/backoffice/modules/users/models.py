"""User database models."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.core.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH, MAX_USERNAME_LENGTH
from backoffice.core.database.base import Base, TimestampMixin, UUIDMixin
from backoffice.core.permissions.models import Role


class User(Base, UUIDMixin, TimestampMixin):
    """User model representing any authenticated principal.

    Staff and customers share this table; a customer is a user holding
    the ``customer`` role.

    Attributes:
        username: Unique login handle
        email: Unique email address
        password_hash: Bcrypt-hashed password
        first_name: Optional given name
        last_name: Optional family name
        is_active: Whether the user can log in
        last_login: Time of the last successful login
        default_wishlist_id: Wishlist targeted when no wishlist ID is given
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(
        String(MAX_USERNAME_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    first_name: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )
    last_name: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    # users <-> wishlists reference each other, so this side is added by ALTER
    default_wishlist_id: Mapped[UUID | None] = mapped_column(
        ForeignKey(
            "wishlists.id",
            ondelete="SET NULL",
            use_alter=True,
            name="fk_users_default_wishlist_id",
        ),
        nullable=True,
    )

    # Read-only view over the user_roles join rows; assignments are
    # written through UserRepository.set_roles
    roles: Mapped[list[Role]] = relationship(
        Role,
        secondary="user_roles",
        lazy="selectin",
        viewonly=True,
        order_by=Role.name,
    )

    @property
    def role_names(self) -> list[str]:
        return [role.name for role in self.roles]

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username}, email={self.email})>"
