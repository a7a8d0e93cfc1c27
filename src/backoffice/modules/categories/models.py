"""Category database models."""

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.core.constants import MAX_CATEGORY_NAME_LENGTH, MAX_SLUG_LENGTH
from backoffice.core.database.base import Base, TimestampMixin, UUIDMixin


class Category(Base, UUIDMixin, TimestampMixin):
    """A node in the category tree.

    Attributes:
        name: Display name
        slug: Unique URL-safe identifier
        description: Optional long description
        parent_id: Parent category; None for a root category
        level: Depth in the tree, 0 for roots
        is_active: Inactive categories are hidden from the public
        position: Sort key among siblings
    """

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(MAX_CATEGORY_NAME_LENGTH), nullable=False)
    slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        unique=True,
        index=True,
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Deletion is refused while children exist, so no cascade here
    parent_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("categories.id"),
        index=True,
        nullable=True,
    )
    level: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, slug={self.slug}, level={self.level})>"
