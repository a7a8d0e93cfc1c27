"""Wishlist database models."""

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.core.constants import MAX_DESCRIPTION_LENGTH, MAX_WISHLIST_NAME_LENGTH
from backoffice.core.database.base import Base, TimestampMixin, UUIDMixin
from backoffice.modules.products.models import Product


class WishlistItem(Base, UUIDMixin, TimestampMixin):
    """A product saved to a wishlist.

    A product appears at most once per wishlist.
    """

    __tablename__ = "wishlist_items"
    __table_args__ = (
        UniqueConstraint("wishlist_id", "product_id", name="uq_wishlist_item_product"),
    )

    wishlist_id: Mapped[UUID] = mapped_column(
        ForeignKey("wishlists.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    product_id: Mapped[UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    product: Mapped[Product] = relationship(Product, lazy="selectin")

    def __repr__(self) -> str:
        return f"<WishlistItem(wishlist_id={self.wishlist_id}, product_id={self.product_id})>"


class Wishlist(Base, UUIDMixin, TimestampMixin):
    """A named list of products owned by one customer.

    Attributes:
        customer_id: Owning user
        name: Display name
        description: Optional description
        is_public: Public wishlists are readable by any authenticated user
        items: Saved products, oldest first
    """

    __tablename__ = "wishlists"

    customer_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(MAX_WISHLIST_NAME_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    items: Mapped[list[WishlistItem]] = relationship(
        WishlistItem,
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by=WishlistItem.created_at,
    )

    def __repr__(self) -> str:
        return f"<Wishlist(id={self.id}, customer_id={self.customer_id}, name={self.name})>"
