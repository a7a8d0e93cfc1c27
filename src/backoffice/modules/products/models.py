"""Product database models."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.core.constants import MAX_PRODUCT_NAME_LENGTH, MAX_SKU_LENGTH, MAX_SLUG_LENGTH
from backoffice.core.database.base import Base, TimestampMixin, UUIDMixin


class Product(Base, UUIDMixin, TimestampMixin):
    """A catalogue product.

    Attributes:
        name: Display name
        slug: Unique URL-safe identifier
        sku: Unique stock keeping unit
        description: Optional long description
        price: Unit price
        quantity: Units in stock; ignored for digital products
        is_published: Whether customers can see and order the product
        is_digital: Digital products are never stock-checked
        category_id: Optional category the product is listed under
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(
        String(MAX_PRODUCT_NAME_LENGTH),
        nullable=False,
    )
    slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        unique=True,
        index=True,
        nullable=False,
    )
    sku: Mapped[str] = mapped_column(
        String(MAX_SKU_LENGTH),
        unique=True,
        index=True,
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_digital: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    category_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, sku={self.sku})>"
