"""Product repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, or_, select

from backoffice.api.dependencies import DBSession
from backoffice.modules.categories.models import Category
from backoffice.modules.products.models import Product


class ProductRepository:
    """Repository for Product database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, product: Product) -> Product:
        """Create a new product.

        Args:
            product: Product instance to create

        Returns:
            The created product with ID and timestamps populated
        """
        self.session.add(product)
        await self.session.flush()
        await self.session.refresh(product)
        return product

    async def get_by_id(self, product_id: UUID) -> Product | None:
        """Get a product by ID, published or not.

        Args:
            product_id: The product's UUID

        Returns:
            Product if found, None otherwise
        """
        return await self.session.get(Product, product_id)

    async def category_exists(self, category_id: UUID) -> bool:
        """Check that ``category_id`` names an existing category.

        Args:
            category_id: The category's UUID
        """
        return await self.session.get(Category, category_id) is not None

    async def get_many(
        self,
        product_ids: list[UUID],
        for_update: bool = False,
    ) -> dict[UUID, Product]:
        """Load several products by ID.

        Args:
            product_ids: IDs to load; duplicates are fine
            for_update: Lock the rows until the transaction ends

        Returns:
            Mapping of product ID to product; unknown IDs are absent
        """
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(set(product_ids)))
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return {product.id: product for product in result.scalars().all()}

    async def get_many_for_update(self, product_ids: list[UUID]) -> dict[UUID, Product]:
        """Load several products and lock their rows for the current transaction."""
        return await self.get_many(product_ids, for_update=True)

    async def find_conflicting(
        self,
        slug: str | None,
        sku: str | None,
        exclude_id: UUID | None = None,
    ) -> list[Product]:
        """Find other products already using this slug or SKU.

        Args:
            slug: Slug to check, if it is being set
            sku: SKU to check, if it is being set
            exclude_id: Product to ignore (the one being updated)

        Returns:
            Products that would collide
        """
        clauses = []
        if slug:
            clauses.append(Product.slug == slug)
        if sku:
            clauses.append(Product.sku == sku)
        if not clauses:
            return []

        stmt = select(Product).where(or_(*clauses))
        if exclude_id is not None:
            stmt = stmt.where(Product.id != exclude_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_paginated(
        self,
        offset: int = 0,
        limit: int = 20,
        published_only: bool = True,
        search: str | None = None,
        category_id: UUID | None = None,
    ) -> tuple[list[Product], int]:
        """List products with pagination.

        Args:
            published_only: Skip unpublished products
            search: Case-insensitive substring of the name or SKU
            category_id: Only products listed under this category

        Returns:
            Tuple of (products list, total count)
        """
        filters = []
        if published_only:
            filters.append(Product.is_published.is_(True))
        if search:
            pattern = f"%{search.lower()}%"
            filters.append(
                or_(func.lower(Product.name).like(pattern), func.lower(Product.sku).like(pattern))
            )
        if category_id is not None:
            filters.append(Product.category_id == category_id)

        total = await self.session.scalar(select(func.count()).select_from(Product).where(*filters))

        stmt = (
            select(Product)
            .where(*filters)
            .order_by(Product.created_at.desc(), Product.name)
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def update(self, product: Product) -> Product:
        """Update a product.

        Args:
            product: Product instance with updated fields

        Returns:
            The updated product
        """
        await self.session.flush()
        await self.session.refresh(product)
        return product

    async def delete(self, product: Product) -> None:
        """Delete a product.

        Args:
            product: Product instance to delete
        """
        await self.session.delete(product)
        await self.session.flush()


# Type alias for dependency injection
ProductRepo = Annotated[ProductRepository, Depends(ProductRepository)]
