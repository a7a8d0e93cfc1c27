"""Category repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, select

from backoffice.api.dependencies import DBSession
from backoffice.modules.categories.models import Category
from backoffice.modules.products.models import Product


class CategoryRepository:
    """Repository for Category database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, category: Category) -> Category:
        """Insert a category.

        Returns:
            The category with ID and timestamps populated
        """
        self.session.add(category)
        await self.session.flush()
        await self.session.refresh(category)
        return category

    async def get_by_id(self, category_id: UUID) -> Category | None:
        """Get a category by ID, active or not.

        Args:
            category_id: The category's UUID

        Returns:
            Category if found, None otherwise
        """
        return await self.session.get(Category, category_id)

    async def slug_taken(self, slug: str, exclude_id: UUID | None = None) -> bool:
        """Check whether another category already uses ``slug``.

        Args:
            slug: Slug to look up
            exclude_id: Category to ignore (the one being updated)
        """
        stmt = select(Category.id).where(Category.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(Category.id != exclude_id)
        return await self.session.scalar(stmt.limit(1)) is not None

    async def list_paginated(
        self,
        offset: int = 0,
        limit: int = 20,
        active_only: bool = True,
        parent_id: UUID | None = None,
        roots_only: bool = False,
    ) -> tuple[list[Category], int]:
        """List categories, siblings ordered by position then name.

        Args:
            active_only: Skip inactive categories
            parent_id: Only direct children of this category
            roots_only: Only top-level categories; ignored when ``parent_id`` is given

        Returns:
            Tuple of (categories list, total count)
        """
        clauses = []
        if active_only:
            clauses.append(Category.is_active.is_(True))
        if parent_id is not None:
            clauses.append(Category.parent_id == parent_id)
        elif roots_only:
            clauses.append(Category.parent_id.is_(None))

        total = await self.session.scalar(
            select(func.count()).select_from(Category).where(*clauses)
        )
        stmt = (
            select(Category)
            .where(*clauses)
            .order_by(Category.level, Category.position, Category.name)
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def list_all(self, active_only: bool = True) -> list[Category]:
        """Every category, for assembling the tree."""
        stmt = select(Category).order_by(Category.level, Category.position, Category.name)
        if active_only:
            stmt = stmt.where(Category.is_active.is_(True))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_children(self, category_id: UUID) -> list[Category]:
        """List the direct children of a category.

        Args:
            category_id: Parent category

        Returns:
            Child categories, active or not
        """
        result = await self.session.execute(
            select(Category).where(Category.parent_id == category_id)
        )
        return list(result.scalars().all())

    async def count_children(self, category_id: UUID) -> int:
        """Count the direct children of a category.

        Args:
            category_id: Parent category

        Returns:
            Number of child categories
        """
        total = await self.session.scalar(
            select(func.count()).select_from(Category).where(Category.parent_id == category_id)
        )
        return total or 0

    async def count_products(self, category_id: UUID) -> int:
        """Count products listed under a category.

        Args:
            category_id: The category's UUID

        Returns:
            Number of products, published or not
        """
        total = await self.session.scalar(
            select(func.count()).select_from(Product).where(Product.category_id == category_id)
        )
        return total or 0

    async def update(self, category: Category) -> Category:
        """Update a category.

        Args:
            category: Category instance with updated fields

        Returns:
            The updated category
        """
        await self.session.flush()
        await self.session.refresh(category)
        return category

    async def delete(self, category: Category) -> None:
        """Delete a category.

        Args:
            category: Category instance to delete
        """
        await self.session.delete(category)
        await self.session.flush()


# Type alias for dependency injection
CategoryRepo = Annotated[CategoryRepository, Depends(CategoryRepository)]
