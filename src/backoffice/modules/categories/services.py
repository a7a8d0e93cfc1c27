"""Category service for business logic."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from backoffice.core.errors import NotFoundError, ValidationError
from backoffice.core.utils.text import generate_slug
from backoffice.modules.categories.models import Category
from backoffice.modules.categories.repos import CategoryRepo
from backoffice.modules.categories.schemas import (
    CategoryCreate,
    CategoryTreeNode,
    CategoryUpdate,
)


logger = structlog.get_logger()


def _category_exists() -> ValidationError:
    return ValidationError(
        "Slug already in use",
        error_code="category_exists",
        errors=[{"field": "slug", "message": "Slug already in use"}],
    )


def _circular_parent(message: str) -> ValidationError:
    return ValidationError(
        message,
        error_code="category_cycle",
        errors=[{"field": "parent_id", "message": message}],
    )


def build_tree(categories: list[Category]) -> list[CategoryTreeNode]:
    """Nest categories under their parents.

    ``categories`` must be ordered parents-first (by level). A category
    whose parent is not in the list is dropped with its whole subtree, so
    hiding an inactive category hides everything under it.
    """
    nodes: dict[UUID, CategoryTreeNode] = {}
    roots: list[CategoryTreeNode] = []
    for category in categories:
        node = CategoryTreeNode(
            id=category.id,
            name=category.name,
            slug=category.slug,
            level=category.level,
        )
        if category.parent_id is None:
            roots.append(node)
        elif category.parent_id in nodes:
            nodes[category.parent_id].children.append(node)
        else:
            continue
        nodes[category.id] = node
    return roots


class CategoryService:
    """Service for the category tree.

    Each category stores its depth (``level``); moving a category
    re-levels its whole subtree.
    """

    def __init__(self, repo: CategoryRepo) -> None:
        self.repo = repo

    async def get_category(self, category_id: UUID, include_inactive: bool = True) -> Category:
        """Get a category by ID.

        Raises:
            NotFoundError: If the category does not exist, or is inactive
                and ``include_inactive`` is False
        """
        category = await self.repo.get_by_id(category_id)
        if category is None or (not include_inactive and not category.is_active):
            raise NotFoundError(
                "Category not found",
                resource="category",
                resource_id=str(category_id),
            )
        return category

    async def list_categories(
        self,
        offset: int = 0,
        limit: int = 20,
        include_inactive: bool = False,
        parent_id: UUID | None = None,
        roots_only: bool = False,
    ) -> tuple[list[Category], int]:
        return await self.repo.list_paginated(
            offset,
            limit,
            active_only=not include_inactive,
            parent_id=parent_id,
            roots_only=roots_only,
        )

    async def get_tree(self, include_inactive: bool = False) -> list[CategoryTreeNode]:
        return build_tree(await self.repo.list_all(active_only=not include_inactive))

    async def _resolve_parent(self, parent_id: UUID) -> Category:
        parent = await self.repo.get_by_id(parent_id)
        if parent is None:
            raise ValidationError(
                "Parent category not found",
                error_code="parent_not_found",
                errors=[{"field": "parent_id", "message": f"Unknown category: {parent_id}"}],
            )
        return parent

    async def _ensure_not_descendant(self, category: Category, parent: Category) -> None:
        """Refuse to hang ``category`` below itself.

        Raises:
            ValidationError: If ``parent`` is ``category`` or one of its descendants
        """
        if parent.id == category.id:
            raise _circular_parent("Category cannot be its own parent")
        ancestor: Category | None = parent
        while ancestor is not None and ancestor.parent_id is not None:
            if ancestor.parent_id == category.id:
                raise _circular_parent("Circular reference detected in category hierarchy")
            ancestor = await self.repo.get_by_id(ancestor.parent_id)

    async def _relevel(self, category: Category) -> None:
        for child in await self.repo.list_children(category.id):
            child.level = category.level + 1
            await self._relevel(child)

    async def create_category(self, data: CategoryCreate) -> Category:
        """Create a category, as a root or under ``parent_id``.

        Raises:
            ValidationError: If the slug is taken or the parent does not exist
        """
        slug = data.slug or generate_slug(data.name)
        if not slug:
            raise ValidationError(
                "Cannot derive a slug from this name",
                errors=[{"field": "slug", "message": "Slug is required"}],
            )
        if await self.repo.slug_taken(slug):
            raise _category_exists()

        level = 0
        if data.parent_id is not None:
            level = (await self._resolve_parent(data.parent_id)).level + 1

        category = Category(
            name=data.name,
            slug=slug,
            description=data.description,
            parent_id=data.parent_id,
            level=level,
            is_active=data.is_active,
            position=data.position,
        )
        try:
            category = await self.repo.create(category)
        except IntegrityError as e:
            raise _category_exists() from e

        logger.info("category_created", category_id=str(category.id), slug=slug, level=level)
        return category

    async def update_category(self, category_id: UUID, data: CategoryUpdate) -> Category:
        """Update a category, possibly moving it to another parent.

        Raises:
            NotFoundError: If the category does not exist
            ValidationError: If the new slug is taken, the new parent does
                not exist, or the move would create a cycle
        """
        category = await self.get_category(category_id)
        changes = data.model_dump(exclude_unset=True)

        new_slug = changes.pop("slug", None)
        if new_slug and new_slug != category.slug:
            if await self.repo.slug_taken(new_slug, exclude_id=category.id):
                raise _category_exists()
            category.slug = new_slug

        moved = False
        if "parent_id" in changes:
            parent_id = changes.pop("parent_id")
            if parent_id != category.parent_id:
                level = 0
                if parent_id is not None:
                    parent = await self._resolve_parent(parent_id)
                    await self._ensure_not_descendant(category, parent)
                    level = parent.level + 1
                category.parent_id = parent_id
                moved = category.level != level
                category.level = level

        for field, value in changes.items():
            # Only the description column is nullable
            if value is None and field != "description":
                continue
            setattr(category, field, value)

        if moved:
            await self._relevel(category)

        try:
            category = await self.repo.update(category)
        except IntegrityError as e:
            raise _category_exists() from e

        if "parent_id" in data.model_fields_set:
            logger.info(
                "category_moved",
                category_id=str(category.id),
                parent_id=str(category.parent_id) if category.parent_id else None,
            )
        return category

    async def delete_category(self, category_id: UUID) -> None:
        """Delete a leaf category that no product references.

        Raises:
            NotFoundError: If the category does not exist
            ValidationError: If the category has children or products
        """
        category = await self.get_category(category_id)
        if await self.repo.count_children(category.id):
            raise ValidationError(
                "Cannot delete a category that has child categories",
                error_code="category_has_children",
            )
        if await self.repo.count_products(category.id):
            raise ValidationError(
                "Cannot delete a category that has associated products",
                error_code="category_has_products",
            )

        await self.repo.delete(category)
        logger.info("category_deleted", category_id=str(category_id))


# Type alias for dependency injection
CategorySvc = Annotated[CategoryService, Depends(CategoryService)]
