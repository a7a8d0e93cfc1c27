"""Product service for business logic."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from backoffice.core.errors import NotFoundError, ValidationError
from backoffice.core.utils.text import generate_slug
from backoffice.modules.products.models import Product
from backoffice.modules.products.repos import ProductRepo
from backoffice.modules.products.schemas import ProductCreate, ProductUpdate


logger = structlog.get_logger()

# Fields a PATCH may clear by sending null
_NULLABLE_FIELDS = frozenset({"description", "category_id"})


def _product_exists(errors: list[dict[str, str]] | None = None) -> ValidationError:
    message = "; ".join(e["message"] for e in errors) if errors else None
    return ValidationError(
        message or "A product with this slug or SKU already exists",
        error_code="product_exists",
        errors=errors,
    )


class ProductService:
    """Service for catalogue operations."""

    def __init__(self, repo: ProductRepo) -> None:
        self.repo = repo

    async def _ensure_unique(
        self,
        slug: str | None,
        sku: str | None,
        exclude_id: UUID | None = None,
    ) -> None:
        conflicts = await self.repo.find_conflicting(slug, sku, exclude_id=exclude_id)
        errors = []
        if slug and any(p.slug == slug for p in conflicts):
            errors.append({"field": "slug", "message": "Slug already in use"})
        if sku and any(p.sku == sku for p in conflicts):
            errors.append({"field": "sku", "message": "SKU already in use"})

        if errors:
            raise _product_exists(errors)

    async def get_product(self, product_id: UUID, include_unpublished: bool = True) -> Product:
        """Get a product by ID.

        Raises:
            NotFoundError: If the product does not exist, or is unpublished
                and ``include_unpublished`` is False
        """
        product = await self.repo.get_by_id(product_id)
        if not product or (not include_unpublished and not product.is_published):
            raise NotFoundError(
                "Product not found",
                resource="product",
                resource_id=str(product_id),
            )
        return product

    async def list_products(
        self,
        offset: int = 0,
        limit: int = 20,
        include_unpublished: bool = False,
        search: str | None = None,
        category_id: UUID | None = None,
    ) -> tuple[list[Product], int]:
        return await self.repo.list_paginated(
            offset,
            limit,
            published_only=not include_unpublished,
            search=search,
            category_id=category_id,
        )

    async def _ensure_category(self, category_id: UUID | None) -> None:
        if category_id is not None and not await self.repo.category_exists(category_id):
            raise ValidationError(
                "Unknown category",
                errors=[{"field": "category_id", "message": f"Unknown category: {category_id}"}],
            )

    async def create_product(self, data: ProductCreate) -> Product:
        """Create a product.

        Raises:
            ValidationError: If the slug or SKU is already in use, or the
                category does not exist
        """
        slug = data.slug or generate_slug(data.name)
        if not slug:
            raise ValidationError(
                "Cannot derive a slug from this name",
                errors=[{"field": "slug", "message": "Slug is required"}],
            )
        await self._ensure_unique(slug, data.sku)
        await self._ensure_category(data.category_id)

        product = Product(**data.model_dump(exclude={"slug"}), slug=slug)
        try:
            product = await self.repo.create(product)
        except IntegrityError as e:
            # Lost a race with a concurrent write of the same slug or SKU
            raise _product_exists() from e
        logger.info("product_created", product_id=str(product.id), sku=product.sku)
        return product

    async def update_product(self, product_id: UUID, data: ProductUpdate) -> Product:
        """Update a product.

        Raises:
            NotFoundError: If the product does not exist
            ValidationError: If the new slug or SKU is already in use, or the
                new category does not exist
        """
        product = await self.get_product(product_id)
        changes = data.model_dump(exclude_unset=True)

        new_slug = changes.get("slug") if changes.get("slug") != product.slug else None
        new_sku = changes.get("sku") if changes.get("sku") != product.sku else None
        await self._ensure_unique(new_slug, new_sku, exclude_id=product.id)
        if changes.get("category_id") not in (None, product.category_id):
            await self._ensure_category(changes["category_id"])

        for field, value in changes.items():
            if value is None and field not in _NULLABLE_FIELDS:
                continue
            setattr(product, field, value)

        try:
            return await self.repo.update(product)
        except IntegrityError as e:
            raise _product_exists() from e

    async def delete_product(self, product_id: UUID) -> None:
        product = await self.get_product(product_id)
        await self.repo.delete(product)
        logger.info("product_deleted", product_id=str(product_id))


# Type alias for dependency injection
ProductSvc = Annotated[ProductService, Depends(ProductService)]
