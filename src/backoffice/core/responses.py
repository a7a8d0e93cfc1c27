"""Success envelope shared by every resource route.

Responses look like ``{"status": "success", "data": ..., "message": ...}``,
mirroring the error envelope in ``backoffice.core.errors.handlers``.
"""

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel


DataT = TypeVar("DataT")


class SuccessResponse(BaseModel, Generic[DataT]):
    """Envelope for a successful response."""

    status: Literal["success"] = "success"
    data: DataT | None = None
    message: str | None = None


class ListResponse(BaseModel, Generic[DataT]):
    """Envelope for a successful list response."""

    status: Literal["success"] = "success"
    results: int
    data: list[DataT]


class Pagination(BaseModel):
    total: int
    page: int
    page_size: int
    total_pages: int
    has_prev_page: bool
    has_next_page: bool

    @classmethod
    def build(cls, total: int, page: int, page_size: int) -> "Pagination":
        total_pages = (total + page_size - 1) // page_size if page_size else 0
        return cls(
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages,
            has_prev_page=page > 1,
            has_next_page=page < total_pages,
        )


class PaginatedResponse(ListResponse[DataT], Generic[DataT]):
    """List envelope with pagination metadata."""

    pagination: Pagination
