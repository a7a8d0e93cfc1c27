"""Error handling module with the API error envelope."""

from backoffice.core.errors.exceptions import (
    AppException,
    ForbiddenError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from backoffice.core.errors.handlers import (
    ErrorResponse,
    FieldError,
    register_exception_handlers,
)


__all__ = [
    # Exceptions
    "AppException",
    # Handlers
    "ErrorResponse",
    "FieldError",
    "ForbiddenError",
    "InternalError",
    "NotFoundError",
    "UnauthorizedError",
    "ValidationError",
    "register_exception_handlers",
]
