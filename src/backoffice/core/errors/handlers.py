"""Translate exceptions into the API error envelope.

Every error leaves the API as::

    {"status": "error", "message": "...", "error_code": "...", "path": "...",
     "request_id": "...", ...}

Client errors (4xx) also carry their details at the top level, e.g.
``resource`` for a 404, ``required_permissions`` for a 403 or ``errors``
(field-level problems) for a 400. Server errors never expose details.
"""

from typing import TYPE_CHECKING, Any, Literal, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from backoffice.core.errors.exceptions import AppException


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()


class FieldError(BaseModel):
    field: str
    message: str
    type: str | None = None


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    message: str
    error_code: str
    path: str | None = None
    errors: list[FieldError] | None = None
    request_id: str | None = None

    model_config = {"extra": "allow"}


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    error_code: str,
    errors: list[FieldError] | None = None,
    extra: dict[str, Any] | None = None,
) -> JSONResponse:
    content = ErrorResponse(
        message=message,
        error_code=error_code,
        path=request.url.path,
        errors=errors,
        request_id=getattr(request.state, "request_id", None),
    ).model_dump(exclude_none=True)
    for key, value in (extra or {}).items():
        content.setdefault(key, value)
    return JSONResponse(status_code=status_code, content=content)


def _field_errors(exc: RequestValidationError) -> list[FieldError]:
    """Flatten pydantic errors to dotted field paths (``items.0.quantity``)."""
    field_errors = []
    for error in exc.errors():
        # "body"/"query"/"path" only say where the field came from
        parts = [str(part) for part in error.get("loc", ())[1:]]
        field_errors.append(
            FieldError(
                field=".".join(parts) or "unknown",
                message=error.get("msg", "Invalid value"),
                type=error.get("type"),
            )
        )
    return field_errors


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "app_exception",
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        path=request.url.path,
        details=exc.details,
    )
    return _error_response(
        request,
        exc.status_code,
        exc.message,
        exc.error_code,
        extra=exc.public_details,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies and query strings are a 400, like any other validation failure."""
    errors = _field_errors(exc)
    logger.warning("validation_error", path=request.url.path, error_count=len(errors))
    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "Request validation failed",
        "validation_error",
        errors=errors,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the traceback, tell the client nothing about it."""
    logger.exception("unhandled_exception", path=request.url.path, error_type=type(exc).__name__)
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Something went wrong",
        "internal_error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, cast("ExceptionHandler", app_exception_handler))
    app.add_exception_handler(
        RequestValidationError, cast("ExceptionHandler", validation_exception_handler)
    )
    app.add_exception_handler(Exception, generic_exception_handler)
