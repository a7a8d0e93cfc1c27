"""structlog configuration and per-request access logging."""

import logging
import time
from typing import Any

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint


logger = structlog.get_logger()

# Health checks and docs are polled constantly and carry no business context
QUIET_PATH_PREFIXES = ("/health/", "/docs", "/redoc", "/openapi.json")


def configure_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structlog for the whole process.

    Args:
        log_level: Minimum level name, e.g. "INFO" or "DEBUG"
        json_logs: Render JSON lines instead of the console format
    """
    level = logging.getLevelName(log_level.upper())
    renderer: Any = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _route_template(request: Request) -> str:
    """``/api/v1/orders/{order_id}`` rather than the concrete path, when routing matched."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


def _level_for(status_code: int) -> str:
    if status_code >= 500:
        return "error"
    if status_code >= 400:
        return "warning"
    return "info"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log start and completion of every API request.

    ``request_id`` and ``user_id`` come from the structlog context bound by
    ``RequestIdMiddleware``, so they are not repeated here.
    """

    def __init__(self, app: Any, quiet_prefixes: tuple[str, ...] = QUIET_PATH_PREFIXES) -> None:
        super().__init__(app)
        self.quiet_prefixes = quiet_prefixes

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path.startswith(self.quiet_prefixes):
            return await call_next(request)

        log = logger.bind(method=request.method, path=request.url.path)
        log.info(
            "request_started",
            query=str(request.url.query) or None,
            client_ip=request.client.host if request.client else None,
        )
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            log.exception("request_failed", duration_ms=_elapsed_ms(started))
            raise

        getattr(log, _level_for(response.status_code))(
            "request_completed",
            route=_route_template(request),
            status_code=response.status_code,
            duration_ms=_elapsed_ms(started),
        )
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
