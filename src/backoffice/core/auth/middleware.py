"""Per-request context: request id and, when a token is sent, its user id.

Both are bound to the structlog context for the lifetime of the request so
every log line from the services carries them. The token is only peeked
at here; authentication itself happens in the route dependencies.
"""

import re
import uuid
from uuid import UUID

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from backoffice.core.auth.backend import decode_token


REQUEST_ID_HEADER = "X-Request-ID"

# Client-supplied ids are echoed back and logged, so only accept plain tokens
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


def _request_id(request: Request) -> str:
    supplied = request.headers.get(REQUEST_ID_HEADER, "")
    return supplied if _REQUEST_ID_PATTERN.match(supplied) else str(uuid.uuid4())


def _token_subject(request: Request) -> UUID | None:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    token_data = decode_token(token)
    return token_data.user_id if token_data else None


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = _request_id(request)
        request.state.request_id = request_id
        context: dict[str, str] = {"request_id": request_id}

        user_id = _token_subject(request)
        if user_id is not None:
            request.state.user_id = user_id
            context["user_id"] = str(user_id)

        with structlog.contextvars.bound_contextvars(**context):
            response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
