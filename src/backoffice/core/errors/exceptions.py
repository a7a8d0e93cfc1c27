"""Back-office error taxonomy.

Services raise these at the point a rule is broken; the handlers in
``backoffice.core.errors.handlers`` turn them into the error envelope.
Five kinds exist and each maps to one HTTP status:

==================  ======  =============================================
UnauthorizedError   401     no principal, bad token, unknown user
ForbiddenError      403     the role/permission gate denied the principal
NotFoundError       404     missing, or owned by someone else
ValidationError     400     bad input, uniqueness, stock, order state
InternalError       500     the store failed underneath an operation
==================  ======  =============================================
"""

from typing import Any


class AppException(Exception):
    """Base exception for all back-office errors.

    Keyword arguments other than ``message``, ``error_code`` and ``details``
    are folded into ``details`` (``None`` values are dropped), so callers can
    write ``NotFoundError("Order not found", resource="order")``.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Extra context, surfaced to clients for non-5xx errors
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        **context: Any,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = dict(details or {})
        self.details.update({key: value for key, value in context.items() if value is not None})
        super().__init__(self.message)

    @property
    def public_details(self) -> dict[str, Any]:
        """Details safe to return to the client."""
        return self.details if self.status_code < 500 else {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.error_code!r}, {self.message!r})"


class UnauthorizedError(AppException):
    message = "Not authenticated"
    error_code = "unauthorized"
    status_code = 401


class ForbiddenError(AppException):
    """The principal is known but holds none of the accepted roles or permissions.

    Example:
        raise ForbiddenError(details={"required_permissions": ["user:delete"]})
    """

    message = "You do not have permission to perform this action"
    error_code = "forbidden"
    status_code = 403


class NotFoundError(AppException):
    """Missing resource, or one the principal may not see.

    Ownership failures use this too, so a wishlist or order id belonging to
    someone else reads exactly like an unknown id.

    Example:
        raise NotFoundError("Wishlist not found", resource="wishlist", resource_id=str(id))
    """

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404


class ValidationError(AppException):
    """Input or state rejected by a business rule.

    Field-level problems go in ``errors``, a list of ``{"field", "message"}``
    dicts, mirroring request-body validation failures.

    Example:
        raise ValidationError(
            "Email already in use",
            error_code="user_exists",
            errors=[{"field": "email", "message": "Email already in use"}],
        )
    """

    message = "Validation error"
    error_code = "validation_error"
    status_code = 400


class InternalError(AppException):
    """Raised when infrastructure fails underneath an operation.

    The message stays generic; callers log the underlying cause.
    """

    message = "Internal server error"
    error_code = "internal_error"
    status_code = 500
