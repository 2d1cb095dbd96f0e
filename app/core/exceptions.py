"""
Domain exceptions shared by every app.

Services raise these for business-rule failures and convert them to a
ServiceResult at their boundary (``ServiceResult.from_exception``); views
turn the error code into an HTTP status with ``core.views.service_error_response``.

Hierarchy:
    BaseApplicationError
    ├── ValidationError        400  bad input, non-positive price, unknown kind
    ├── NotFoundError          404  missing or inactive course/test/category
    ├── PermissionDeniedError  403  acting on another learner's data
    └── ConflictError          409  already owned, lost a concurrent transition

App-specific subclasses live next to their app (payments/exceptions.py).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Error with a machine-readable code and optional context.

    Attributes:
        message: Text safe to show to the API client
        error_code: Stable code clients switch on (defaults per subclass)
        details: Extra context such as ids; always a dict

    Example:
        raise NotFoundError(f"Course {course_id} not found", details={"course_id": course_id})
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Response body in the same shape as service_error_response."""
        body: dict[str, Any] = {"error": self.message, "error_code": self.error_code}
        if self.details:
            body["details"] = self.details
        return body

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, error_code={self.error_code!r})"


class ValidationError(BaseApplicationError):
    """
    Service-level input errors.

    Serializer field errors stay with DRF; this covers rules only a service
    can check, e.g. ``INVALID_AMOUNT`` for a course priced at zero or
    ``INVALID_KIND`` for an unsupported purchase kind.
    """

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    default_error_code: str = "NOT_FOUND"


class PermissionDeniedError(BaseApplicationError):
    """Authenticated, but not allowed to act on this learner's data."""

    default_error_code: str = "PERMISSION_DENIED"


class ConflictError(BaseApplicationError):
    """The request is valid but clashes with current state (HTTP 409)."""

    default_error_code: str = "CONFLICT"
