"""
Service layer building blocks.

Business logic lives in classmethod-only services (PaymentReconciler,
EntitlementService, ScoringService, ...). Expected failures come back as a
ServiceResult carrying an error code; views translate that code with
core.views.service_error_response. Programming errors are left to raise.

Usage:
    class ScoringService(BaseService):
        @classmethod
        def submit(cls, user, submission) -> ServiceResult[TestAttemptResult]:
            try:
                test = CatalogService.get_test(submission.test_id)
            except NotFoundError as e:
                return ServiceResult.from_exception(e)

            with cls.atomic():
                result = TestAttemptResult.objects.create(...)
            return ServiceResult.success(result)

    result = ScoringService.submit(request.user, submission)
    if not result:
        return service_error_response(result)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Outcome of a service call.

    Attributes:
        success: Whether the operation succeeded
        data: Payload on success
        error: Client-safe message on failure
        error_code: Stable code mapped to an HTTP status by the views
        errors: Field-level messages, when the failure is about specific inputs
        details: Extra context, e.g. the transaction_id of an order that
            stayed pending after a gateway error
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)
    details: dict[str, Any] | None = field(default=None)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
        details: dict[str, Any] | None = None,
    ) -> ServiceResult[T]:
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            errors=errors,
            details=details,
        )

    @classmethod
    def from_exception(cls, exc: Exception, error_code: str | None = None) -> ServiceResult[T]:
        """
        Failed result built from a caught exception.

        Application errors keep their code and details; anything else is
        reported under its upper-cased class name unless ``error_code`` is
        given.
        """
        if isinstance(exc, BaseApplicationError):
            return cls(
                success=False,
                error=exc.message,
                error_code=error_code or exc.error_code,
                details=exc.details or None,
            )
        return cls(
            success=False,
            error=str(exc),
            error_code=error_code or exc.__class__.__name__.upper(),
        )

    def to_response(self) -> dict[str, Any]:
        """Envelope used by task results and management commands."""
        if self.success:
            return {"success": True, "data": self.data}

        response: dict[str, Any] = {"success": False, "error": self.error}
        if self.error_code:
            response["error_code"] = self.error_code
        if self.errors:
            response["errors"] = self.errors
        if self.details:
            response["details"] = self.details
        return response

    def __bool__(self) -> bool:
        return self.success


class BaseService:
    """
    Stateless base for service classes: per-service logger, transaction
    helper, and a single place to log-and-convert unexpected errors.
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Logger named ``<module>.<ServiceClass>``."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        transaction.atomic() under a service-friendly name; nesting makes a
        savepoint.

        Example:
            with cls.atomic():
                record.mark_success(...)
                record.save()
                EntitlementService.grant_test(...)
        """
        with transaction.atomic():
            yield

    @classmethod
    def handle_exception(
        cls,
        exc: Exception,
        context: str = "",
        error_code: str | None = None,
        message: str | None = None,
        extra: dict[str, Any] | None = None,
        log_level: int = logging.ERROR,
    ) -> ServiceResult:
        """
        Log ``exc`` and convert it to a failed ServiceResult.

        Args:
            exc: The caught exception
            context: Prefix for the log line, e.g. "Failed to apply callback"
            error_code: Code for the result (defaults per from_exception)
            message: Client-safe message replacing the exception text
            extra: Structured logging context
            log_level: ERROR and above also log the traceback
        """
        cls.get_logger().log(
            log_level,
            f"{context}: {exc}" if context else str(exc),
            extra=extra,
            exc_info=log_level >= logging.ERROR,
        )
        result = ServiceResult.from_exception(exc, error_code=error_code)
        if message is not None:
            result.error = message
        return result
