"""
Payment-specific exceptions for payment operations.

This module provides a hierarchy of exceptions for the payment ledger,
the callback reconciler and the PhonePe gateway client.

Exception Hierarchy:
    PaymentError (base for payment domain)
    ├── InvalidAmountError - Resolved price is not positive
    ├── InvalidCallbackError - Callback could not be verified or parsed
    └── GatewayError - Base for all gateway errors
        ├── GatewayRejectedError - Gateway refused the request (permanent)
        ├── GatewayNotConfiguredError - No usable credentials (permanent)
        ├── GatewayUnavailableError - Connection/5xx failures (transient, retry)
        └── GatewayTimeoutError - Request timed out (transient, retry)

    AlreadyOwnedError - Repeat purchase of an owned item (inherits ConflictError)

Usage:
    from payments.exceptions import GatewayError, InvalidCallbackError

    try:
        response = PhonePeAdapter.initiate_payment(request)
    except GatewayError as e:
        if e.is_retryable:
            ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError, ConflictError

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Payment Domain Exceptions
# =============================================================================


class PaymentError(BaseApplicationError):
    """
    Base exception for all payment operations.

    All payment-specific exceptions inherit from this class,
    which itself inherits from BaseApplicationError for
    consistent API error responses.
    """

    default_error_code: str = "PAYMENT_ERROR"


class InvalidAmountError(PaymentError):
    """
    Raised when the price resolved for an order is not positive.

    Example:
        if amount <= 0:
            raise InvalidAmountError(
                "Resolved price must be greater than zero",
                details={"amount": str(amount)}
            )
    """

    default_error_code: str = "INVALID_AMOUNT"


class InvalidCallbackError(PaymentError):
    """
    Raised when a gateway callback fails verification or parsing.

    The callback view answers 400 for these; nothing is written.
    """

    default_error_code: str = "INVALID_CALLBACK"


class AlreadyOwnedError(ConflictError):
    """
    Raised when a user tries to buy a category they already own.

    HTTP 409 Conflict.
    """

    default_error_code: str = "ALREADY_OWNED"


# =============================================================================
# Gateway Exceptions
# =============================================================================


class GatewayError(PaymentError):
    """
    Base exception for all payment gateway errors.

    Provides common attributes for gateway error handling:
    - gateway_code: The gateway's own response code, when it sent one
    - is_retryable: Whether the operation can be retried

    Use is_retryable to determine retry behavior:
    - True: Transient error, safe to retry with backoff
    - False: Permanent error, do not retry

    Example:
        try:
            PhonePeAdapter.check_status(credentials, txn)
        except GatewayError as e:
            if e.is_retryable:
                raise self.retry(exc=e)
    """

    default_error_code: str = "GATEWAY_ERROR"
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        gateway_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if gateway_code:
            details["gateway_code"] = gateway_code
        super().__init__(message, error_code=error_code, details=details)
        self.gateway_code = gateway_code


# -----------------------------------------------------------------------------
# Permanent Errors (do not retry)
# -----------------------------------------------------------------------------


class GatewayRejectedError(GatewayError):
    """
    The gateway answered but refused the request (success=false).

    The order stays pending; it is closed later by a callback or by the
    status poll.
    """

    default_error_code: str = "GATEWAY_ERROR"
    is_retryable: bool = False


class GatewayNotConfiguredError(GatewayError):
    """No active credential and no settings fallback."""

    default_error_code: str = "GATEWAY_NOT_CONFIGURED"
    is_retryable: bool = False


# -----------------------------------------------------------------------------
# Transient Errors (safe to retry with backoff)
# -----------------------------------------------------------------------------


class GatewayUnavailableError(GatewayError):
    """
    The gateway could not be reached or answered with a server error.

    Covers connection errors, DNS failures and 5xx responses.
    """

    default_error_code: str = "GATEWAY_ERROR"
    is_retryable: bool = True


class GatewayTimeoutError(GatewayError):
    """
    Gateway call timed out (PHONEPE_API_TIMEOUT_SECONDS).

    The request may have been accepted on the gateway's side; the
    pending record is reconciled by callback or status poll.
    """

    default_error_code: str = "GATEWAY_TIMEOUT"
    is_retryable: bool = True
