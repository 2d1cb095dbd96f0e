"""
PhonePe API adapter for payment operations.

All PhonePe calls go through PhonePeAdapter to get consistent error
handling, timeouts and structured logging.

Signing (X-VERIFY header):
    pay:      sha256(base64_body + "/pg/v1/pay" + salt_key) + "###" + salt_index
    status:   sha256("/pg/v1/status/{merchantId}/{txnId}" + salt_key) + "###" + salt_index
    callback: sha256(base64_response + salt_key) + "###" + salt_index

Configuration (via settings):
- PHONEPE_API_TIMEOUT_SECONDS: HTTP timeout for every call (default: 10)

Usage:
    from payments.gateway import PayRequest, PhonePeAdapter, resolve_gateway_config

    config = resolve_gateway_config()
    response = PhonePeAdapter.initiate_payment(
        config,
        PayRequest(transaction_id="TXN-...", user_id=42, amount_minor=99900),
    )
    redirect_to(response.pay_url)
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import requests
from django.conf import settings

from payments.exceptions import (
    GatewayRejectedError,
    GatewayTimeoutError,
    GatewayUnavailableError,
)

if TYPE_CHECKING:
    from payments.gateway.config import GatewayConfig


PAY_PATH = "/pg/v1/pay"
STATUS_PATH = "/pg/v1/status/{merchant_id}/{transaction_id}"

SUCCESS_CODE = "PAYMENT_SUCCESS"
PENDING_CODES = frozenset({"PAYMENT_PENDING", "INTERNAL_SERVER_ERROR"})


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class PayRequest:
    """
    Parameters for a hosted-page payment.

    Attributes:
        transaction_id: Merchant transaction id (our PaymentRecord id)
        user_id: Buyer, sent as merchantUserId
        amount_minor: Amount in paise
        mobile_number: Buyer phone, prefilled on the pay page when known
    """

    transaction_id: str
    user_id: int
    amount_minor: int
    mobile_number: str = ""

    def __post_init__(self) -> None:
        if self.amount_minor <= 0:
            raise ValueError("amount_minor must be positive")
        if not self.transaction_id:
            raise ValueError("transaction_id is required")


@dataclass
class PayResponse:
    transaction_id: str
    pay_url: str
    code: str = ""
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class StatusResponse:
    """
    Result of a status poll.

    Attributes:
        transaction_id: Merchant transaction id
        code: Gateway response code (PAYMENT_SUCCESS, PAYMENT_ERROR, ...)
        state: Gateway state (COMPLETED, FAILED, PENDING)
        gateway_reference: Gateway-side transaction id
        amount_minor: Amount in paise, if reported
    """

    transaction_id: str
    code: str
    state: str = ""
    gateway_reference: str = ""
    amount_minor: int | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.code == SUCCESS_CODE

    @property
    def is_pending(self) -> bool:
        return self.code in PENDING_CODES or self.state == "PENDING"


# =============================================================================
# Signing
# =============================================================================


def sign(message: str, config: GatewayConfig) -> str:
    """Build an X-VERIFY value for ``message`` (path/body already concatenated)."""
    digest = hashlib.sha256(f"{message}{config.salt_key}".encode()).hexdigest()
    return f"{digest}###{config.salt_index}"


def signature_matches(message: str, x_verify: str, config: GatewayConfig) -> bool:
    """Constant-time comparison of a received X-VERIFY against the expected one."""
    if not x_verify:
        return False
    return hmac.compare_digest(sign(message, config), x_verify.strip())


def encode_payload(payload: dict[str, Any]) -> str:
    return base64.b64encode(json.dumps(payload, separators=(",", ":")).encode()).decode()


# =============================================================================
# PhonePe Adapter
# =============================================================================


class PhonePeAdapter:
    """
    Adapter for PhonePe PG API operations.

    All methods are class methods; no instance state is kept. Every call
    takes the GatewayConfig explicitly so credential rotation between
    calls is safe.
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @staticmethod
    def _timeout() -> float:
        return float(getattr(settings, "PHONEPE_API_TIMEOUT_SECONDS", 10))

    # =========================================================================
    # Core Operations
    # =========================================================================

    @classmethod
    def initiate_payment(cls, config: GatewayConfig, request: PayRequest) -> PayResponse:
        """
        Create a hosted payment page for an order.

        Returns:
            PayResponse with the URL to redirect the user to

        Raises:
            GatewayRejectedError: Gateway answered success=false or an
                unusable body
            GatewayUnavailableError: Connection failure or 5xx
            GatewayTimeoutError: No answer within the timeout
        """
        body = {
            "merchantId": config.merchant_id,
            "merchantTransactionId": request.transaction_id,
            "merchantUserId": str(request.user_id),
            "amount": request.amount_minor,
            "redirectUrl": cls._with_txn(config.redirect_url, request.transaction_id),
            "redirectMode": "REDIRECT",
            "callbackUrl": config.callback_url,
            "paymentInstrument": {"type": "PAY_PAGE"},
        }
        if request.mobile_number:
            body["mobileNumber"] = request.mobile_number
        encoded = encode_payload(body)

        log_context = {
            "operation": "initiate_payment",
            "transaction_id": request.transaction_id,
            "amount_minor": request.amount_minor,
            "credential_source": config.source,
        }
        data = cls._send(
            "POST",
            f"{config.base_url}{PAY_PATH}",
            headers={
                "Content-Type": "application/json",
                "X-VERIFY": sign(f"{encoded}{PAY_PATH}", config),
            },
            json_body={"request": encoded},
            log_context=log_context,
        )

        if not data.get("success"):
            cls.get_logger().warning(
                "PhonePe rejected payment request",
                extra={**log_context, "gateway_code": data.get("code")},
            )
            raise GatewayRejectedError(
                data.get("message") or "Payment gateway rejected the request",
                gateway_code=data.get("code"),
            )

        try:
            pay_url = data["data"]["instrumentResponse"]["redirectInfo"]["url"]
        except (KeyError, TypeError):
            raise GatewayRejectedError(
                "Payment gateway response has no redirect URL",
                gateway_code=data.get("code"),
            ) from None

        return PayResponse(
            transaction_id=request.transaction_id,
            pay_url=pay_url,
            code=data.get("code", ""),
            raw_response=data,
        )

    @classmethod
    def check_status(cls, config: GatewayConfig, transaction_id: str) -> StatusResponse:
        """
        Poll the gateway for the state of one transaction.

        Raises:
            GatewayUnavailableError: Connection failure or 5xx
            GatewayTimeoutError: No answer within the timeout
        """
        path = STATUS_PATH.format(merchant_id=config.merchant_id, transaction_id=transaction_id)
        data = cls._send(
            "GET",
            f"{config.base_url}{path}",
            headers={
                "Content-Type": "application/json",
                "X-VERIFY": sign(path, config),
                "X-MERCHANT-ID": config.merchant_id,
            },
            log_context={
                "operation": "check_status",
                "transaction_id": transaction_id,
                "credential_source": config.source,
            },
        )
        inner = data.get("data") or {}
        return StatusResponse(
            transaction_id=inner.get("merchantTransactionId") or transaction_id,
            code=data.get("code", ""),
            state=inner.get("state", ""),
            gateway_reference=inner.get("transactionId") or "",
            amount_minor=inner.get("amount"),
            raw_response=data,
        )

    # =========================================================================
    # Transport
    # =========================================================================

    @staticmethod
    def _with_txn(redirect_url: str, transaction_id: str) -> str:
        if not redirect_url:
            return ""
        separator = "&" if "?" in redirect_url else "?"
        return f"{redirect_url}{separator}txnId={transaction_id}"

    @classmethod
    def _send(
        cls,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        log_context: dict[str, Any],
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Perform one HTTP call and return the decoded JSON body.

        4xx answers are returned as-is (PhonePe reports business errors
        in the body); transport failures and 5xx are translated.
        """
        logger = cls.get_logger()
        start_time = time.time()
        logger.info("Starting PhonePe operation", extra=log_context)

        try:
            response = requests.request(
                method,
                url,
                headers=headers,
                json=json_body,
                timeout=cls._timeout(),
            )
        except requests.Timeout as e:
            logger.warning(
                "PhonePe request timed out",
                extra={**log_context, "duration_ms": (time.time() - start_time) * 1000},
            )
            raise GatewayTimeoutError("Payment gateway timed out. Please retry.") from e
        except requests.RequestException as e:
            logger.error(
                "Connection error to PhonePe",
                extra={**log_context, "duration_ms": (time.time() - start_time) * 1000},
                exc_info=True,
            )
            raise GatewayUnavailableError("Payment gateway is unavailable. Please retry.") from e

        duration_ms = (time.time() - start_time) * 1000
        if response.status_code >= 500:
            logger.error(
                "PhonePe server error",
                extra={**log_context, "http_status": response.status_code, "duration_ms": duration_ms},
            )
            raise GatewayUnavailableError(
                f"Payment gateway returned HTTP {response.status_code}",
                details={"http_status": response.status_code},
            )

        try:
            data = response.json()
        except ValueError:
            raise GatewayRejectedError(
                "Payment gateway returned a non-JSON response",
                details={"http_status": response.status_code},
            ) from None

        logger.info(
            "PhonePe operation completed",
            extra={
                **log_context,
                "http_status": response.status_code,
                "gateway_code": data.get("code") if isinstance(data, dict) else None,
                "duration_ms": duration_ms,
            },
        )
        if not isinstance(data, dict):
            raise GatewayRejectedError("Payment gateway returned an unexpected body")
        return data
