"""
Callback verification and normalization.

The gateway (and the proxies in front of it) deliver the same callback in
more than one shape. Everything is reduced here to a CallbackPayload, so
the reconciler only ever sees one shape.

Accepted bodies:
    {"response": "<base64 JSON>"}   X-VERIFY signs the base64 string
    {<gateway JSON>}                X-VERIFY signs the raw body

Both shapes must carry a valid X-VERIFY header.

Usage:
    from payments.gateway import parse_callback, resolve_gateway_config

    payload = parse_callback(request.body, request.headers.get("X-VERIFY", ""),
                             resolve_gateway_config())
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from payments.exceptions import InvalidCallbackError
from payments.gateway.phonepe import PENDING_CODES, SUCCESS_CODE, signature_matches

if TYPE_CHECKING:
    from payments.gateway.config import GatewayConfig
    from payments.gateway.phonepe import StatusResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallbackPayload:
    """
    Canonical gateway report for one transaction.

    Attributes:
        transaction_id: Merchant transaction id (PaymentRecord.transaction_id)
        code: Gateway response code
        gateway_reference: Gateway-side transaction id
        amount_minor: Amount reported by the gateway, in paise
        raw: Decoded gateway JSON, for audit logs
    """

    transaction_id: str
    code: str
    gateway_reference: str = ""
    amount_minor: int | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def success(self) -> bool:
        return self.code == SUCCESS_CODE

    @property
    def pending(self) -> bool:
        return self.code in PENDING_CODES

    @classmethod
    def from_status(cls, status: StatusResponse) -> CallbackPayload:
        """Build a payload from a status poll answer."""
        return cls(
            transaction_id=status.transaction_id,
            code=status.code,
            gateway_reference=status.gateway_reference,
            amount_minor=status.amount_minor,
            raw=status.raw_response,
        )


def _load_json(raw: bytes | str, what: str) -> dict[str, Any]:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError, UnicodeDecodeError):
        raise InvalidCallbackError(f"Callback {what} is not valid JSON") from None
    if not isinstance(data, dict):
        raise InvalidCallbackError(f"Callback {what} is not a JSON object")
    return data


def payload_from_gateway_json(data: dict[str, Any]) -> CallbackPayload:
    """
    Pull the canonical fields out of decoded gateway JSON.

    The merchant transaction id is read from ``data.merchantTransactionId``,
    then top-level ``merchantTransactionId``, then ``transactionId``.

    Raises:
        InvalidCallbackError: No transaction id or no code present
    """
    inner = data.get("data") if isinstance(data.get("data"), dict) else {}
    transaction_id = (
        inner.get("merchantTransactionId")
        or data.get("merchantTransactionId")
        or data.get("transactionId")
    )
    code = data.get("code") or inner.get("responseCode") or data.get("status")
    if not transaction_id or not code:
        raise InvalidCallbackError(
            "Callback is missing the transaction id or response code",
            details={"keys": sorted(data.keys())},
        )

    amount = inner.get("amount", data.get("amount"))
    return CallbackPayload(
        transaction_id=str(transaction_id),
        code=str(code),
        gateway_reference=str(inner.get("transactionId") or data.get("providerReferenceId") or ""),
        amount_minor=int(amount) if isinstance(amount, (int, float)) else None,
        raw=data,
    )


def parse_callback(body: bytes, x_verify: str, config: GatewayConfig) -> CallbackPayload:
    """
    Verify and decode a callback body.

    Raises:
        InvalidCallbackError: Bad JSON, bad base64, missing fields or a
            signature that does not match
    """
    outer = _load_json(body, "body")

    encoded = outer.get("response")
    if isinstance(encoded, str):
        signed_message = encoded
        try:
            decoded = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            raise InvalidCallbackError("Callback response is not valid base64") from None
        data = _load_json(decoded, "response")
    else:
        signed_message = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
        data = outer

    if not signature_matches(signed_message, x_verify, config):
        logger.warning(
            "Callback signature verification failed",
            extra={"credential_source": config.source, "has_signature": bool(x_verify)},
        )
        raise InvalidCallbackError("Callback signature verification failed", error_code="INVALID_SIGNATURE")

    return payload_from_gateway_json(data)
