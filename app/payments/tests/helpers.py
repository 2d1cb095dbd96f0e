"""
Builders for fake PhonePe traffic.

Gateway HTTP calls are faked by patching ``requests.request`` in
payments.gateway.phonepe; callbacks are built and signed with the same
helpers the production code verifies with.
"""

from __future__ import annotations

import base64
import json
from typing import Any
from unittest.mock import MagicMock

from payments.gateway.phonepe import encode_payload, sign

GATEWAY_REQUEST = "payments.gateway.phonepe.requests.request"


def http_response(body: Any, status_code: int = 200) -> MagicMock:
    """A stand-in for requests.Response carrying a JSON body."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    return response


def pay_page_response(transaction_id: str, url: str = "https://pay.test/hosted/abc") -> MagicMock:
    return http_response(
        {
            "success": True,
            "code": "PAYMENT_INITIATED",
            "message": "Payment initiated",
            "data": {
                "merchantId": "MERCHANTUAT",
                "merchantTransactionId": transaction_id,
                "instrumentResponse": {
                    "type": "PAY_PAGE",
                    "redirectInfo": {"url": url, "method": "GET"},
                },
            },
        }
    )


def status_response(
    transaction_id: str,
    code: str = "PAYMENT_SUCCESS",
    state: str = "COMPLETED",
    amount_minor: int = 99900,
) -> MagicMock:
    return http_response(
        {
            "success": code == "PAYMENT_SUCCESS",
            "code": code,
            "message": code,
            "data": {
                "merchantId": "MERCHANTUAT",
                "merchantTransactionId": transaction_id,
                "transactionId": f"T{transaction_id[-10:]}",
                "amount": amount_minor,
                "state": state,
                "responseCode": "SUCCESS" if code == "PAYMENT_SUCCESS" else code,
            },
        }
    )


def gateway_json(
    transaction_id: str,
    code: str = "PAYMENT_SUCCESS",
    amount_minor: int = 99900,
) -> dict[str, Any]:
    """Decoded callback JSON as PhonePe sends it."""
    return {
        "success": code == "PAYMENT_SUCCESS",
        "code": code,
        "message": "Your payment is successful." if code == "PAYMENT_SUCCESS" else "Payment failed",
        "data": {
            "merchantId": "MERCHANTUAT",
            "merchantTransactionId": transaction_id,
            "transactionId": "T2607181234567890",
            "amount": amount_minor,
            "state": "COMPLETED" if code == "PAYMENT_SUCCESS" else "FAILED",
            "responseCode": "SUCCESS" if code == "PAYMENT_SUCCESS" else code,
        },
    }


def signed_callback(config, data: dict[str, Any]) -> tuple[bytes, str]:
    """Encode ``data`` the way PhonePe does and return (body, X-VERIFY)."""
    encoded = encode_payload(data)
    return json.dumps({"response": encoded}).encode(), sign(encoded, config)


def signed_raw_callback(config, data: dict[str, Any]) -> tuple[bytes, str]:
    """Plain JSON body (proxy-forwarded shape) with its X-VERIFY."""
    body = json.dumps(data)
    return body.encode(), sign(body, config)


def decode_pay_request(mock_request: MagicMock) -> dict[str, Any]:
    """The pay request body sent in the last faked gateway call."""
    encoded = mock_request.call_args.kwargs["json"]["request"]
    return json.loads(base64.b64decode(encoded))
