"""
Webhook endpoint view for PhonePe callbacks.

The view:
1. Resolves the active gateway credential
2. Verifies the X-VERIFY signature and normalizes the body
3. Applies the result to the ledger (idempotent)
4. Acknowledges the gateway

PhonePe retries a callback until it gets a 2xx. Every business outcome
(settled, duplicate, unknown transaction, lost race) is acknowledged with
200 so retries stop; only a failed database write answers 500 so that the
gateway tries again.

Usage:
    # In urls.py
    from payments.webhooks.views import phonepe_callback

    urlpatterns = [
        path("webhooks/phonepe/", phonepe_callback, name="phonepe_callback"),
    ]
"""

from __future__ import annotations

import logging

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.exceptions import GatewayNotConfiguredError, InvalidCallbackError
from payments.gateway import parse_callback, resolve_gateway_config
from payments.services import PaymentReconciler

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def phonepe_callback(request: HttpRequest) -> JsonResponse:
    """
    Receive a PhonePe payment callback.

    Security:
    - X-VERIFY signature is required for every body shape
    - CSRF exemption required for external webhooks
    - Only POST requests accepted

    Returns:
        JsonResponse with status:
        - 200: Callback acknowledged (applied, duplicate, unknown or pending)
        - 400: Invalid signature or payload
        - 500: Ledger write failed; the gateway should retry
        - 503: Gateway credentials are not configured
    """
    try:
        config = resolve_gateway_config()
    except GatewayNotConfiguredError as e:
        return JsonResponse({"success": False, "error_code": e.error_code}, status=503)

    try:
        payload = parse_callback(request.body, request.headers.get("X-VERIFY", ""), config)
    except InvalidCallbackError as e:
        logger.warning(
            "Rejected PhonePe callback",
            extra={"error_code": e.error_code, "error": e.message},
        )
        return JsonResponse(
            {"success": False, "error_code": e.error_code, "error": e.message},
            status=400,
        )

    logger.info(
        f"Received PhonePe callback: {payload.code}",
        extra={"transaction_id": payload.transaction_id, "gateway_code": payload.code},
    )

    result = PaymentReconciler.handle_callback(payload)
    if result.success:
        return JsonResponse(
            {
                "success": True,
                "transaction_id": result.data.transaction_id,
                "status": result.data.status,
            },
            status=200,
        )

    status_code = 500 if result.error_code == "INTERNAL_ERROR" else 200
    return JsonResponse(
        {
            "success": False,
            "transaction_id": payload.transaction_id,
            "error_code": result.error_code,
        },
        status=status_code,
    )
