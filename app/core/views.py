"""
Core views providing infrastructure endpoints and response helpers.

This module contains views that are not part of the business domain but are
essential for application infrastructure, such as health checks, plus the
shared helper that turns a failed ServiceResult into an API response.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import DatabaseError, connection
from django.http import JsonResponse
from rest_framework import status
from rest_framework.response import Response

if TYPE_CHECKING:
    from core.services import ServiceResult

# HTTP status per error code. Codes not listed here are treated as
# client errors (400).
ERROR_STATUS_MAP: dict[str, int] = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "PERMISSION_DENIED": status.HTTP_403_FORBIDDEN,
    "ALREADY_OWNED": status.HTTP_409_CONFLICT,
    "CONFLICT": status.HTTP_409_CONFLICT,
    "GATEWAY_TIMEOUT": status.HTTP_503_SERVICE_UNAVAILABLE,
    "GATEWAY_ERROR": status.HTTP_502_BAD_GATEWAY,
    "GATEWAY_NOT_CONFIGURED": status.HTTP_503_SERVICE_UNAVAILABLE,
    "INTERNAL_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def service_error_response(result: ServiceResult) -> Response:
    """
    Build a DRF Response for a failed service result.

    The body always carries ``error`` and ``error_code``; field errors and
    details are included when present.
    """
    body = {"error": result.error, "error_code": result.error_code}
    if result.errors:
        body["errors"] = result.errors
    if result.details:
        body["details"] = result.details
    return Response(
        body,
        status=ERROR_STATUS_MAP.get(result.error_code or "", status.HTTP_400_BAD_REQUEST),
    )


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    This endpoint is used by:
    - Docker health checks
    - Kubernetes liveness/readiness probes
    - Load balancers

    Returns:
        JsonResponse with status and component health:
        - status: "healthy" or "unhealthy"
        - database: "connected" or "disconnected"

    HTTP Status Codes:
        200: All systems operational
        503: Database unreachable
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
    }
    is_healthy = True

    # Check database connectivity
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except DatabaseError:
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"
        is_healthy = False

    status_code = 200 if is_healthy else 503

    return JsonResponse(health_status, status=status_code)
