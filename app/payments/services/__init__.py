"""
Payment services.

This module provides:
- PaymentReconciler: order creation, callback reconciliation, status polls
- PaymentReportingService: payment history, the staff listing and dashboard
- GatewayCredentialService: versioned gateway credentials and the active pointer

Usage:
    from payments.services import PaymentReconciler

    result = PaymentReconciler.create_order(user, "category", category.id)
    if result.success:
        pay_url = result.data.pay_url

    # From the callback view, after verification
    result = PaymentReconciler.handle_callback(payload)
"""

from payments.services.credentials import GatewayCredentialService
from payments.services.reconciler import CallbackOutcome, OrderResult, PaymentReconciler
from payments.services.reporting import PaymentReportingService

__all__ = [
    "CallbackOutcome",
    "GatewayCredentialService",
    "OrderResult",
    "PaymentReconciler",
    "PaymentReportingService",
]
