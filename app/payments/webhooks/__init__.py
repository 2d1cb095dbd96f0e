"""
Webhook handling for PhonePe server-to-server callbacks.

Callbacks are verified and normalized by payments.gateway, then applied
synchronously by PaymentReconciler.handle_callback.

Usage:
    # In urls.py
    from payments.webhooks.views import phonepe_callback

    urlpatterns = [
        path("webhooks/phonepe/", phonepe_callback, name="phonepe_callback"),
    ]
"""

from payments.webhooks.views import phonepe_callback

__all__ = ["phonepe_callback"]
