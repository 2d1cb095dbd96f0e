"""
Payments app configuration.

This app provides the payment ledger, the gateway callback reconciler and
the PhonePe gateway client.
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
