"""
Entitlements app configuration.
"""

from django.apps import AppConfig


class EntitlementsConfig(AppConfig):
    """Configuration for the entitlements application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "entitlements"
    verbose_name = "Entitlements"
