"""
Assessments app configuration.
"""

from django.apps import AppConfig


class AssessmentsConfig(AppConfig):
    """Configuration for the assessments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "assessments"
    verbose_name = "Assessments"
