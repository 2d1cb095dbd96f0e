"""
Abstract base model for the domain apps.

Every table carries created_at/updated_at. Catalog rows, entitlements,
payment records and attempt results all inherit from BaseModel; add
UUIDPrimaryKeyMixin (core.model_mixins) in front of it where the id is
exposed in URLs.
"""

from __future__ import annotations

from django.db import models


class BaseModel(models.Model):
    """
    created_at is indexed: payment history, dashboards and the pending
    reconciliation sweep all filter or sort on it.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when this record was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="Timestamp when this record was last modified",
    )

    class Meta:
        abstract = True
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(id={self.pk})"
