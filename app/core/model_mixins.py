"""
Abstract model mixins. List them before BaseModel in the bases.
"""

from __future__ import annotations

import uuid

from django.db import models


class UUIDPrimaryKeyMixin(models.Model):
    """
    Random UUID primary key.

    Used by PaymentRecord and TestAttemptResult, whose ids show up in
    URLs. Entitlement keeps the auto-increment id because insertion order
    breaks ties when picking the latest purchase.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    class Meta:
        abstract = True
