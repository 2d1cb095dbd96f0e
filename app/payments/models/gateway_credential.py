"""
Versioned PhonePe gateway credentials.

Every change to merchant credentials is a new GatewayCredential row with
the next version number for its environment; rows are never edited.
ActiveGatewayCredential is a single-row pointer naming the row in use, so
switching credentials (or rolling back) is one pointer update.

Related files:
    - payments/gateway/config.py: resolves the pointer (or settings)
      into the GatewayConfig used by the adapter
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.models import BaseModel
from payments.state_machines import GatewayEnvironment


class GatewayCredential(BaseModel):
    """
    One version of a merchant credential set.

    Fields:
        environment: UAT or PROD
        merchant_id: PhonePe merchant id
        salt_key: Secret used for X-VERIFY signatures
        salt_index: Key index appended to signatures
        base_url: API base, e.g. https://api-preprod.phonepe.com/apis/pg-sandbox
        version: 1, 2, 3... per environment
    """

    environment = models.CharField(
        max_length=10,
        choices=GatewayEnvironment.choices,
        default=GatewayEnvironment.UAT,
    )
    merchant_id = models.CharField(max_length=64)
    salt_key = models.CharField(max_length=128)
    salt_index = models.PositiveSmallIntegerField(default=1)
    base_url = models.URLField(max_length=255)
    version = models.PositiveIntegerField(editable=False)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ["environment", "-version"]
        constraints = [
            models.UniqueConstraint(
                fields=["environment", "version"],
                name="gateway_credential_env_version_unique",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.merchant_id} ({self.environment} v{self.version})"

    @property
    def masked_salt_key(self) -> str:
        if len(self.salt_key) <= 4:
            return "****"
        return f"{'*' * (len(self.salt_key) - 4)}{self.salt_key[-4:]}"


class ActiveGatewayCredential(models.Model):
    """
    Pointer to the credential version currently in use.

    At most one row exists (pk is always 1).
    """

    SINGLETON_PK = 1

    id = models.PositiveSmallIntegerField(primary_key=True, default=SINGLETON_PK, editable=False)
    credential = models.ForeignKey(
        GatewayCredential,
        on_delete=models.PROTECT,
        related_name="+",
    )
    activated_at = models.DateTimeField(default=timezone.now)
    activated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        verbose_name = "Active gateway credential"

    def __str__(self) -> str:
        return f"Active: {self.credential}"
