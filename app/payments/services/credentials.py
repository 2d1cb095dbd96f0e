"""
Versioned gateway credential management.

Credentials are append-only: saving new merchant details creates the next
version for that environment, and activation moves the single pointer row.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import IntegrityError
from django.db.models import QuerySet
from django.utils import timezone

from core.services import BaseService, ServiceResult
from payments.models import ActiveGatewayCredential, GatewayCredential

if TYPE_CHECKING:
    from authentication.models import User


class GatewayCredentialService(BaseService):
    """Create, list and activate gateway credential versions."""

    @classmethod
    def list_credentials(cls, environment: str | None = None) -> QuerySet[GatewayCredential]:
        queryset = GatewayCredential.objects.all()
        if environment:
            queryset = queryset.filter(environment=environment)
        return queryset

    @classmethod
    def active(cls) -> ActiveGatewayCredential | None:
        return ActiveGatewayCredential.objects.select_related("credential").first()

    @classmethod
    def create_credential(
        cls,
        *,
        environment: str,
        merchant_id: str,
        salt_key: str,
        salt_index: int,
        base_url: str,
        created_by: User | None = None,
        activate: bool = False,
    ) -> ServiceResult[GatewayCredential]:
        """
        Store a new credential version.

        The version is one more than the highest stored for the
        environment. Two concurrent saves for the same environment collide
        on the (environment, version) constraint; the loser gets CONFLICT.

        Args:
            activate: Also point the active credential at the new version
        """
        logger = cls.get_logger()
        try:
            with cls.atomic():
                latest = (
                    GatewayCredential.objects.select_for_update()
                    .filter(environment=environment)
                    .order_by("-version")
                    .first()
                )
                credential = GatewayCredential.objects.create(
                    environment=environment,
                    merchant_id=merchant_id,
                    salt_key=salt_key,
                    salt_index=salt_index,
                    base_url=base_url,
                    version=latest.version + 1 if latest else 1,
                    created_by=created_by,
                )
        except IntegrityError:
            logger.warning(f"Concurrent credential save for {environment}")
            return ServiceResult.failure(
                "Another credential version was saved at the same time. Please retry.",
                error_code="CONFLICT",
            )

        logger.info(
            f"Stored gateway credential {environment} v{credential.version}",
            extra={"credential_id": credential.id, "created_by": getattr(created_by, "id", None)},
        )

        if activate:
            result = cls.activate(credential.id, activated_by=created_by)
            if not result.success:
                return ServiceResult.failure(result.error, result.error_code)
        return ServiceResult.success(credential)

    @classmethod
    def activate(
        cls,
        credential_id: int,
        activated_by: User | None = None,
    ) -> ServiceResult[ActiveGatewayCredential]:
        """Point the gateway at a stored credential version (also used for rollback)."""
        credential = GatewayCredential.objects.filter(pk=credential_id).first()
        if credential is None:
            return ServiceResult.failure(
                f"Gateway credential {credential_id} not found",
                error_code="NOT_FOUND",
            )

        active, _ = ActiveGatewayCredential.objects.update_or_create(
            pk=ActiveGatewayCredential.SINGLETON_PK,
            defaults={
                "credential": credential,
                "activated_at": timezone.now(),
                "activated_by": activated_by,
            },
        )
        cls.get_logger().info(
            f"Activated gateway credential {credential}",
            extra={"credential_id": credential.id, "activated_by": getattr(activated_by, "id", None)},
        )
        return ServiceResult.success(active)
