"""
Gateway configuration resolution.

Reads always go through the active pointer:
ActiveGatewayCredential -> GatewayCredential. When no pointer exists the
PHONEPE_* settings are used, so a fresh deployment works from env vars.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.conf import settings

from payments.exceptions import GatewayNotConfiguredError
from payments.models import ActiveGatewayCredential

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayConfig:
    """
    Credentials and endpoints for one gateway call.

    Attributes:
        merchant_id: PhonePe merchant id
        salt_key: Secret for X-VERIFY signatures
        salt_index: Key index appended after "###"
        base_url: API base without trailing slash
        redirect_url: Where the hosted page sends the user afterwards
        callback_url: Where the gateway posts the server-to-server callback
        source: "credential:v<N>" or "settings", for logs
    """

    merchant_id: str
    salt_key: str
    salt_index: int
    base_url: str
    redirect_url: str = ""
    callback_url: str = ""
    source: str = "settings"

    def __repr__(self) -> str:
        return (
            f"GatewayConfig(merchant_id={self.merchant_id!r}, "
            f"base_url={self.base_url!r}, source={self.source!r})"
        )


def resolve_gateway_config() -> GatewayConfig:
    """
    Return the configuration to use for the next gateway call.

    Raises:
        GatewayNotConfiguredError: No active credential and the
            PHONEPE_MERCHANT_ID / PHONEPE_SALT_KEY settings are empty
    """
    redirect_url = getattr(settings, "PHONEPE_REDIRECT_URL", "")
    callback_url = getattr(settings, "PHONEPE_CALLBACK_URL", "")

    active = ActiveGatewayCredential.objects.select_related("credential").first()
    if active is not None:
        credential = active.credential
        return GatewayConfig(
            merchant_id=credential.merchant_id,
            salt_key=credential.salt_key,
            salt_index=credential.salt_index,
            base_url=credential.base_url.rstrip("/"),
            redirect_url=redirect_url,
            callback_url=callback_url,
            source=f"credential:v{credential.version}",
        )

    merchant_id = getattr(settings, "PHONEPE_MERCHANT_ID", "")
    salt_key = getattr(settings, "PHONEPE_SALT_KEY", "")
    if not merchant_id or not salt_key:
        logger.error("PhonePe gateway is not configured")
        raise GatewayNotConfiguredError("Payment gateway is not configured")

    return GatewayConfig(
        merchant_id=merchant_id,
        salt_key=salt_key,
        salt_index=int(getattr(settings, "PHONEPE_SALT_INDEX", 1)),
        base_url=getattr(settings, "PHONEPE_BASE_URL", "").rstrip("/"),
        redirect_url=redirect_url,
        callback_url=callback_url,
    )
