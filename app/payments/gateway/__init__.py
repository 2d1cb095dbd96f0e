"""
PhonePe payment gateway client.

Modules:
    config: Resolve the active credential (or settings) into a GatewayConfig
    phonepe: Signed HTTP calls (pay, status) and signature helpers
    normalization: Verify and decode callback bodies into CallbackPayload
"""

from payments.gateway.config import GatewayConfig, resolve_gateway_config
from payments.gateway.normalization import CallbackPayload, parse_callback
from payments.gateway.phonepe import PayRequest, PayResponse, PhonePeAdapter, StatusResponse

__all__ = [
    "CallbackPayload",
    "GatewayConfig",
    "PayRequest",
    "PayResponse",
    "PhonePeAdapter",
    "StatusResponse",
    "parse_callback",
    "resolve_gateway_config",
]
