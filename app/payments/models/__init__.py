"""
Payment domain models.

This module contains all payment-related models:
- PaymentRecord: Ledger row for one order, pending until the gateway answers
- GatewayCredential: Versioned PhonePe merchant credentials
- ActiveGatewayCredential: Single-row pointer to the credential in use
"""

from payments.models.gateway_credential import ActiveGatewayCredential, GatewayCredential
from payments.models.payment_record import PaymentRecord

__all__ = [
    "ActiveGatewayCredential",
    "GatewayCredential",
    "PaymentRecord",
]
