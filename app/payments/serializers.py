"""
DRF serializers for payments app.

This module provides serializers for:
- Order creation requests (with the legacy camelCase field names)
- Payment ledger rows and history filters
- The staff revenue dashboard
- Gateway credential management

Related files:
    - services/: PaymentReconciler, PaymentReportingService, GatewayCredentialService
    - views.py: Payment API views
"""

from __future__ import annotations

from rest_framework import serializers

from core.serializer_mixins import FieldAliasMixin
from payments.models import ActiveGatewayCredential, GatewayCredential, PaymentRecord
from payments.services.reporting import PERIOD_CUSTOM, PERIODS
from payments.state_machines import GatewayEnvironment, PaymentKind, PaymentStatus


# =============================================================================
# Orders
# =============================================================================


class CreateOrderSerializer(FieldAliasMixin, serializers.Serializer):
    """
    Order creation request.

    Accepts ``{"kind": "course", "target_id": 3}`` as well as the mobile
    client's ``{"paymentType": "course", "paymentForId": 3, "userId": 9}``.
    """

    field_aliases = {
        "paymentType": "kind",
        "paymentFor": "kind",
        "paymentForId": "target_id",
        "targetId": "target_id",
        "userId": "user_id",
    }

    kind = serializers.ChoiceField(choices=PaymentKind.choices)
    target_id = serializers.IntegerField(min_value=1)
    user_id = serializers.IntegerField(required=False)


class OrderResponseSerializer(serializers.Serializer):
    transaction_id = serializers.CharField()
    pay_url = serializers.CharField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    status = serializers.CharField(source="record.status")


class PaymentRecordSerializer(serializers.ModelSerializer):
    """Ledger row as shown to its owner."""

    class Meta:
        model = PaymentRecord
        fields = [
            "id",
            "transaction_id",
            "kind",
            "target_id",
            "amount",
            "currency",
            "status",
            "gateway_code",
            "pay_url",
            "failure_reason",
            "created_at",
            "completed_at",
        ]
        read_only_fields = fields


class PaymentHistoryFilterSerializer(FieldAliasMixin, serializers.Serializer):
    """Query string filters for the payment history endpoint."""

    field_aliases = {
        "paymentType": "kind",
        "paymentForId": "target_id",
        "targetId": "target_id",
    }

    kind = serializers.ChoiceField(choices=PaymentKind.choices, required=False)
    target_id = serializers.IntegerField(min_value=1, required=False)


class AdminPaymentRecordSerializer(PaymentRecordSerializer):
    """Ledger row with the buyer, for the staff listing."""

    user_id = serializers.IntegerField(read_only=True)
    user_email = serializers.EmailField(source="user.email", read_only=True)
    user_name = serializers.CharField(source="user.get_full_name", read_only=True)
    user_phone = serializers.CharField(source="user.phone", read_only=True)

    class Meta(PaymentRecordSerializer.Meta):
        fields = PaymentRecordSerializer.Meta.fields + [
            "user_id",
            "user_email",
            "user_name",
            "user_phone",
        ]
        read_only_fields = fields


class AllPaymentsFilterSerializer(FieldAliasMixin, serializers.Serializer):
    """
    Query string filters for the staff payment listing.

    ``filter`` picks a period (today, week, month, year or custom); a custom
    period needs both ``from`` and ``to``.
    """

    field_aliases = {
        "filter": "period",
        "from": "date_from",
        "to": "date_to",
        "paymentType": "kind",
    }

    search = serializers.CharField(required=False, allow_blank=True, max_length=200)
    period = serializers.ChoiceField(choices=PERIODS, required=False, allow_blank=True)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    kind = serializers.ChoiceField(choices=PaymentKind.choices, required=False)
    status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)

    def validate(self, attrs):
        if attrs.get("period") == PERIOD_CUSTOM:
            missing = [key for key in ("date_from", "date_to") if not attrs.get(key)]
            if missing:
                raise serializers.ValidationError(
                    {key: "Required for a custom period." for key in missing}
                )
            if attrs["date_from"] > attrs["date_to"]:
                raise serializers.ValidationError({"date_to": "Must not be before date_from."})
        return attrs


# =============================================================================
# Dashboard
# =============================================================================


class MonthlyRevenueSerializer(serializers.Serializer):
    month = serializers.IntegerField()
    course = serializers.DecimalField(max_digits=12, decimal_places=2)
    test = serializers.DecimalField(max_digits=12, decimal_places=2)
    category = serializers.DecimalField(max_digits=12, decimal_places=2)


class DashboardStatsSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    status_counts = serializers.DictField(child=serializers.IntegerField())
    monthly = MonthlyRevenueSerializer(many=True)


# =============================================================================
# Gateway credentials
# =============================================================================


class GatewayCredentialSerializer(serializers.ModelSerializer):
    """Credential version for listing; the salt key is never returned in full."""

    masked_salt_key = serializers.CharField(read_only=True)
    is_active = serializers.SerializerMethodField()

    class Meta:
        model = GatewayCredential
        fields = [
            "id",
            "environment",
            "merchant_id",
            "masked_salt_key",
            "salt_index",
            "base_url",
            "version",
            "is_active",
            "created_at",
        ]
        read_only_fields = fields

    def get_is_active(self, obj: GatewayCredential) -> bool:
        return obj.id == self.context.get("active_credential_id")


class GatewayCredentialCreateSerializer(serializers.Serializer):
    environment = serializers.ChoiceField(choices=GatewayEnvironment.choices)
    merchant_id = serializers.CharField(max_length=64)
    salt_key = serializers.CharField(max_length=128, write_only=True)
    salt_index = serializers.IntegerField(min_value=1, default=1)
    base_url = serializers.URLField(max_length=255)
    activate = serializers.BooleanField(default=False)


class ActiveGatewayCredentialSerializer(serializers.ModelSerializer):
    credential = GatewayCredentialSerializer(read_only=True)

    class Meta:
        model = ActiveGatewayCredential
        fields = ["credential", "activated_at"]
        read_only_fields = fields
