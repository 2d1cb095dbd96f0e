"""
Payment admin configuration.

Payment records are read-only here: status only changes through the
reconciler. Credential versions are append-only.
"""

from django.contrib import admin

from payments.models import ActiveGatewayCredential, GatewayCredential, PaymentRecord


@admin.register(PaymentRecord)
class PaymentRecordAdmin(admin.ModelAdmin):
    """
    Admin configuration for PaymentRecord.

    Provides visibility into orders and how the gateway settled them.
    """

    list_display = [
        "transaction_id",
        "user",
        "kind",
        "target_id",
        "amount",
        "status",
        "gateway_code",
        "created_at",
        "completed_at",
    ]
    list_filter = ["status", "kind", "created_at"]
    search_fields = ["transaction_id", "gateway_reference", "user__email"]
    readonly_fields = [field.name for field in PaymentRecord._meta.fields]
    ordering = ["-created_at"]
    date_hierarchy = "created_at"

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(GatewayCredential)
class GatewayCredentialAdmin(admin.ModelAdmin):
    list_display = ["merchant_id", "environment", "version", "salt_index", "created_at"]
    list_filter = ["environment"]
    readonly_fields = ["version", "created_by", "created_at", "updated_at"]
    exclude = ["salt_key"]

    def has_add_permission(self, request):
        # New versions go through GatewayCredentialService so numbering stays sequential
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(ActiveGatewayCredential)
class ActiveGatewayCredentialAdmin(admin.ModelAdmin):
    list_display = ["credential", "activated_at", "activated_by"]
    readonly_fields = ["credential", "activated_at", "activated_by"]

    def has_add_permission(self, request):
        return False
