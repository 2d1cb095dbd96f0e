"""
Entitlement admin configuration.

Entitlements are written by the purchase and scoring flows, so the admin
is read-only.
"""

from django.contrib import admin

from entitlements.models import Entitlement


@admin.register(Entitlement)
class EntitlementAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "user",
        "kind",
        "course",
        "test",
        "granted_via",
        "is_completed",
        "purchase_date",
        "end_date",
    ]
    list_filter = ["kind", "granted_via", "is_completed", "is_expired"]
    search_fields = ["user__email", "transaction_id"]
    raw_id_fields = ["user", "course", "test", "category", "result"]
    ordering = ["-purchase_date", "-id"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
