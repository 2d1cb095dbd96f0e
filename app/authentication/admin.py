"""
Admin for learner and staff accounts.

Each learner page lists what they have bought, read-only, so support staff
can answer "why can't I open this course" without leaving the user record.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from authentication.models import User
from entitlements.models import Entitlement


class EntitlementInline(admin.TabularInline):
    model = Entitlement
    fk_name = "user"
    fields = ["kind", "course", "test", "granted_via", "is_completed", "purchase_date", "end_date"]
    readonly_fields = fields
    ordering = ["-purchase_date", "-id"]
    extra = 0
    can_delete = False
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ["email", "get_full_name", "phone", "is_staff", "date_joined"]
    list_filter = ["is_active", "is_staff"]
    search_fields = ["email", "first_name", "last_name", "phone"]
    ordering = ["-date_joined"]
    readonly_fields = ["date_joined", "last_login"]
    inlines = [EntitlementInline]

    fieldsets = [
        (None, {"fields": ["email", "password"]}),
        ("Learner", {"fields": ["first_name", "last_name", "phone"]}),
        ("Access", {"fields": ["is_active", "is_staff", "is_superuser", "groups"]}),
        ("Activity", {"fields": ["date_joined", "last_login"]}),
    ]
    add_fieldsets = [
        (None, {"classes": ["wide"], "fields": ["email", "phone", "password1", "password2"]}),
    ]
