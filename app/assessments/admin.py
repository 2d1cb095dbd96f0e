"""
Admin configuration for attempt results.

Results are immutable, so the admin is read-only.
"""

from django.contrib import admin

from assessments.models import TestAttemptResult


@admin.register(TestAttemptResult)
class TestAttemptResultAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "user",
        "test_title",
        "score",
        "correct_count",
        "wrong_count",
        "unattempted_count",
        "submitted_at",
    ]
    list_filter = ["submitted_at"]
    search_fields = ["user__email", "test_title"]
    readonly_fields = [field.name for field in TestAttemptResult._meta.fields]
    ordering = ["-submitted_at"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
