import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("assessments", "0001_initial"),
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Entitlement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("kind", models.CharField(choices=[("course", "Course"), ("test", "Mock Test")], help_text="Whether this grants a course window or a single test", max_length=10)),
                ("granted_via", models.CharField(choices=[("individual", "Individual purchase"), ("category", "Category purchase"), ("bundle", "Bundle"), ("repair", "Repaired at result linking")], default="individual", help_text="Purchase mode that produced this grant", max_length=20)),
                ("transaction_id", models.CharField(blank=True, db_index=True, default="", help_text="Gateway transaction id of the purchase (empty for repairs)", max_length=64)),
                ("purchase_date", models.DateTimeField(default=django.utils.timezone.now, help_text="When the purchase was confirmed")),
                ("is_completed", models.BooleanField(default=False, help_text="Whether a scored attempt has been linked to this grant")),
                ("start_date", models.DateTimeField(blank=True, help_text="Start of the course access window", null=True)),
                ("end_date", models.DateTimeField(blank=True, help_text="End of the course access window (start + duration months)", null=True)),
                ("is_expired", models.BooleanField(default=False, help_text="Stored expiry flag refreshed by the expiry task")),
                ("category", models.ForeignKey(blank=True, help_text="Category whose purchase produced this grant", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="entitlements", to="catalog.testcategory")),
                ("course", models.ForeignKey(blank=True, help_text="Granted course (course entitlements only)", null=True, on_delete=django.db.models.deletion.PROTECT, related_name="entitlements", to="catalog.course")),
                ("result", models.ForeignKey(blank=True, help_text="Attempt result that completed this grant", null=True, on_delete=django.db.models.deletion.PROTECT, related_name="entitlements", to="assessments.testattemptresult")),
                ("test", models.ForeignKey(blank=True, help_text="Granted mock test (test entitlements only)", null=True, on_delete=django.db.models.deletion.PROTECT, related_name="entitlements", to="catalog.mocktest")),
                ("user", models.ForeignKey(help_text="User the access was granted to", on_delete=django.db.models.deletion.CASCADE, related_name="entitlements", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-purchase_date", "-id"],
                "indexes": [
                    models.Index(fields=["user", "test", "is_completed"], name="entitlement_user_test_idx"),
                    models.Index(fields=["user", "course"], name="entitlement_user_course_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("course__isnull", False), ("end_date__isnull", False), ("kind", "course"), ("start_date__isnull", False), ("test__isnull", True)),
                            models.Q(("course__isnull", True), ("kind", "test"), ("test__isnull", False)),
                            _connector="OR",
                        ),
                        name="entitlement_target_matches_kind",
                    ),
                ],
            },
        ),
    ]
