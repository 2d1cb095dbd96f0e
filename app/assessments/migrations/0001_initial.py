import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="TestAttemptResult",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("test_title", models.CharField(help_text="Test title at submission time", max_length=255)),
                ("total_questions", models.PositiveIntegerField()),
                ("correct_count", models.PositiveIntegerField()),
                ("wrong_count", models.PositiveIntegerField()),
                ("unattempted_count", models.PositiveIntegerField()),
                ("score", models.DecimalField(decimal_places=2, help_text="Percentage correct, rounded half-up to two decimals", max_digits=5)),
                ("total_time_spent_seconds", models.PositiveIntegerField(default=0)),
                ("per_question", models.JSONField(blank=True, default=list, help_text="Per-question outcome in question order")),
                ("submitted_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("test", models.ForeignKey(help_text="Attempted mock test", on_delete=django.db.models.deletion.PROTECT, related_name="attempt_results", to="catalog.mocktest")),
                ("user", models.ForeignKey(help_text="Learner who submitted the attempt", on_delete=django.db.models.deletion.CASCADE, related_name="attempt_results", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-submitted_at"],
                "indexes": [models.Index(fields=["user", "test"], name="attempt_user_test_idx")],
            },
        ),
    ]
