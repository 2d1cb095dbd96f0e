from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Course",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("name", models.CharField(help_text="Course display name", max_length=255)),
                ("description", models.TextField(blank=True, default="", help_text="Long description of the course")),
                ("price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="List price in major currency units", max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal("0.00"))])),
                ("discounted_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Price charged at checkout in major currency units", max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal("0.00"))])),
                ("duration_months", models.PositiveSmallIntegerField(default=1, help_text="Length of the access window granted by one purchase")),
                ("is_active", models.BooleanField(default=True, help_text="Whether the course is listed and purchasable")),
            ],
            options={
                "ordering": ["name"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("discounted_price__gte", 0)), name="course_discounted_price_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="MockTest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("title", models.CharField(help_text="Test title shown to learners", max_length=255)),
                ("description", models.TextField(blank=True, default="", help_text="Instructions shown before the attempt")),
                ("price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Price of a single-test purchase in major currency units", max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal("0.00"))])),
                ("is_paid", models.BooleanField(default=False, help_text="Whether attempting the test requires a purchase")),
                ("duration_minutes", models.PositiveIntegerField(default=60, help_text="Allotted time for one attempt")),
                ("is_active", models.BooleanField(default=True, help_text="Whether the test is listed and purchasable")),
            ],
            options={
                "ordering": ["title"],
            },
        ),
        migrations.CreateModel(
            name="Question",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("text", models.TextField(help_text="Question text")),
                ("options", models.JSONField(default=list, help_text="Ordered list of answer options")),
                ("correct_option_index", models.PositiveSmallIntegerField(help_text="Zero-based index into options of the correct answer")),
                ("position", models.PositiveIntegerField(default=0, help_text="Display order within the test")),
                ("is_active", models.BooleanField(default=True, help_text="Inactive questions are excluded from delivery and scoring")),
                ("test", models.ForeignKey(help_text="Mock test this question belongs to", on_delete=django.db.models.deletion.CASCADE, related_name="questions", to="catalog.mocktest")),
            ],
            options={
                "ordering": ["test", "position", "id"],
                "indexes": [models.Index(fields=["test", "is_active", "position"], name="catalog_question_order_idx")],
            },
        ),
        migrations.CreateModel(
            name="TestCategory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("name", models.CharField(help_text="Category display name", max_length=255)),
                ("description", models.TextField(blank=True, default="", help_text="Long description of the bundle")),
                ("price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Bundle price in major currency units", max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal("0.00"))])),
                ("category_type", models.CharField(blank=True, default="", help_text="Free-form grouping label (exam, subject, ...)", max_length=50)),
                ("is_active", models.BooleanField(default=True, help_text="Whether the category is listed and purchasable")),
                ("tests", models.ManyToManyField(blank=True, help_text="Member tests granted by a purchase", related_name="categories", to="catalog.mocktest")),
            ],
            options={
                "verbose_name_plural": "test categories",
                "ordering": ["name"],
            },
        ),
    ]
