import decimal
import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import django_fsm
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PaymentRecord",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("kind", models.CharField(choices=[("course", "Course"), ("test", "Mock Test"), ("category", "Test Category")], help_text="Purchase mode (course, test, category)", max_length=20)),
                ("target_id", models.PositiveBigIntegerField(help_text="Id of the purchased course, test or category")),
                ("amount", models.DecimalField(decimal_places=2, help_text="Amount charged in major currency units (rupees)", max_digits=10, validators=[django.core.validators.MinValueValidator(decimal.Decimal("0.01"))])),
                ("currency", models.CharField(default="INR", help_text="ISO 4217 currency code", max_length=3)),
                ("transaction_id", models.CharField(help_text="Merchant transaction id sent to the gateway", max_length=64, unique=True)),
                ("status", django_fsm.FSMField(choices=[("pending", "Pending"), ("success", "Success"), ("failed", "Failed")], db_index=True, default="pending", help_text="Current state of the payment (managed by FSM)", max_length=50, protected=True)),
                ("gateway_code", models.CharField(blank=True, default="", help_text="Gateway response code of the settling callback", max_length=64)),
                ("gateway_reference", models.CharField(blank=True, default="", help_text="Gateway-side transaction reference", max_length=128)),
                ("pay_url", models.URLField(blank=True, default="", help_text="Hosted payment page the user is redirected to", max_length=1000)),
                ("metadata", models.JSONField(blank=True, default=dict, help_text="Arbitrary JSON metadata (category member snapshot)")),
                ("failure_reason", models.TextField(blank=True, default="", help_text="Gateway message when the payment failed")),
                ("completed_at", models.DateTimeField(blank=True, help_text="When the payment reached success or failed", null=True)),
                ("user", models.ForeignKey(help_text="User making the payment", on_delete=django.db.models.deletion.PROTECT, related_name="payment_records", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Payment Record",
                "verbose_name_plural": "Payment Records",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "status"], name="payment_user_status_idx"),
                    models.Index(fields=["user", "kind", "target_id"], name="payment_user_target_idx"),
                    models.Index(fields=["status", "created_at"], name="payment_status_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="payment_record_amount_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="GatewayCredential",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("environment", models.CharField(choices=[("uat", "UAT (sandbox)"), ("prod", "Production")], default="uat", max_length=10)),
                ("merchant_id", models.CharField(max_length=64)),
                ("salt_key", models.CharField(max_length=128)),
                ("salt_index", models.PositiveSmallIntegerField(default=1)),
                ("base_url", models.URLField(max_length=255)),
                ("version", models.PositiveIntegerField(editable=False)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["environment", "-version"],
                "constraints": [
                    models.UniqueConstraint(fields=("environment", "version"), name="gateway_credential_env_version_unique"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ActiveGatewayCredential",
            fields=[
                ("id", models.PositiveSmallIntegerField(default=1, editable=False, primary_key=True, serialize=False)),
                ("activated_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("activated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("credential", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="+", to="payments.gatewaycredential")),
            ],
            options={
                "verbose_name": "Active gateway credential",
            },
        ),
    ]
