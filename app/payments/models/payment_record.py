"""
PaymentRecord model: the payment ledger.

A record is created pending when an order is placed, before the gateway
is called, and moves to success or failed exactly once when the gateway
reports back.

Usage:
    from payments.models import PaymentRecord

    record = PaymentRecord.objects.create(
        user=user,
        kind=PaymentKind.COURSE,
        target_id=course.id,
        amount=course.discounted_price,
        transaction_id=PaymentRecord.new_transaction_id(),
    )

    # State transitions using django-fsm
    record.mark_success(gateway_code="PAYMENT_SUCCESS")
    record.save()  # raises ConcurrentTransition if another process got there first
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django_fsm import ConcurrentTransitionMixin, FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.state_machines import PaymentKind, PaymentStatus


class PaymentRecord(ConcurrentTransitionMixin, UUIDPrimaryKeyMixin, BaseModel):
    """
    One order placed with the payment gateway.

    Uses django-fsm for the status field and ConcurrentTransitionMixin for
    concurrency control: saving a transition issues
    ``UPDATE ... WHERE status = <status when loaded>``, so of two
    processes racing to settle the same pending record exactly one wins
    and the other gets ConcurrentTransition.

    State Flow:
        PENDING -> SUCCESS
        PENDING -> FAILED

    Fields:
        user: Buyer
        kind/target_id: What was bought (course, test or category id)
        amount: Price charged, in rupees (the gateway is sent paise)
        transaction_id: Our merchant transaction id, sent to the gateway
        status: Current FSM state
        gateway_code: Last gateway response code (PAYMENT_SUCCESS, ...)
        gateway_reference: Gateway-side transaction reference
        pay_url: Hosted payment page returned by the gateway
        metadata: category_member_ids snapshot for category purchases
        completed_at: When the record reached a terminal state
    """

    # ==========================================================================
    # Relationships
    # ==========================================================================

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payment_records",
        help_text="User making the payment",
    )

    # ==========================================================================
    # What was bought
    # ==========================================================================

    kind = models.CharField(
        max_length=20,
        choices=PaymentKind.choices,
        help_text="Purchase mode (course, test, category)",
    )

    target_id = models.PositiveBigIntegerField(
        help_text="Id of the purchased course, test or category",
    )

    # ==========================================================================
    # Amount & Currency
    # ==========================================================================

    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Amount charged in major currency units (rupees)",
    )

    currency = models.CharField(
        max_length=3,
        default="INR",
        help_text="ISO 4217 currency code",
    )

    # ==========================================================================
    # Gateway
    # ==========================================================================

    transaction_id = models.CharField(
        max_length=64,
        unique=True,
        help_text="Merchant transaction id sent to the gateway",
    )

    status = FSMField(
        default=PaymentStatus.PENDING,
        choices=PaymentStatus.choices,
        db_index=True,
        protected=True,  # Prevent direct assignment outside transitions
        help_text="Current state of the payment (managed by FSM)",
    )

    gateway_code = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="Gateway response code of the settling callback",
    )

    gateway_reference = models.CharField(
        max_length=128,
        blank=True,
        default="",
        help_text="Gateway-side transaction reference",
    )

    pay_url = models.URLField(
        max_length=1000,
        blank=True,
        default="",
        help_text="Hosted payment page the user is redirected to",
    )

    # ==========================================================================
    # Metadata & Timestamps
    # ==========================================================================

    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Arbitrary JSON metadata (category member snapshot)",
    )

    failure_reason = models.TextField(
        blank=True,
        default="",
        help_text="Gateway message when the payment failed",
    )

    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the payment reached success or failed",
    )

    # ==========================================================================
    # Meta & Methods
    # ==========================================================================

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Payment Record"
        verbose_name_plural = "Payment Records"
        indexes = [
            models.Index(fields=["user", "status"], name="payment_user_status_idx"),
            models.Index(fields=["user", "kind", "target_id"], name="payment_user_target_idx"),
            models.Index(fields=["status", "created_at"], name="payment_status_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="payment_record_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"PaymentRecord({self.transaction_id}, {self.status}, {self.amount} {self.currency})"

    @staticmethod
    def new_transaction_id() -> str:
        """Generate a process-unique merchant transaction id."""
        return f"TXN-{uuid.uuid4().hex.upper()}"

    @property
    def amount_minor(self) -> int:
        """Amount in paise, as the gateway expects it."""
        return int((self.amount * 100).to_integral_value())

    @property
    def is_terminal(self) -> bool:
        return self.status in PaymentStatus.terminal()

    @property
    def category_member_ids(self) -> list[int] | None:
        return self.metadata.get("category_member_ids")

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=PaymentStatus.PENDING,
        target=PaymentStatus.SUCCESS,
    )
    def mark_success(
        self,
        gateway_code: str,
        gateway_reference: str = "",
        member_ids: list[int] | None = None,
    ):
        """
        Mark the payment as paid.

        Transition: PENDING -> SUCCESS

        Args:
            gateway_code: Gateway response code
            gateway_reference: Gateway-side transaction reference
            member_ids: Category member snapshot (category purchases only)
        """
        self.gateway_code = gateway_code
        self.gateway_reference = gateway_reference or self.gateway_reference
        self.completed_at = timezone.now()
        if member_ids is not None:
            self.metadata = {**self.metadata, "category_member_ids": list(member_ids)}

    @transition(
        field=status,
        source=PaymentStatus.PENDING,
        target=PaymentStatus.FAILED,
    )
    def mark_failed(self, gateway_code: str, reason: str = ""):
        """
        Mark the payment as failed.

        Transition: PENDING -> FAILED
        """
        self.gateway_code = gateway_code
        self.failure_reason = reason
        self.completed_at = timezone.now()
