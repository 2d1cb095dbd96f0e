"""
Payment reconciler: order creation and gateway callback handling.

Order flow:
    1. Resolve the price from the purchased item
    2. Persist a pending PaymentRecord (before any gateway call)
    3. Ask the gateway for a hosted payment page

Callback flow (at-least-once delivery, must be idempotent):
    1. Look up the record by merchant transaction id
    2. Skip unknown and already-settled records
    3. Transition pending -> success/failed with a conditional UPDATE
    4. Only the process that won the transition grants entitlements

Usage:
    from payments.services import PaymentReconciler

    result = PaymentReconciler.create_order(user, PaymentKind.COURSE, course.id)
    result = PaymentReconciler.handle_callback(payload)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from django.db import DatabaseError
from django.utils import timezone
from django_fsm import ConcurrentTransition

from catalog.services import CatalogService
from core.exceptions import BaseApplicationError, NotFoundError, ValidationError
from core.services import BaseService, ServiceResult
from entitlements.services import EntitlementService
from payments.exceptions import AlreadyOwnedError, GatewayError, InvalidAmountError
from payments.gateway import (
    CallbackPayload,
    PayRequest,
    PhonePeAdapter,
    resolve_gateway_config,
)
from payments.models import PaymentRecord
from payments.state_machines import PaymentKind, PaymentStatus

if TYPE_CHECKING:
    from authentication.models import User


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True)
class OrderResult:
    """A created order and where to send the user to pay it."""

    record: PaymentRecord
    pay_url: str

    @property
    def transaction_id(self) -> str:
        return self.record.transaction_id

    @property
    def amount(self) -> Decimal:
        return self.record.amount


@dataclass(frozen=True)
class CallbackOutcome:
    """What applying a callback did."""

    transaction_id: str
    status: str
    entitlements_created: int = 0


# =============================================================================
# Reconciler
# =============================================================================


class PaymentReconciler(BaseService):
    """Creates orders and applies gateway reports to the ledger."""

    # =========================================================================
    # Orders
    # =========================================================================

    @classmethod
    def resolve_price(cls, kind: str, target_id: int) -> Decimal:
        """
        Price of an active purchasable item.

        Raises:
            NotFoundError: Item missing or inactive
            ValidationError: Unknown kind
        """
        if kind == PaymentKind.COURSE:
            return CatalogService.get_course(target_id, active_only=True).discounted_price
        if kind == PaymentKind.TEST:
            return CatalogService.get_test(target_id, active_only=True).price
        if kind == PaymentKind.CATEGORY:
            return CatalogService.get_category(target_id, active_only=True).price
        raise ValidationError(
            f"Unknown purchase kind '{kind}'",
            error_code="INVALID_KIND",
            details={"kind": kind},
        )

    @classmethod
    def owns_category(cls, user_id: int, category_id: int) -> bool:
        return PaymentRecord.objects.filter(
            user_id=user_id,
            kind=PaymentKind.CATEGORY,
            target_id=category_id,
            status=PaymentStatus.SUCCESS,
        ).exists()

    @classmethod
    def create_order(cls, user: User, kind: str, target_id: int) -> ServiceResult[OrderResult]:
        """
        Create a pending order and a hosted payment page for it.

        Args:
            user: Buyer
            kind: course, test or category
            target_id: Id of the purchased item

        Returns:
            ServiceResult with OrderResult. Failures: NOT_FOUND, INVALID_KIND,
            INVALID_AMOUNT, ALREADY_OWNED, GATEWAY_NOT_CONFIGURED, and
            GATEWAY_TIMEOUT / GATEWAY_ERROR after the record was created
            (details carry its transaction_id; the order stays pending)
        """
        logger = cls.get_logger()

        try:
            amount = cls.resolve_price(kind, target_id)
            if kind == PaymentKind.CATEGORY and cls.owns_category(user.id, target_id):
                raise AlreadyOwnedError(
                    "You already own this test category",
                    details={"category_id": target_id},
                )
            if amount is None or amount <= 0:
                raise InvalidAmountError(
                    "Resolved price must be greater than zero",
                    details={"kind": kind, "target_id": target_id, "amount": str(amount)},
                )
            config = resolve_gateway_config()
        except BaseApplicationError as e:
            logger.info(
                f"Order rejected: {e.error_code}",
                extra={"user_id": user.id, "kind": kind, "target_id": target_id},
            )
            return ServiceResult.from_exception(e)

        record = PaymentRecord.objects.create(
            user=user,
            kind=kind,
            target_id=target_id,
            amount=amount,
            transaction_id=PaymentRecord.new_transaction_id(),
        )
        log_context = {
            "user_id": user.id,
            "transaction_id": record.transaction_id,
            "kind": kind,
            "target_id": target_id,
        }
        logger.info(f"Created pending order {record.transaction_id} for {amount}", extra=log_context)

        try:
            response = PhonePeAdapter.initiate_payment(
                config,
                PayRequest(
                    transaction_id=record.transaction_id,
                    user_id=user.id,
                    amount_minor=record.amount_minor,
                    mobile_number=user.phone,
                ),
            )
        except GatewayError as e:
            logger.warning(
                f"Gateway call failed for {record.transaction_id}; order stays pending",
                extra={**log_context, "error_code": e.error_code, "retryable": e.is_retryable},
            )
            return ServiceResult.failure(
                e.message,
                error_code=e.error_code,
                details={**e.details, "transaction_id": record.transaction_id},
            )

        # Queryset update: a fast callback may already have settled the record
        PaymentRecord.objects.filter(pk=record.pk).update(
            pay_url=response.pay_url,
            updated_at=timezone.now(),
        )
        record.pay_url = response.pay_url
        return ServiceResult.success(OrderResult(record=record, pay_url=response.pay_url))

    # =========================================================================
    # Callbacks
    # =========================================================================

    @classmethod
    def handle_callback(cls, payload: CallbackPayload) -> ServiceResult[CallbackOutcome]:
        """
        Apply a verified gateway report to the ledger.

        Safe to call any number of times for the same transaction: only the
        first call that moves the record out of pending has any effect.

        Returns:
            ServiceResult with CallbackOutcome on success. Failures are all
            acknowledged to the gateway: UNKNOWN_TRANSACTION,
            ALREADY_PROCESSED, CONFLICT (lost a concurrent race), plus
            INTERNAL_ERROR when the database write failed
        """
        logger = cls.get_logger()
        log_context = {"transaction_id": payload.transaction_id, "gateway_code": payload.code}

        record = PaymentRecord.objects.filter(transaction_id=payload.transaction_id).first()
        if record is None:
            logger.warning("Callback for unknown transaction", extra=log_context)
            return ServiceResult.failure(
                f"Unknown transaction {payload.transaction_id}",
                error_code="UNKNOWN_TRANSACTION",
                details={"transaction_id": payload.transaction_id},
            )

        if record.is_terminal:
            logger.info(f"Duplicate callback; payment already {record.status}", extra=log_context)
            return ServiceResult.failure(
                "Payment already processed",
                error_code="ALREADY_PROCESSED",
                details={"transaction_id": record.transaction_id, "status": record.status},
            )

        if payload.pending:
            logger.info("Gateway reports payment still pending", extra=log_context)
            return ServiceResult.success(
                CallbackOutcome(transaction_id=record.transaction_id, status=record.status)
            )

        if payload.amount_minor is not None and payload.amount_minor != record.amount_minor:
            logger.warning(
                f"Gateway amount {payload.amount_minor} differs from order amount {record.amount_minor}",
                extra=log_context,
            )

        try:
            with cls.atomic():
                if payload.success:
                    created = cls._settle_success(record, payload)
                else:
                    record.mark_failed(
                        gateway_code=payload.code,
                        reason=str(payload.raw.get("message", "")),
                    )
                    record.save()
                    created = 0
        except ConcurrentTransition:
            logger.info("Lost race to settle payment; another process applied it", extra=log_context)
            return ServiceResult.failure(
                "Payment is being processed concurrently",
                error_code="CONFLICT",
                details={"transaction_id": record.transaction_id},
            )
        except DatabaseError as e:
            return cls.handle_exception(
                e,
                "Failed to apply callback",
                error_code="INTERNAL_ERROR",
                message="Could not apply payment callback",
                extra=log_context,
            )

        logger.info(
            f"Payment {record.transaction_id} settled as {record.status} "
            f"with {created} entitlements",
            extra={**log_context, "status": record.status, "entitlements_created": created},
        )
        return ServiceResult.success(
            CallbackOutcome(
                transaction_id=record.transaction_id,
                status=record.status,
                entitlements_created=created,
            )
        )

    @classmethod
    def _settle_success(cls, record: PaymentRecord, payload: CallbackPayload) -> int:
        """
        Claim the record as paid, then grant what was bought.

        Runs inside the caller's transaction. The save is a conditional
        UPDATE; if it raises ConcurrentTransition nothing below runs.

        Returns:
            Number of entitlements created
        """
        logger = cls.get_logger()
        target = None
        member_ids = None
        try:
            if record.kind == PaymentKind.COURSE:
                target = CatalogService.get_course(record.target_id)
            elif record.kind == PaymentKind.TEST:
                target = CatalogService.get_test(record.target_id)
            else:
                target = CatalogService.get_category(record.target_id)
                member_ids = CatalogService.category_member_ids(target)
        except NotFoundError:
            logger.error(
                f"Paid {record.kind} {record.target_id} no longer exists; nothing granted",
                extra={"transaction_id": record.transaction_id, "user_id": record.user_id},
            )

        record.mark_success(
            gateway_code=payload.code,
            gateway_reference=payload.gateway_reference,
            member_ids=member_ids,
        )
        record.save()

        if target is None:
            return 0
        if record.kind == PaymentKind.COURSE:
            EntitlementService.grant_course(
                user_id=record.user_id,
                course=target,
                transaction_id=record.transaction_id,
            )
            return 1
        if record.kind == PaymentKind.TEST:
            EntitlementService.grant_test(
                user_id=record.user_id,
                test_id=target.id,
                transaction_id=record.transaction_id,
            )
            return 1
        return len(
            EntitlementService.grant_category_tests(
                user_id=record.user_id,
                category=target,
                member_test_ids=member_ids,
                transaction_id=record.transaction_id,
            )
        )

    # =========================================================================
    # Status polling
    # =========================================================================

    @classmethod
    def check_status(cls, transaction_id: str, user: User | None = None) -> ServiceResult[PaymentRecord]:
        """
        Refresh a pending order from the gateway status API.

        Terminal records are returned without a gateway call. A definitive
        gateway answer is applied through handle_callback, so polling and
        callbacks share one idempotent path.

        Args:
            transaction_id: Merchant transaction id
            user: When given, the record must belong to them (or they are staff)
        """
        record = PaymentRecord.objects.filter(transaction_id=transaction_id).first()
        if record is None or (
            user is not None and record.user_id != user.id and not user.is_staff
        ):
            return ServiceResult.failure(
                f"Payment {transaction_id} not found",
                error_code="NOT_FOUND",
                details={"transaction_id": transaction_id},
            )
        if record.is_terminal:
            return ServiceResult.success(record)

        try:
            config = resolve_gateway_config()
            status = PhonePeAdapter.check_status(config, transaction_id)
        except GatewayError as e:
            cls.get_logger().warning(
                f"Status poll failed for {transaction_id}: {e.error_code}",
                extra={"transaction_id": transaction_id, "retryable": e.is_retryable},
            )
            return ServiceResult.from_exception(e)

        if not status.is_pending:
            cls.handle_callback(CallbackPayload.from_status(status))
            record = PaymentRecord.objects.get(pk=record.pk)
        return ServiceResult.success(record)
