"""
Celery tasks for payment processing.

This module provides async tasks for:
- Reconciling orders whose callback never arrived

Usage:
    # Scheduled via CELERY_BEAT_SCHEDULE in config/settings.py
    from payments.tasks import reconcile_pending_payments
    reconcile_pending_payments.delay()
"""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from payments.models import PaymentRecord
from payments.services import PaymentReconciler
from payments.state_machines import PaymentStatus

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_PENDING_RECONCILE_MINUTES = 15
RECONCILE_BATCH_SIZE = 100


@shared_task
def reconcile_pending_payments() -> dict:
    """
    Poll the gateway for orders stuck in pending.

    Orders older than PAYMENT_PENDING_RECONCILE_MINUTES are checked with the
    status API; definitive answers are applied through the same idempotent
    path as callbacks, so a late callback afterwards is a no-op.

    Returns:
        Dict with counts of checked, settled and errored records
    """
    minutes = getattr(settings, "PAYMENT_PENDING_RECONCILE_MINUTES", DEFAULT_PENDING_RECONCILE_MINUTES)
    cutoff = timezone.now() - timedelta(minutes=minutes)

    transaction_ids = list(
        PaymentRecord.objects.filter(status=PaymentStatus.PENDING, created_at__lt=cutoff)
        .order_by("created_at")
        .values_list("transaction_id", flat=True)[:RECONCILE_BATCH_SIZE]
    )

    settled = 0
    errors = 0
    for transaction_id in transaction_ids:
        result = PaymentReconciler.check_status(transaction_id)
        if not result.success:
            errors += 1
        elif result.data.is_terminal:
            settled += 1

    if transaction_ids:
        logger.info(
            f"Reconciled {len(transaction_ids)} pending payments: {settled} settled, {errors} errors",
            extra={"checked": len(transaction_ids), "settled": settled, "errors": errors},
        )
    return {"checked": len(transaction_ids), "settled": settled, "errors": errors}
