"""
Celery tasks for entitlement maintenance.

Usage:
    # Scheduled via CELERY_BEAT_SCHEDULE in config/settings.py
    from entitlements.tasks import expire_course_entitlements
    expire_course_entitlements.delay()
"""

from __future__ import annotations

import logging

from celery import shared_task

from entitlements.services import EntitlementService

logger = logging.getLogger(__name__)


@shared_task
def expire_course_entitlements() -> dict:
    """
    Periodic task to flag course windows that have ended.

    Access checks compare end_date with the clock themselves; this only
    keeps the stored is_expired flag in step for admin and reporting.

    Returns:
        Dict with count of entitlements flagged
    """
    expired_count = EntitlementService.expire_lapsed_course_entitlements()
    if expired_count > 0:
        logger.info(
            f"Flagged {expired_count} course entitlements as expired",
            extra={"expired_count": expired_count},
        )
    return {"expired_count": expired_count}
