"""
Entitlement services.

EntitlementService is the only writer of Entitlement rows:
- grant_course / grant_test / grant_category_tests: called by the payment
  reconciler after a payment transitions to success
- link_attempt_result: called by the scoring engine after an attempt on a
  paid test is persisted
- repair_missing_test_entitlement: explicit healing path used by linking
  when no purchase row exists
- expire_lapsed_course_entitlements: periodic flag refresh

AccessQueryService answers read-side questions and never writes.

Usage:
    from entitlements.services import AccessQueryService, EntitlementService

    EntitlementService.grant_course(user_id=user.id, course=course, transaction_id="TXN-1")
    access = AccessQueryService.has_course_access(user.id, course.id)
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from dateutil.relativedelta import relativedelta
from django.db import DatabaseError, transaction
from django.utils import timezone

from core.services import BaseService
from entitlements.models import Entitlement, EntitlementKind, GrantedVia
from entitlements.types import (
    CourseAccess,
    CourseEntitlementView,
    EntitlementOverview,
    TestEntitlementView,
)

if TYPE_CHECKING:
    from assessments.models import TestAttemptResult
    from catalog.models import Course, MockTest, TestCategory


def course_window_end(start: datetime, duration_months: int) -> datetime:
    """
    Return the end of a course access window.

    Calendar-month arithmetic: Jan 31 + 1 month is Feb 28/29.
    """
    return start + relativedelta(months=duration_months)


def format_score(score: Decimal) -> str:
    """Render a score without trailing zeros: 70.00 -> "70", 66.50 -> "66.5"."""
    text = f"{score:.2f}"
    return text.rstrip("0").rstrip(".")


def entitlement_status_text(entitlement: Entitlement) -> str:
    """
    Human-readable status of a test entitlement.

    Returns:
        "Completed - Score: N%" when completed with a linked result,
        "Completed" when completed without one,
        "Not attempted yet" otherwise.
    """
    if entitlement.is_completed and entitlement.result_id is not None:
        return f"Completed - Score: {format_score(entitlement.result.score)}%"
    if entitlement.is_completed:
        return "Completed"
    return "Not attempted yet"


class EntitlementService(BaseService):
    """Write side of the entitlement store."""

    # =========================================================================
    # Grants
    # =========================================================================

    @classmethod
    def grant_course(
        cls,
        *,
        user_id: int,
        course: Course,
        transaction_id: str,
        granted_at: datetime | None = None,
    ) -> Entitlement:
        """
        Grant a course access window starting now.

        The window end is computed once here and stored; nothing
        recomputes it later, even if the course duration changes.
        """
        start = granted_at or timezone.now()
        entitlement = Entitlement.objects.create(
            user_id=user_id,
            kind=EntitlementKind.COURSE,
            course=course,
            granted_via=GrantedVia.INDIVIDUAL,
            transaction_id=transaction_id,
            purchase_date=start,
            start_date=start,
            end_date=course_window_end(start, course.duration_months),
        )
        cls.get_logger().info(
            f"Granted course {course.id} to user {user_id} until {entitlement.end_date.isoformat()}",
            extra={
                "user_id": user_id,
                "course_id": course.id,
                "transaction_id": transaction_id,
            },
        )
        return entitlement

    @classmethod
    def grant_test(
        cls,
        *,
        user_id: int,
        test_id: int,
        transaction_id: str,
        granted_via: str = GrantedVia.INDIVIDUAL,
        category: TestCategory | None = None,
        granted_at: datetime | None = None,
    ) -> Entitlement:
        """Grant access to a single mock test (uncompleted)."""
        entitlement = Entitlement.objects.create(
            user_id=user_id,
            kind=EntitlementKind.TEST,
            test_id=test_id,
            granted_via=granted_via,
            category=category,
            transaction_id=transaction_id,
            purchase_date=granted_at or timezone.now(),
            is_completed=False,
        )
        cls.get_logger().info(
            f"Granted test {test_id} to user {user_id} via {granted_via}",
            extra={
                "user_id": user_id,
                "test_id": test_id,
                "transaction_id": transaction_id,
            },
        )
        return entitlement

    @classmethod
    def grant_category_tests(
        cls,
        *,
        user_id: int,
        category: TestCategory,
        member_test_ids: list[int],
        transaction_id: str,
    ) -> list[Entitlement]:
        """
        Grant one test entitlement per member of a category snapshot.

        Best-effort batch: every row is written in its own savepoint, so a
        failing row is logged and skipped while rows already written stay.

        Args:
            user_id: Buyer
            category: Purchased category
            member_test_ids: Member ids captured when the payment succeeded
            transaction_id: Gateway transaction id shared by all rows

        Returns:
            The rows that were created
        """
        logger = cls.get_logger()
        granted_at = timezone.now()
        created: list[Entitlement] = []

        if not member_test_ids:
            logger.warning(
                f"Category {category.id} has no member tests; nothing granted",
                extra={
                    "user_id": user_id,
                    "category_id": category.id,
                    "transaction_id": transaction_id,
                },
            )
            return created

        for test_id in member_test_ids:
            try:
                with transaction.atomic():
                    created.append(
                        cls.grant_test(
                            user_id=user_id,
                            test_id=test_id,
                            transaction_id=transaction_id,
                            granted_via=GrantedVia.CATEGORY,
                            category=category,
                            granted_at=granted_at,
                        )
                    )
            except DatabaseError:
                logger.exception(
                    f"Failed to grant test {test_id} from category {category.id}",
                    extra={
                        "user_id": user_id,
                        "category_id": category.id,
                        "test_id": test_id,
                        "transaction_id": transaction_id,
                    },
                )

        if len(created) < len(member_test_ids):
            logger.warning(
                f"Category {category.id} granted {len(created)} of {len(member_test_ids)} tests",
                extra={"transaction_id": transaction_id},
            )
        return created

    # =========================================================================
    # Attempt linking
    # =========================================================================

    @classmethod
    def link_attempt_result(
        cls,
        *,
        user_id: int,
        test: MockTest,
        result: TestAttemptResult,
    ) -> Entitlement:
        """
        Mark the user's latest uncompleted test entitlement as completed.

        Selection rule: among rows for (user, test) with is_completed=False,
        the latest purchase_date wins; rows bought at the same instant are
        ordered by insertion, latest first. The row is locked while it is
        updated so two concurrent submissions cannot complete the same grant.

        When no uncompleted row exists the explicit repair path runs.

        Returns:
            The completed entitlement (linked or repaired)
        """
        with transaction.atomic():
            entitlement = (
                Entitlement.objects.select_for_update()
                .filter(
                    user_id=user_id,
                    kind=EntitlementKind.TEST,
                    test=test,
                    is_completed=False,
                )
                .order_by("-purchase_date", "-id")
                .first()
            )
            if entitlement is not None:
                entitlement.is_completed = True
                entitlement.result = result
                entitlement.save(update_fields=["is_completed", "result", "updated_at"])
                cls.get_logger().info(
                    f"Linked result {result.id} to entitlement {entitlement.id}",
                    extra={
                        "user_id": user_id,
                        "test_id": test.id,
                        "entitlement_id": entitlement.id,
                    },
                )
                return entitlement

        return cls.repair_missing_test_entitlement(user_id=user_id, test=test, result=result)

    @classmethod
    def repair_missing_test_entitlement(
        cls,
        *,
        user_id: int,
        test: MockTest,
        result: TestAttemptResult,
    ) -> Entitlement:
        """
        Create a completed entitlement for an attempt with no purchase row.

        Happens when the purchase callback was lost or when every prior
        grant is already completed. The row is marked granted_via=repair
        so it is distinguishable from real purchases.
        """
        entitlement = Entitlement.objects.create(
            user_id=user_id,
            kind=EntitlementKind.TEST,
            test=test,
            granted_via=GrantedVia.REPAIR,
            transaction_id="",
            is_completed=True,
            result=result,
        )
        cls.get_logger().warning(
            f"No uncompleted entitlement for user {user_id} on test {test.id}; "
            f"created repair entitlement {entitlement.id}",
            extra={
                "user_id": user_id,
                "test_id": test.id,
                "result_id": str(result.id),
                "entitlement_id": entitlement.id,
            },
        )
        return entitlement

    # =========================================================================
    # Maintenance
    # =========================================================================

    @classmethod
    def expire_lapsed_course_entitlements(cls, now: datetime | None = None) -> int:
        """
        Set is_expired on course windows that have ended.

        Returns:
            Number of rows updated
        """
        updated = Entitlement.objects.filter(
            kind=EntitlementKind.COURSE,
            is_expired=False,
            end_date__lt=now or timezone.now(),
        ).update(is_expired=True, updated_at=timezone.now())
        if updated:
            cls.get_logger().info(f"Marked {updated} course entitlements expired")
        return updated


class AccessQueryService(BaseService):
    """Read side of the entitlement store."""

    @classmethod
    def has_course_access(
        cls,
        user_id: int,
        course_id: int,
        now: datetime | None = None,
    ) -> CourseAccess:
        """
        Check whether a user can open a course right now.

        Looks at the latest course entitlement for the pair. Expiry is
        computed from end_date, not from the stored flag.
        """
        entitlement = (
            Entitlement.objects.filter(
                user_id=user_id,
                kind=EntitlementKind.COURSE,
                course_id=course_id,
            )
            .order_by("-purchase_date", "-id")
            .first()
        )
        if entitlement is None:
            return CourseAccess(purchased=False, expired=False)

        expired = entitlement.has_lapsed(now)
        return CourseAccess(
            purchased=not expired,
            expired=expired,
            start_date=entitlement.start_date,
            end_date=entitlement.end_date,
        )

    @classmethod
    def list_entitlements(
        cls,
        user_id: int,
        now: datetime | None = None,
    ) -> EntitlementOverview:
        """
        Everything a user has bought, newest first.

        Test rows carry a status text derived from completion state and the
        linked result's score.
        """
        overview = EntitlementOverview()
        entitlements = (
            Entitlement.objects.filter(user_id=user_id)
            .select_related("course", "test", "result")
            .order_by("-purchase_date", "-id")
        )
        for entitlement in entitlements:
            if entitlement.kind == EntitlementKind.COURSE:
                overview.courses.append(
                    CourseEntitlementView(
                        entitlement_id=entitlement.id,
                        course_id=entitlement.course_id,
                        course_name=entitlement.course.name,
                        transaction_id=entitlement.transaction_id,
                        purchase_date=entitlement.purchase_date,
                        start_date=entitlement.start_date,
                        end_date=entitlement.end_date,
                        is_expired=entitlement.has_lapsed(now),
                    )
                )
            else:
                result = entitlement.result
                overview.tests.append(
                    TestEntitlementView(
                        entitlement_id=entitlement.id,
                        test_id=entitlement.test_id,
                        test_title=entitlement.test.title,
                        granted_via=entitlement.granted_via,
                        category_id=entitlement.category_id,
                        transaction_id=entitlement.transaction_id,
                        purchase_date=entitlement.purchase_date,
                        is_completed=entitlement.is_completed,
                        result_id=str(result.id) if result else None,
                        score=result.score if result else None,
                        status_text=entitlement_status_text(entitlement),
                    )
                )
        return overview
