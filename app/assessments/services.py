"""
Scoring service.

Submitting an attempt is a two-step flow:

1. Score the answers against the test's active questions and persist an
   immutable TestAttemptResult. This step either fully succeeds or fails.
2. For paid tests, link the result to the learner's latest uncompleted
   test entitlement (or repair a missing one). A failure here is logged
   and never undoes step 1.

Usage:
    from assessments.services import ScoringService
    from assessments.types import Submission

    result = ScoringService.submit(user, Submission(test_id=7, answers=[0, 2, None]))
    if result.success:
        attempt = result.data
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any

from django.db import DatabaseError
from django.db.models import Avg, Count, Max, Sum
from django.utils import timezone

from assessments.models import TestAttemptResult
from assessments.scoring import score_attempt
from catalog.services import CatalogService
from core.exceptions import NotFoundError
from core.services import BaseService, ServiceResult
from entitlements.services import EntitlementService

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from assessments.types import Submission
    from authentication.models import User

RESULT_SORT_FIELDS = ("submitted_at", "score", "total_time_spent_seconds", "correct_count")


class ScoringService(BaseService):
    """Attempt submission and attempt statistics."""

    @classmethod
    def submit(cls, user: User, submission: Submission) -> ServiceResult[TestAttemptResult]:
        """
        Score and persist an attempt, then link it to the learner's purchase.

        Args:
            user: Submitting learner
            submission: Normalized attempt payload

        Returns:
            ServiceResult with the created TestAttemptResult, or a failure with
            NOT_FOUND (unknown test, or no active questions) or INTERNAL_ERROR
        """
        logger = cls.get_logger()

        try:
            test = CatalogService.get_test(submission.test_id)
        except NotFoundError as e:
            return ServiceResult.from_exception(e)

        questions = CatalogService.active_questions(test)
        if not questions:
            return ServiceResult.failure(
                f"Mock test {test.id} has no active questions",
                error_code="NOT_FOUND",
                details={"test_id": test.id},
            )

        if len(submission.answers) > len(questions):
            logger.warning(
                f"Submission for test {test.id} has {len(submission.answers)} answers "
                f"for {len(questions)} questions; extra answers ignored",
                extra={"user_id": user.id, "test_id": test.id},
            )

        scored = score_attempt(questions, submission.answers, submission.per_question_time)

        try:
            with cls.atomic():
                result = TestAttemptResult.objects.create(
                    user=user,
                    test=test,
                    test_title=test.title,
                    total_questions=scored.total_questions,
                    correct_count=scored.correct_count,
                    wrong_count=scored.wrong_count,
                    unattempted_count=scored.unattempted_count,
                    score=scored.score,
                    total_time_spent_seconds=submission.total_time_spent_seconds,
                    per_question=[outcome.to_dict() for outcome in scored.outcomes],
                    submitted_at=timezone.now(),
                )
        except DatabaseError as e:
            return cls.handle_exception(
                e,
                f"Failed to store attempt for test {test.id}",
                error_code="INTERNAL_ERROR",
                message="Could not store attempt result",
                extra={"user_id": user.id, "test_id": test.id},
            )

        logger.info(
            f"Scored attempt {result.id} on test {test.id}: {result.score}%",
            extra={
                "user_id": user.id,
                "test_id": test.id,
                "result_id": str(result.id),
            },
        )

        if test.is_paid:
            cls._link_result(user, test, result)

        return ServiceResult.success(result)

    @classmethod
    def _link_result(cls, user: User, test, result: TestAttemptResult) -> None:
        """Link the stored result; failures are logged and swallowed."""
        try:
            EntitlementService.link_attempt_result(user_id=user.id, test=test, result=result)
        except DatabaseError:
            cls.get_logger().exception(
                f"Failed to link result {result.id} to an entitlement",
                extra={
                    "user_id": user.id,
                    "test_id": test.id,
                    "result_id": str(result.id),
                },
            )

    # =========================================================================
    # Read side
    # =========================================================================

    @classmethod
    def results_for_user(cls, user_id: int, test_id: int | None = None) -> QuerySet:
        """A user's attempt results, newest first, optionally for one test."""
        queryset = TestAttemptResult.objects.filter(user_id=user_id).select_related("test")
        if test_id is not None:
            queryset = queryset.filter(test_id=test_id)
        return queryset.order_by("-submitted_at")

    @classmethod
    def all_results(
        cls,
        user_id: int | None = None,
        test_id: int | None = None,
        min_score: Decimal | None = None,
        max_score: Decimal | None = None,
        sort_by: str = "submitted_at",
        descending: bool = True,
    ) -> QuerySet:
        """
        Every learner's attempt results for staff.

        Args:
            user_id: Only this learner's results
            test_id: Only results for this test
            min_score: Lowest score included
            max_score: Highest score included
            sort_by: One of RESULT_SORT_FIELDS
            descending: Sort direction; ties fall back to newest first
        """
        if sort_by not in RESULT_SORT_FIELDS:
            raise ValueError(f"Cannot sort results by '{sort_by}'")

        queryset = TestAttemptResult.objects.select_related("test", "user")
        if user_id is not None:
            queryset = queryset.filter(user_id=user_id)
        if test_id is not None:
            queryset = queryset.filter(test_id=test_id)
        if min_score is not None:
            queryset = queryset.filter(score__gte=min_score)
        if max_score is not None:
            queryset = queryset.filter(score__lte=max_score)

        ordering = f"-{sort_by}" if descending else sort_by
        return queryset.order_by(ordering, "-submitted_at", "-id")

    @classmethod
    def attempted_test_ids(cls, user_id: int) -> list[int]:
        """Distinct ids of tests the user has submitted at least once."""
        return sorted(
            TestAttemptResult.objects.filter(user_id=user_id)
            .order_by()
            .values_list("test_id", flat=True)
            .distinct()
        )

    @classmethod
    def user_stats(cls, user_id: int) -> dict[str, Any]:
        """
        Aggregate attempt statistics for a learner.

        Returns:
            Dict with total_attempts, tests_attempted, average_score,
            best_score, total_correct, total_wrong, total_unattempted,
            total_time_spent_seconds and accuracy (None when nothing was
            answered)
        """
        totals = TestAttemptResult.objects.filter(user_id=user_id).aggregate(
            total_attempts=Count("id"),
            tests_attempted=Count("test", distinct=True),
            average_score=Avg("score"),
            best_score=Max("score"),
            total_correct=Sum("correct_count"),
            total_wrong=Sum("wrong_count"),
            total_unattempted=Sum("unattempted_count"),
            total_time_spent_seconds=Sum("total_time_spent_seconds"),
        )

        for key in ("total_correct", "total_wrong", "total_unattempted", "total_time_spent_seconds"):
            totals[key] = totals[key] or 0

        if totals["average_score"] is not None:
            totals["average_score"] = Decimal(totals["average_score"]).quantize(Decimal("0.01"))

        answered = totals["total_correct"] + totals["total_wrong"]
        totals["accuracy"] = (
            (Decimal(totals["total_correct"] * 100) / answered).quantize(Decimal("0.01"))
            if answered
            else None
        )
        return totals
