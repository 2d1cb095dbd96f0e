"""
Attempt result model.

TestAttemptResult is write-once: the scoring service creates it and
nothing updates or deletes it afterwards. Resubmitting a test produces
another row.

Related files:
    - scoring.py: Pure scoring of submitted answers
    - services.py: ScoringService (submit + link to entitlement)
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.exceptions import ConflictError
from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class TestAttemptResult(UUIDPrimaryKeyMixin, BaseModel):
    """
    Immutable record of one scored attempt.

    Invariants:
        correct_count + wrong_count + unattempted_count == total_questions
        score == round_half_up(correct_count * 100 / total_questions, 2)

    per_question holds one entry per scored question, in question order:
        {"question_id", "selected_option", "correct_option",
         "time_spent_seconds", "is_correct"}
    """

    __test__ = False

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="attempt_results",
        help_text="Learner who submitted the attempt",
    )
    test = models.ForeignKey(
        "catalog.MockTest",
        on_delete=models.PROTECT,
        related_name="attempt_results",
        help_text="Attempted mock test",
    )
    test_title = models.CharField(
        max_length=255,
        help_text="Test title at submission time",
    )

    # =========================================================================
    # Outcome
    # =========================================================================
    total_questions = models.PositiveIntegerField()
    correct_count = models.PositiveIntegerField()
    wrong_count = models.PositiveIntegerField()
    unattempted_count = models.PositiveIntegerField()
    score = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        help_text="Percentage correct, rounded half-up to two decimals",
    )
    total_time_spent_seconds = models.PositiveIntegerField(default=0)
    per_question = models.JSONField(
        default=list,
        blank=True,
        help_text="Per-question outcome in question order",
    )
    submitted_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-submitted_at"]
        indexes = [
            models.Index(fields=["user", "test"], name="attempt_user_test_idx"),
        ]

    def __str__(self) -> str:
        return f"Attempt {self.id} on {self.test_title} ({self.score}%)"

    @property
    def accuracy(self):
        """Correct share of attempted questions as a percentage, or None."""
        attempted = self.correct_count + self.wrong_count
        if not attempted:
            return None
        return round(self.correct_count * 100 / attempted, 2)

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ConflictError(
                "Attempt results cannot be modified",
                error_code="IMMUTABLE_RESULT",
                details={"result_id": str(self.pk)},
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ConflictError(
            "Attempt results cannot be deleted",
            error_code="IMMUTABLE_RESULT",
            details={"result_id": str(self.pk)},
        )
