"""
Positional scoring of a mock test attempt.

Pure functions with no database access. The caller supplies the test's
active questions in authoritative order; answer i belongs to question i.

Usage:
    from assessments.scoring import score_attempt

    scored = score_attempt(questions, answers=[0, None, 2], per_question_time=[30, 0, 45])
    scored.score  # Decimal("66.67")
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from assessments.types import QuestionOutcome, ScoredAttempt

if TYPE_CHECKING:
    from catalog.models import Question

HUNDRED = Decimal("100")
TWO_PLACES = Decimal("0.01")


def compute_score(correct_count: int, total_questions: int) -> Decimal:
    """
    Percentage of correct answers rounded half-up to two decimals.

    Raises:
        ValueError: If total_questions is not positive
    """
    if total_questions <= 0:
        raise ValueError("total_questions must be positive")
    raw = Decimal(correct_count) * HUNDRED / Decimal(total_questions)
    return raw.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def performance_category(score: Decimal) -> str:
    """Bucket a score for display."""
    if score >= 90:
        return "Excellent"
    if score >= 75:
        return "Good"
    if score >= 60:
        return "Average"
    if score >= 40:
        return "Below Average"
    return "Poor"


def _at(values: Sequence, index: int, default=None):
    return values[index] if index < len(values) else default


def score_attempt(
    questions: Sequence[Question],
    answers: Sequence[int | None],
    per_question_time: Sequence[int] = (),
) -> ScoredAttempt:
    """
    Score answers against the ordered question list.

    Answers beyond the question count are ignored; missing answers are
    unattempted. A selected option equal to the stored correct index is
    correct, anything else is wrong.

    Raises:
        ValueError: If questions is empty
    """
    if not questions:
        raise ValueError("Cannot score an attempt without questions")

    outcomes: list[QuestionOutcome] = []
    correct = wrong = unattempted = 0

    for index, question in enumerate(questions):
        selected = _at(answers, index)
        is_correct = selected is not None and selected == question.correct_option_index
        if selected is None:
            unattempted += 1
        elif is_correct:
            correct += 1
        else:
            wrong += 1

        outcomes.append(
            QuestionOutcome(
                question_id=question.id,
                selected_option=selected,
                correct_option=question.correct_option_index,
                time_spent_seconds=_at(per_question_time, index, 0) or 0,
                is_correct=is_correct,
            )
        )

    total = len(questions)
    return ScoredAttempt(
        total_questions=total,
        correct_count=correct,
        wrong_count=wrong,
        unattempted_count=unattempted,
        score=compute_score(correct, total),
        outcomes=outcomes,
    )
