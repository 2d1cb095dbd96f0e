"""
Data types for attempt submission and scoring.

Types:
    Submission: Canonical attempt payload (after request normalization)
    QuestionOutcome: Scored outcome of one question
    ScoredAttempt: Aggregate outcome of a whole attempt

Usage:
    from assessments.types import Submission

    submission = Submission(
        test_id=test.id,
        total_time_spent_seconds=1800,
        answers=[0, None, 2],
        per_question_time=[40, 0, 65],
    )
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class Submission:
    """
    One attempt as submitted by a learner.

    Attributes:
        test_id: Attempted mock test
        total_time_spent_seconds: Wall time of the whole attempt
        answers: Selected option index per question, aligned by position
            to the test's active question order; None means unattempted
        per_question_time: Seconds spent per question, same alignment
    """

    test_id: int
    total_time_spent_seconds: int = 0
    answers: list[int | None] = field(default_factory=list)
    per_question_time: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class QuestionOutcome:
    question_id: int
    selected_option: int | None
    correct_option: int
    time_spent_seconds: int
    is_correct: bool

    @property
    def is_attempted(self) -> bool:
        return self.selected_option is not None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScoredAttempt:
    """
    Aggregate outcome of an attempt.

    correct_count + wrong_count + unattempted_count == total_questions.
    """

    total_questions: int
    correct_count: int
    wrong_count: int
    unattempted_count: int
    score: Decimal
    outcomes: list[QuestionOutcome]
