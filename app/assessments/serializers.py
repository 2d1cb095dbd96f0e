"""
Assessment serializers.

SubmissionSerializer normalizes the shapes clients send for an attempt
into a single Submission:

    answers:            "answers" or "userAnswers"; each item an option
                        index, null, or {"selectedOption": index}
    per_question_time:  "perQuestionTimeSpent" or "questionWiseTime"; each
                        item seconds or {"timeSpent": seconds}
    total time:         "totalTimeSpent" or "totalTimeSpentSeconds"
"""

from __future__ import annotations

from collections.abc import Mapping

from rest_framework import serializers

from assessments.models import TestAttemptResult
from assessments.scoring import performance_category
from assessments.services import RESULT_SORT_FIELDS
from assessments.types import Submission
from core.serializer_mixins import FieldAliasMixin


def _coerce_int(value, label: str) -> int:
    if isinstance(value, bool):
        raise serializers.ValidationError(f"{label} must be an integer.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise serializers.ValidationError(f"{label} must be an integer.") from None


def _coerce_non_negative_int(value, label: str) -> int:
    number = _coerce_int(value, label)
    if number < 0:
        raise serializers.ValidationError(f"{label} cannot be negative.")
    return number


class AnswerField(serializers.Field):
    """
    One selected option: an index, null, or {"selectedOption": index}.

    Any integer is accepted; an index matching no option is scored as wrong.
    """

    def __init__(self, **kwargs):
        kwargs.setdefault("allow_null", True)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        if isinstance(data, Mapping):
            data = data.get("selectedOption", data.get("selected_option"))
        if data is None or data == "":
            return None
        return _coerce_int(data, "Selected option")

    def to_representation(self, value):
        return value


class TimeSpentField(serializers.Field):
    """Seconds spent on one question: a number or {"timeSpent": seconds}."""

    def __init__(self, **kwargs):
        kwargs.setdefault("allow_null", True)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        if isinstance(data, Mapping):
            data = data.get("timeSpent", data.get("time_spent", 0))
        if data is None or data == "":
            return 0
        return _coerce_non_negative_int(data, "Time spent")

    def to_representation(self, value):
        return value


class SubmissionSerializer(FieldAliasMixin, serializers.Serializer):
    """Validate and normalize an attempt submission."""

    field_aliases = {
        "testId": "test_id",
        "mockTestId": "test_id",
        "userId": "user_id",
        "userAnswers": "answers",
        "perQuestionTimeSpent": "per_question_time",
        "questionWiseTime": "per_question_time",
        "totalTimeSpent": "total_time_spent_seconds",
        "totalTimeSpentSeconds": "total_time_spent_seconds",
    }

    test_id = serializers.IntegerField(min_value=1)
    user_id = serializers.IntegerField(min_value=1, required=False)
    total_time_spent_seconds = serializers.IntegerField(min_value=0, default=0)
    answers = serializers.ListField(child=AnswerField(), allow_empty=True)
    per_question_time = serializers.ListField(
        child=TimeSpentField(),
        allow_empty=True,
        required=False,
        default=list,
    )

    def to_submission(self) -> Submission:
        data = self.validated_data
        # Null time entries arrive as None because allow_null short-circuits
        per_question_time = [seconds or 0 for seconds in data.get("per_question_time", [])]
        return Submission(
            test_id=data["test_id"],
            total_time_spent_seconds=data.get("total_time_spent_seconds", 0),
            answers=list(data["answers"]),
            per_question_time=per_question_time,
        )


class TestAttemptResultSerializer(serializers.ModelSerializer):
    """Full attempt result including the per-question breakdown."""

    __test__ = False

    test_id = serializers.IntegerField(read_only=True)
    performance_category = serializers.SerializerMethodField()
    accuracy = serializers.SerializerMethodField()

    class Meta:
        model = TestAttemptResult
        fields = [
            "id",
            "test_id",
            "test_title",
            "total_questions",
            "correct_count",
            "wrong_count",
            "unattempted_count",
            "score",
            "accuracy",
            "performance_category",
            "total_time_spent_seconds",
            "per_question",
            "submitted_at",
        ]
        read_only_fields = fields

    def get_performance_category(self, obj: TestAttemptResult) -> str:
        return performance_category(obj.score)

    def get_accuracy(self, obj: TestAttemptResult) -> float | None:
        return obj.accuracy


class TestAttemptSummarySerializer(TestAttemptResultSerializer):
    """List view: same as the full result minus the per-question breakdown."""

    class Meta(TestAttemptResultSerializer.Meta):
        fields = [f for f in TestAttemptResultSerializer.Meta.fields if f != "per_question"]
        read_only_fields = fields


class AdminAttemptSummarySerializer(TestAttemptSummarySerializer):
    """List row for staff: the summary plus who took the test."""

    user_id = serializers.IntegerField(read_only=True)
    user_email = serializers.EmailField(source="user.email", read_only=True)
    user_name = serializers.CharField(source="user.get_full_name", read_only=True)

    class Meta(TestAttemptSummarySerializer.Meta):
        fields = TestAttemptSummarySerializer.Meta.fields + ["user_id", "user_email", "user_name"]
        read_only_fields = fields


class AllResultsFilterSerializer(FieldAliasMixin, serializers.Serializer):
    """Query string filters and ordering for the staff results listing."""

    field_aliases = {
        "userId": "user_id",
        "testId": "test_id",
        "minScore": "min_score",
        "maxScore": "max_score",
        "sortBy": "sort_by",
        "sortOrder": "sort_order",
    }
    sort_aliases = {
        "submittedAt": "submitted_at",
        "createdAt": "submitted_at",
        "totalTimeSpent": "total_time_spent_seconds",
        "correctAnswers": "correct_count",
    }

    user_id = serializers.IntegerField(min_value=1, required=False)
    test_id = serializers.IntegerField(min_value=1, required=False)
    min_score = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False
    )
    max_score = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False
    )
    sort_by = serializers.CharField(required=False, default="submitted_at")
    sort_order = serializers.ChoiceField(choices=["asc", "desc"], required=False, default="desc")

    def validate_sort_by(self, value: str) -> str:
        value = self.sort_aliases.get(value, value)
        if value not in RESULT_SORT_FIELDS:
            raise serializers.ValidationError(
                f"Must be one of: {', '.join(RESULT_SORT_FIELDS)}."
            )
        return value

    def validate(self, attrs):
        min_score, max_score = attrs.get("min_score"), attrs.get("max_score")
        if min_score is not None and max_score is not None and min_score > max_score:
            raise serializers.ValidationError({"max_score": "Must not be below min_score."})
        return attrs

    def to_query(self) -> dict:
        """Keyword arguments for ScoringService.all_results()."""
        data = dict(self.validated_data)
        data["descending"] = data.pop("sort_order") == "desc"
        return data


class UserStatsSerializer(serializers.Serializer):
    total_attempts = serializers.IntegerField()
    tests_attempted = serializers.IntegerField()
    average_score = serializers.DecimalField(max_digits=5, decimal_places=2, allow_null=True)
    best_score = serializers.DecimalField(max_digits=5, decimal_places=2, allow_null=True)
    total_correct = serializers.IntegerField()
    total_wrong = serializers.IntegerField()
    total_unattempted = serializers.IntegerField()
    total_time_spent_seconds = serializers.IntegerField()
    accuracy = serializers.DecimalField(max_digits=5, decimal_places=2, allow_null=True)
