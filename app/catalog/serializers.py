"""
DRF serializers for the catalog.

Question payloads never include the correct option; answers are only
revealed through scored attempt results.
"""

from __future__ import annotations

from rest_framework import serializers

from catalog.models import Course, MockTest, Question, TestCategory


class CourseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Course
        fields = [
            "id",
            "name",
            "description",
            "price",
            "discounted_price",
            "duration_months",
        ]
        read_only_fields = fields


class MockTestSerializer(serializers.ModelSerializer):
    question_count = serializers.SerializerMethodField()

    class Meta:
        model = MockTest
        fields = [
            "id",
            "title",
            "description",
            "price",
            "is_paid",
            "duration_minutes",
            "question_count",
        ]
        read_only_fields = fields

    def get_question_count(self, obj) -> int:
        return obj.questions.filter(is_active=True).count()


class QuestionDeliverySerializer(serializers.ModelSerializer):
    """Question as delivered to a learner (no correct option)."""

    class Meta:
        model = Question
        fields = ["id", "text", "options", "position"]
        read_only_fields = fields


class TestCategorySerializer(serializers.ModelSerializer):
    test_ids = serializers.PrimaryKeyRelatedField(source="tests", many=True, read_only=True)

    class Meta:
        model = TestCategory
        fields = [
            "id",
            "name",
            "description",
            "price",
            "category_type",
            "test_ids",
        ]
        read_only_fields = fields
