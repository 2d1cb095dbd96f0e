"""
DRF serializers for entitlement read models.

These serialize the dataclasses in entitlements.types; they never touch
Entitlement rows directly.
"""

from __future__ import annotations

from rest_framework import serializers


class CourseAccessSerializer(serializers.Serializer):
    purchased = serializers.BooleanField()
    expired = serializers.BooleanField()
    start_date = serializers.DateTimeField(allow_null=True)
    end_date = serializers.DateTimeField(allow_null=True)


class CourseEntitlementSerializer(serializers.Serializer):
    entitlement_id = serializers.IntegerField()
    course_id = serializers.IntegerField()
    course_name = serializers.CharField()
    transaction_id = serializers.CharField()
    purchase_date = serializers.DateTimeField()
    start_date = serializers.DateTimeField(allow_null=True)
    end_date = serializers.DateTimeField(allow_null=True)
    is_expired = serializers.BooleanField()


class TestEntitlementSerializer(serializers.Serializer):
    entitlement_id = serializers.IntegerField()
    test_id = serializers.IntegerField()
    test_title = serializers.CharField()
    granted_via = serializers.CharField()
    category_id = serializers.IntegerField(allow_null=True)
    transaction_id = serializers.CharField()
    purchase_date = serializers.DateTimeField()
    is_completed = serializers.BooleanField()
    result_id = serializers.CharField(allow_null=True)
    score = serializers.DecimalField(max_digits=5, decimal_places=2, allow_null=True)
    status_text = serializers.CharField()


class EntitlementOverviewSerializer(serializers.Serializer):
    courses = CourseEntitlementSerializer(many=True)
    tests = TestEntitlementSerializer(many=True)
