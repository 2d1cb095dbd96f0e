"""
Read-only catalog endpoints.

URL Structure:
    /api/v1/catalog/courses/                   GET
    /api/v1/catalog/courses/{id}/              GET
    /api/v1/catalog/tests/                     GET
    /api/v1/catalog/tests/{id}/                GET
    /api/v1/catalog/tests/{id}/questions/      GET
    /api/v1/catalog/categories/                GET
    /api/v1/catalog/categories/{id}/           GET

Catalog maintenance happens through the Django admin.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from catalog.models import Course, MockTest, TestCategory
from catalog.serializers import (
    CourseSerializer,
    MockTestSerializer,
    QuestionDeliverySerializer,
    TestCategorySerializer,
)
from catalog.services import CatalogService


@extend_schema_view(
    list=extend_schema(operation_id="list_courses", summary="List courses", tags=["Catalog"]),
    retrieve=extend_schema(operation_id="get_course", summary="Get course", tags=["Catalog"]),
)
class CourseViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Course.objects.filter(is_active=True)
    serializer_class = CourseSerializer


@extend_schema_view(
    list=extend_schema(operation_id="list_tests", summary="List mock tests", tags=["Catalog"]),
    retrieve=extend_schema(operation_id="get_test", summary="Get mock test", tags=["Catalog"]),
)
class MockTestViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = MockTest.objects.filter(is_active=True)
    serializer_class = MockTestSerializer

    @extend_schema(
        operation_id="list_test_questions",
        summary="Active questions of a test, in answer order",
        responses={200: QuestionDeliverySerializer(many=True)},
        tags=["Catalog"],
    )
    @action(detail=True, methods=["get"], pagination_class=None)
    def questions(self, request, pk=None):
        """Return the active question list the answers must be aligned to."""
        test = self.get_object()
        questions = CatalogService.active_questions(test)
        return Response(QuestionDeliverySerializer(questions, many=True).data)


@extend_schema_view(
    list=extend_schema(operation_id="list_categories", summary="List test categories", tags=["Catalog"]),
    retrieve=extend_schema(operation_id="get_category", summary="Get test category", tags=["Catalog"]),
)
class TestCategoryViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = TestCategory.objects.filter(is_active=True).prefetch_related("tests")
    serializer_class = TestCategorySerializer
