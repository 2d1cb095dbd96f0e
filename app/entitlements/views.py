"""
Access query endpoints.

URL Structure:
    /api/v1/entitlements/access/{user_id}/{course_id}/   GET
    /api/v1/entitlements/{user_id}/                      GET

Both endpoints are read-only views over AccessQueryService.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from entitlements.permissions import IsSelfOrStaff
from entitlements.serializers import CourseAccessSerializer, EntitlementOverviewSerializer
from entitlements.services import AccessQueryService


class CourseAccessView(APIView):
    """Whether a user can open a course right now."""

    permission_classes = [IsAuthenticated, IsSelfOrStaff]

    @extend_schema(
        operation_id="get_course_access",
        summary="Check course access",
        responses={200: CourseAccessSerializer},
        tags=["Entitlements"],
    )
    def get(self, request, user_id: int, course_id: int):
        access = AccessQueryService.has_course_access(user_id, course_id)
        return Response(CourseAccessSerializer(access).data)


class EntitlementListView(APIView):
    """Every course window and test access a user holds."""

    permission_classes = [IsAuthenticated, IsSelfOrStaff]

    @extend_schema(
        operation_id="list_entitlements",
        summary="List purchases",
        responses={200: EntitlementOverviewSerializer},
        tags=["Entitlements"],
    )
    def get(self, request, user_id: int):
        overview = AccessQueryService.list_entitlements(user_id)
        return Response(EntitlementOverviewSerializer(overview).data)
