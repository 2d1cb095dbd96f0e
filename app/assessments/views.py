"""
Assessment endpoints.

URL Structure:
    /api/v1/assessments/submit/              POST  Submit an attempt
    /api/v1/assessments/results/             GET   Own results (paginated, ?testId=)
    /api/v1/assessments/results/all/         GET   All learners' results (staff; filters, sortBy, sortOrder)
    /api/v1/assessments/results/{id}/        GET   One result with breakdown
    /api/v1/assessments/stats/               GET   Own aggregate statistics
    /api/v1/assessments/attempted/           GET   Ids of tests attempted
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from assessments.serializers import (
    AdminAttemptSummarySerializer,
    AllResultsFilterSerializer,
    SubmissionSerializer,
    TestAttemptResultSerializer,
    TestAttemptSummarySerializer,
    UserStatsSerializer,
)
from assessments.services import ScoringService
from core.views import service_error_response


class SubmitAttemptView(APIView):
    """Score an attempt and store the result."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="submit_attempt",
        summary="Submit a mock test attempt",
        request=SubmissionSerializer,
        responses={201: TestAttemptResultSerializer},
        tags=["Assessments"],
    )
    def post(self, request):
        serializer = SubmissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        claimed_user_id = serializer.validated_data.get("user_id")
        if claimed_user_id is not None and claimed_user_id != request.user.id:
            return Response(
                {
                    "error": "Cannot submit an attempt on behalf of another user",
                    "error_code": "PERMISSION_DENIED",
                },
                status=status.HTTP_403_FORBIDDEN,
            )

        result = ScoringService.submit(request.user, serializer.to_submission())
        if not result.success:
            return service_error_response(result)
        return Response(
            TestAttemptResultSerializer(result.data).data,
            status=status.HTTP_201_CREATED,
        )


@extend_schema(
    parameters=[
        OpenApiParameter("testId", int, description="Only results for this test"),
    ],
    tags=["Assessments"],
)
class ResultListView(generics.ListAPIView):
    """The requester's attempt results, newest first."""

    permission_classes = [IsAuthenticated]
    serializer_class = TestAttemptSummarySerializer

    def get_queryset(self):
        test_id = self.request.query_params.get("testId") or self.request.query_params.get("test_id")
        return ScoringService.results_for_user(
            self.request.user.id,
            test_id=int(test_id) if test_id and test_id.isdigit() else None,
        )


@extend_schema(
    parameters=[
        OpenApiParameter("userId", int, description="Only this learner's results"),
        OpenApiParameter("testId", int, description="Only results for this test"),
        OpenApiParameter("minScore", float, description="Lowest score included"),
        OpenApiParameter("maxScore", float, description="Highest score included"),
        OpenApiParameter(
            "sortBy",
            str,
            description="submitted_at (default), score, total_time_spent_seconds or correct_count",
        ),
        OpenApiParameter("sortOrder", str, description="asc or desc (default)"),
    ],
    tags=["Assessments"],
)
class AllResultsView(generics.ListAPIView):
    """Every learner's results for staff."""

    permission_classes = [IsAdminUser]
    serializer_class = AdminAttemptSummarySerializer

    def get_queryset(self):
        filters = AllResultsFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        return ScoringService.all_results(**filters.to_query())


@extend_schema(tags=["Assessments"])
class ResultDetailView(generics.RetrieveAPIView):
    """One of the requester's results including the per-question breakdown."""

    permission_classes = [IsAuthenticated]
    serializer_class = TestAttemptResultSerializer

    def get_queryset(self):
        return ScoringService.results_for_user(self.request.user.id)


class UserStatsView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_attempt_stats",
        summary="Aggregate attempt statistics",
        responses={200: UserStatsSerializer},
        tags=["Assessments"],
    )
    def get(self, request):
        stats = ScoringService.user_stats(request.user.id)
        return Response(UserStatsSerializer(stats).data)


class AttemptedTestsView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_attempted_tests",
        summary="Ids of tests the requester has attempted",
        tags=["Assessments"],
    )
    def get(self, request):
        return Response({"test_ids": ScoringService.attempted_test_ids(request.user.id)})
