"""
URL configuration for the assessments app.

All routes are prefixed with /api/v1/assessments/ when included in the main URLconf.
"""

from django.urls import path

from assessments.views import (
    AllResultsView,
    AttemptedTestsView,
    ResultDetailView,
    ResultListView,
    SubmitAttemptView,
    UserStatsView,
)

app_name = "assessments"

urlpatterns = [
    path("submit/", SubmitAttemptView.as_view(), name="submit"),
    path("results/", ResultListView.as_view(), name="result-list"),
    path("results/all/", AllResultsView.as_view(), name="result-all"),
    path("results/<uuid:pk>/", ResultDetailView.as_view(), name="result-detail"),
    path("stats/", UserStatsView.as_view(), name="stats"),
    path("attempted/", AttemptedTestsView.as_view(), name="attempted"),
]
