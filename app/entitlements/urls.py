"""
URL configuration for the entitlements app.

All routes are prefixed with /api/v1/entitlements/ when included in the main URLconf.
"""

from django.urls import path

from entitlements.views import CourseAccessView, EntitlementListView

app_name = "entitlements"

urlpatterns = [
    path(
        "access/<int:user_id>/<int:course_id>/",
        CourseAccessView.as_view(),
        name="course-access",
    ),
    path("<int:user_id>/", EntitlementListView.as_view(), name="list"),
]
