"""
URL configuration for the Django application.

The `urlpatterns` list routes URLs to views. This is the root URL configuration
that includes all app-specific routes.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/auth/                  - Authentication endpoints
        token/                     - Obtain JWT pair (email + password)
        token/refresh/             - Refresh access token
        me/                        - Current user
    /api/v1/catalog/               - Courses, mock tests and categories (read-only)
    /api/v1/payments/              - Payment endpoints
        orders/                    - Create order (POST)
        orders/{transaction_id}/   - Order status
        history/                   - Own payment history
        dashboard/                 - Revenue dashboard (staff)
        credentials/               - Gateway credential versions (staff)
        webhooks/phonepe/          - PhonePe callback endpoint (POST)
    /api/v1/entitlements/          - Access queries
        access/{user}/{course}/    - Course access window
        {user}/                    - All purchases of a user
    /api/v1/assessments/           - Mock test attempts
        submit/                    - Submit and score an attempt
        results/                   - Own results
        stats/                     - Own statistics
        attempted/                 - Ids of attempted tests

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    # Authentication (simplejwt)
    path("auth/", include("authentication.urls")),
    # Catalog
    path("catalog/", include("catalog.urls")),
    # Payments
    path("payments/", include("payments.urls")),
    # Entitlements
    path("entitlements/", include("entitlements.urls")),
    # Assessments
    path("assessments/", include("assessments.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "LMS Admin"
admin.site.site_title = "LMS Admin Portal"
admin.site.index_title = "Courses, tests and payments"
