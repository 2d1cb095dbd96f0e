"""
URL configuration for the payments app.

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.

Usage:
    # In config/urls.py
    api_v1_patterns = [
        path("payments/", include("payments.urls")),
    ]
"""

from django.urls import path

from payments.views import (
    ActivateGatewayCredentialView,
    CreateOrderView,
    DashboardStatsView,
    GatewayCredentialListView,
    AllPaymentHistoryView,
    OrderStatusView,
    PaymentHistoryView,
)
from payments.webhooks.views import phonepe_callback

app_name = "payments"

urlpatterns = [
    path("orders/", CreateOrderView.as_view(), name="order-create"),
    path("orders/<str:transaction_id>/", OrderStatusView.as_view(), name="order-status"),
    path("history/", PaymentHistoryView.as_view(), name="history"),
    path("history/all/", AllPaymentHistoryView.as_view(), name="history-all"),
    path("dashboard/", DashboardStatsView.as_view(), name="dashboard"),
    path("credentials/", GatewayCredentialListView.as_view(), name="credentials"),
    path(
        "credentials/<int:pk>/activate/",
        ActivateGatewayCredentialView.as_view(),
        name="credential-activate",
    ),
    # Webhook endpoints
    path("webhooks/phonepe/", phonepe_callback, name="phonepe_callback"),
]
