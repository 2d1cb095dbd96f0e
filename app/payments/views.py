"""
DRF views for payments app.

Endpoints:
    POST /api/v1/payments/orders/                        Create an order
    GET  /api/v1/payments/orders/{transaction_id}/       Order status (polls gateway if pending)
    GET  /api/v1/payments/history/                       Own payment history (?kind=&targetId=)
    GET  /api/v1/payments/history/all/                   All payments (staff; ?search=&filter=&from=&to=)
    GET  /api/v1/payments/dashboard/                     Revenue dashboard (staff)
    GET  /api/v1/payments/credentials/                   Credential versions (staff)
    POST /api/v1/payments/credentials/                   Store a credential version (staff)
    POST /api/v1/payments/credentials/{id}/activate/     Switch active credential (staff)
    POST /api/v1/payments/webhooks/phonepe/              Gateway callback (see webhooks/views.py)

Security:
    - All endpoints require authentication except the callback
    - The callback verifies the X-VERIFY signature
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import PermissionDeniedError
from core.services import ServiceResult
from core.views import service_error_response
from payments.serializers import (
    ActiveGatewayCredentialSerializer,
    AdminPaymentRecordSerializer,
    AllPaymentsFilterSerializer,
    CreateOrderSerializer,
    DashboardStatsSerializer,
    GatewayCredentialCreateSerializer,
    GatewayCredentialSerializer,
    OrderResponseSerializer,
    PaymentHistoryFilterSerializer,
    PaymentRecordSerializer,
)
from payments.services import (
    GatewayCredentialService,
    PaymentReconciler,
    PaymentReportingService,
)


class CreateOrderView(APIView):
    """
    Create a pending order and return the hosted payment page.

    POST /api/v1/payments/orders/

    Returns:
        201 with transaction_id and pay_url
        404 item not found or inactive, 409 category already owned,
        502/503 gateway failures (the order is kept pending)
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="create_order",
        summary="Create a payment order",
        request=CreateOrderSerializer,
        responses={201: OrderResponseSerializer},
        tags=["Payments"],
    )
    def post(self, request):
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        claimed_user_id = data.get("user_id")
        if claimed_user_id is not None and claimed_user_id != request.user.id:
            return service_error_response(
                ServiceResult.from_exception(
                    PermissionDeniedError("Cannot place an order on behalf of another user")
                )
            )

        result = PaymentReconciler.create_order(request.user, data["kind"], data["target_id"])
        if not result.success:
            return service_error_response(result)
        return Response(OrderResponseSerializer(result.data).data, status=status.HTTP_201_CREATED)


class OrderStatusView(APIView):
    """
    Current state of one of the requester's orders.

    Pending orders are checked against the gateway status API first.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_order_status",
        summary="Get payment status",
        responses={200: PaymentRecordSerializer},
        tags=["Payments"],
    )
    def get(self, request, transaction_id: str):
        result = PaymentReconciler.check_status(transaction_id, user=request.user)
        if not result.success:
            return service_error_response(result)
        return Response(PaymentRecordSerializer(result.data).data)


@extend_schema(
    parameters=[
        OpenApiParameter("kind", str, description="course, test or category"),
        OpenApiParameter("targetId", int, description="Only payments for this item"),
    ],
    tags=["Payments"],
)
class PaymentHistoryView(generics.ListAPIView):
    """The requester's payments, newest first."""

    permission_classes = [IsAuthenticated]
    serializer_class = PaymentRecordSerializer

    def get_queryset(self):
        filters = PaymentHistoryFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        return PaymentReportingService.payment_history(
            self.request.user.id,
            kind=filters.validated_data.get("kind"),
            target_id=filters.validated_data.get("target_id"),
        )


@extend_schema(
    parameters=[
        OpenApiParameter("search", str, description="Buyer email, name or phone, transaction id, item name"),
        OpenApiParameter("filter", str, description="today, week, month, year or custom"),
        OpenApiParameter("from", str, description="First day of a custom period (YYYY-MM-DD)"),
        OpenApiParameter("to", str, description="Last day of a custom period (YYYY-MM-DD)"),
        OpenApiParameter("kind", str, description="course, test or category"),
        OpenApiParameter("status", str, description="pending, success or failed"),
    ],
    tags=["Payments"],
)
class AllPaymentHistoryView(generics.ListAPIView):
    """Every user's payments for staff, newest first."""

    permission_classes = [IsAdminUser]
    serializer_class = AdminPaymentRecordSerializer

    def get_queryset(self):
        filters = AllPaymentsFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        return PaymentReportingService.all_payments(**filters.validated_data)


class DashboardStatsView(APIView):
    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="get_payment_dashboard",
        summary="Revenue dashboard",
        parameters=[OpenApiParameter("year", int)],
        responses={200: DashboardStatsSerializer},
        tags=["Payments"],
    )
    def get(self, request):
        year = request.query_params.get("year")
        stats = PaymentReportingService.dashboard_stats(
            year=int(year) if year and year.isdigit() else None
        )
        return Response(DashboardStatsSerializer(stats).data)


class GatewayCredentialListView(APIView):
    """List stored credential versions or store a new one."""

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="list_gateway_credentials",
        responses={200: GatewayCredentialSerializer(many=True)},
        tags=["Payments"],
    )
    def get(self, request):
        active = GatewayCredentialService.active()
        serializer = GatewayCredentialSerializer(
            GatewayCredentialService.list_credentials(request.query_params.get("environment")),
            many=True,
            context={"active_credential_id": active.credential_id if active else None},
        )
        return Response(serializer.data)

    @extend_schema(
        operation_id="create_gateway_credential",
        request=GatewayCredentialCreateSerializer,
        responses={201: GatewayCredentialSerializer},
        tags=["Payments"],
    )
    def post(self, request):
        serializer = GatewayCredentialCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = GatewayCredentialService.create_credential(
            created_by=request.user,
            **serializer.validated_data,
        )
        if not result.success:
            return service_error_response(result)

        active = GatewayCredentialService.active()
        return Response(
            GatewayCredentialSerializer(
                result.data,
                context={"active_credential_id": active.credential_id if active else None},
            ).data,
            status=status.HTTP_201_CREATED,
        )


class ActivateGatewayCredentialView(APIView):
    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="activate_gateway_credential",
        request=None,
        responses={200: ActiveGatewayCredentialSerializer},
        tags=["Payments"],
    )
    def post(self, request, pk: int):
        result = GatewayCredentialService.activate(pk, activated_by=request.user)
        if not result.success:
            return service_error_response(result)
        return Response(
            ActiveGatewayCredentialSerializer(
                result.data,
                context={"active_credential_id": result.data.credential_id},
            ).data
        )
