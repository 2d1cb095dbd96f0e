"""
Tests for payment endpoints.
"""

import pytest
import requests
from freezegun import freeze_time
from rest_framework import status

from payments.models import PaymentRecord
from payments.state_machines import PaymentKind, PaymentStatus
from payments.tests.factories import GatewayCredentialFactory, PaymentRecordFactory
from payments.tests.helpers import pay_page_response, status_response

ORDERS_URL = "/api/v1/payments/orders/"
HISTORY_URL = "/api/v1/payments/history/"
ALL_HISTORY_URL = "/api/v1/payments/history/all/"
DASHBOARD_URL = "/api/v1/payments/dashboard/"
CREDENTIALS_URL = "/api/v1/payments/credentials/"


@pytest.mark.django_db
class TestCreateOrderView:
    def test_creates_order(self, authenticated_client, user, course, gateway):
        """
        Given an active course
        When the learner orders it
        Then 201 is returned with the hosted page URL and a pending record exists
        """
        gateway.return_value = pay_page_response("ignored")

        response = authenticated_client.post(
            ORDERS_URL, {"kind": "course", "target_id": course.id}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["pay_url"] == "https://pay.test/hosted/abc"
        assert response.data["amount"] == "999.00"
        assert response.data["status"] == PaymentStatus.PENDING
        assert PaymentRecord.objects.get(transaction_id=response.data["transaction_id"]).user == user

    def test_accepts_mobile_field_names(self, authenticated_client, user, category, gateway):
        gateway.return_value = pay_page_response("ignored")

        response = authenticated_client.post(
            ORDERS_URL,
            {"paymentType": "category", "paymentForId": category.id, "userId": user.id},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert PaymentRecord.objects.get().kind == PaymentKind.CATEGORY

    def test_ordering_for_someone_else_is_forbidden(self, authenticated_client, other_user, course, gateway):
        response = authenticated_client.post(
            ORDERS_URL,
            {"kind": "course", "target_id": course.id, "userId": other_user.id},
            format="json",
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not PaymentRecord.objects.exists()

    def test_unknown_item_returns_404(self, authenticated_client, gateway):
        response = authenticated_client.post(
            ORDERS_URL, {"kind": "test", "target_id": 987654}, format="json"
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_owned_category_returns_409(self, authenticated_client, user, category, gateway):
        PaymentRecordFactory(
            user=user,
            kind=PaymentKind.CATEGORY,
            target_id=category.id,
            status=PaymentStatus.SUCCESS,
        )

        response = authenticated_client.post(
            ORDERS_URL, {"kind": "category", "target_id": category.id}, format="json"
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "ALREADY_OWNED"

    def test_invalid_kind_returns_400(self, authenticated_client, gateway):
        response = authenticated_client.post(ORDERS_URL, {"kind": "bundle", "target_id": 1}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_gateway_outage_returns_502(self, authenticated_client, course, gateway):
        gateway.side_effect = requests.ConnectionError("down")

        response = authenticated_client.post(
            ORDERS_URL, {"kind": "course", "target_id": course.id}, format="json"
        )

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert PaymentRecord.objects.get().status == PaymentStatus.PENDING

    def test_requires_authentication(self, api_client, course):
        response = api_client.post(ORDERS_URL, {"kind": "course", "target_id": course.id}, format="json")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestOrderStatusView:
    def test_polls_pending_order(self, authenticated_client, pending_course_payment, gateway):
        gateway.return_value = status_response(pending_course_payment.transaction_id)

        response = authenticated_client.get(f"{ORDERS_URL}{pending_course_payment.transaction_id}/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == PaymentStatus.SUCCESS

    def test_other_users_order_returns_404(self, authenticated_client, other_user, gateway):
        record = PaymentRecordFactory(user=other_user)

        response = authenticated_client.get(f"{ORDERS_URL}{record.transaction_id}/")

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestPaymentHistoryView:
    def test_lists_own_payments(self, authenticated_client, user, other_user):
        PaymentRecordFactory(user=user, kind=PaymentKind.COURSE)
        PaymentRecordFactory(user=user, kind=PaymentKind.TEST, target_id=5)
        PaymentRecordFactory(user=other_user)

        response = authenticated_client.get(HISTORY_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data["count"] == 2

    def test_filters_by_item(self, authenticated_client, user):
        PaymentRecordFactory(user=user, kind=PaymentKind.COURSE, target_id=5)
        PaymentRecordFactory(user=user, kind=PaymentKind.TEST, target_id=5)

        response = authenticated_client.get(HISTORY_URL, {"paymentType": "test", "targetId": 5})

        assert response.data["count"] == 1
        assert response.data["results"][0]["kind"] == PaymentKind.TEST


@pytest.mark.django_db
class TestStaffEndpoints:
    def test_dashboard_requires_staff(self, authenticated_client):
        assert authenticated_client.get(DASHBOARD_URL).status_code == status.HTTP_403_FORBIDDEN

    def test_dashboard(self, staff_client):
        response = staff_client.get(DASHBOARD_URL, {"year": 2026})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["year"] == 2026
        assert len(response.data["monthly"]) == 12

    def test_store_credential_hides_salt(self, staff_client):
        response = staff_client.post(
            CREDENTIALS_URL,
            {
                "environment": "uat",
                "merchant_id": "MERCHANTUAT",
                "salt_key": "abcdefgh1234",
                "salt_index": 1,
                "base_url": "https://gateway.test/pg-sandbox",
                "activate": True,
            },
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["version"] == 1
        assert response.data["is_active"] is True
        assert response.data["masked_salt_key"] == "********1234"
        assert "salt_key" not in response.data

    def test_list_and_activate(self, staff_client):
        credential = GatewayCredentialFactory()

        activated = staff_client.post(f"{CREDENTIALS_URL}{credential.id}/activate/")
        listed = staff_client.get(CREDENTIALS_URL)

        assert activated.status_code == status.HTTP_200_OK
        assert activated.data["credential"]["id"] == credential.id
        assert listed.data[0]["is_active"] is True

    def test_credentials_require_staff(self, authenticated_client):
        assert authenticated_client.get(CREDENTIALS_URL).status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestAllPaymentHistoryView:
    def test_requires_staff(self, authenticated_client):
        response = authenticated_client.get(ALL_HISTORY_URL)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_lists_every_users_payments_with_buyer(self, staff_client, user, other_user):
        PaymentRecordFactory(user=user)
        PaymentRecordFactory(user=other_user)

        response = staff_client.get(ALL_HISTORY_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data["count"] == 2
        assert {row["user_email"] for row in response.data["results"]} == {user.email, other_user.email}

    def test_search_and_period(self, staff_client, user, other_user):
        recent = PaymentRecordFactory(user=user)
        PaymentRecordFactory(user=other_user)
        with freeze_time("2020-08-01 09:00:00"):
            PaymentRecordFactory(user=user)

        response = staff_client.get(ALL_HISTORY_URL, {"search": user.email, "filter": "year"})

        assert response.data["count"] == 1
        assert response.data["results"][0]["transaction_id"] == recent.transaction_id

    def test_custom_period_with_from_and_to(self, staff_client, user):
        with freeze_time("2019-03-05 09:00:00"):
            march = PaymentRecordFactory(user=user)
        PaymentRecordFactory(user=user)

        response = staff_client.get(
            ALL_HISTORY_URL, {"filter": "custom", "from": "2019-03-01", "to": "2019-03-31"}
        )

        assert response.data["count"] == 1
        assert response.data["results"][0]["id"] == str(march.id)

    def test_custom_period_requires_both_bounds(self, staff_client):
        response = staff_client.get(ALL_HISTORY_URL, {"filter": "custom", "from": "2026-03-01"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_period_is_rejected(self, staff_client):
        response = staff_client.get(ALL_HISTORY_URL, {"filter": "decade"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
