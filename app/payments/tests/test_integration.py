"""
End-to-end purchase journeys through the public API.

Order -> signed gateway callback -> access query -> attempt submission,
with only the gateway HTTP layer faked.
"""

import pytest
from rest_framework import status

from catalog.tests.factories import QuestionFactory
from payments.tests.helpers import gateway_json, pay_page_response, signed_callback

ORDERS_URL = "/api/v1/payments/orders/"
CALLBACK_URL = "/api/v1/payments/webhooks/phonepe/"


def place_order(client, gateway, kind, target_id):
    gateway.return_value = pay_page_response("ignored")
    response = client.post(ORDERS_URL, {"kind": kind, "target_id": target_id}, format="json")
    assert response.status_code == status.HTTP_201_CREATED
    return response.data["transaction_id"]


def deliver_callback(api_client, config, transaction_id, code="PAYMENT_SUCCESS", amount_minor=None):
    data = gateway_json(transaction_id, code=code)
    if amount_minor is not None:
        data["data"]["amount"] = amount_minor
    body, x_verify = signed_callback(config, data)
    return api_client.generic(
        "POST", CALLBACK_URL, body, content_type="application/json", HTTP_X_VERIFY=x_verify
    )


@pytest.mark.django_db
class TestCoursePurchaseJourney:
    def test_paid_course_opens_access_window(
        self, authenticated_client, api_client, user, course, gateway, gateway_config
    ):
        access_url = f"/api/v1/entitlements/access/{user.id}/{course.id}/"
        assert authenticated_client.get(access_url).data["purchased"] is False

        transaction_id = place_order(authenticated_client, gateway, "course", course.id)
        callback = deliver_callback(api_client, gateway_config, transaction_id, amount_minor=99900)

        assert callback.status_code == status.HTTP_200_OK
        access = authenticated_client.get(access_url).data
        assert access["purchased"] is True
        assert access["expired"] is False

    def test_failed_payment_grants_nothing(
        self, authenticated_client, api_client, user, course, gateway, gateway_config
    ):
        transaction_id = place_order(authenticated_client, gateway, "course", course.id)
        deliver_callback(api_client, gateway_config, transaction_id, code="PAYMENT_ERROR")

        history = authenticated_client.get("/api/v1/payments/history/").data
        access = authenticated_client.get(f"/api/v1/entitlements/access/{user.id}/{course.id}/").data
        assert history["results"][0]["status"] == "failed"
        assert access["purchased"] is False


@pytest.mark.django_db
class TestCategoryPurchaseJourney:
    def test_category_purchase_then_attempt(
        self, authenticated_client, api_client, user, category, category_tests, gateway, gateway_config
    ):
        transaction_id = place_order(authenticated_client, gateway, "category", category.id)
        deliver_callback(api_client, gateway_config, transaction_id, amount_minor=49900)

        purchases = authenticated_client.get(f"/api/v1/entitlements/{user.id}/").data
        assert len(purchases["tests"]) == len(category_tests)
        assert {row["status_text"] for row in purchases["tests"]} == {"Not attempted yet"}

        attempted = category_tests[0]
        for position, correct in enumerate([0, 1, 2, 3]):
            QuestionFactory(test=attempted, correct_option_index=correct, position=position)
        submitted = authenticated_client.post(
            "/api/v1/assessments/submit/",
            {"mockTestId": attempted.id, "userAnswers": [0, 1, 2, None]},
            format="json",
        )
        assert submitted.status_code == status.HTTP_201_CREATED
        assert submitted.data["score"] == "75.00"

        purchases = authenticated_client.get(f"/api/v1/entitlements/{user.id}/").data
        by_test = {row["test_id"]: row for row in purchases["tests"]}
        assert by_test[attempted.id]["is_completed"] is True
        assert by_test[attempted.id]["status_text"] == "Completed - Score: 75%"

        second_order = authenticated_client.post(
            ORDERS_URL, {"kind": "category", "target_id": category.id}, format="json"
        )
        assert second_order.status_code == status.HTTP_409_CONFLICT
