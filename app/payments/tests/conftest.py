"""
Pytest fixtures for payment tests.

Every test in this package runs against settings-backed gateway
credentials; no test talks to the network.

Usage:
    def test_create_order(user, course, gateway):
        gateway.return_value = pay_page_response("TXN-...")
"""

from decimal import Decimal
from unittest.mock import patch

import pytest

from catalog.tests.factories import CategoryFactory, CourseFactory, MockTestFactory
from payments.gateway import resolve_gateway_config
from payments.state_machines import PaymentKind
from payments.tests.factories import PaymentRecordFactory
from payments.tests.helpers import GATEWAY_REQUEST


@pytest.fixture(autouse=True)
def phonepe_settings(settings):
    """UAT-style gateway credentials from settings."""
    settings.PHONEPE_MERCHANT_ID = "MERCHANTUAT"
    settings.PHONEPE_SALT_KEY = "099eb0cd-02cf-4e2a-8aca-3e6c6aff0399"
    settings.PHONEPE_SALT_INDEX = 1
    settings.PHONEPE_BASE_URL = "https://gateway.test/pg-sandbox"
    settings.PHONEPE_REDIRECT_URL = "https://app.test/payment/return"
    settings.PHONEPE_CALLBACK_URL = "https://api.test/api/v1/payments/webhooks/phonepe/"
    settings.PHONEPE_API_TIMEOUT_SECONDS = 5
    return settings


@pytest.fixture
def gateway_config(db, phonepe_settings):
    return resolve_gateway_config()


@pytest.fixture
def gateway():
    """Patched ``requests.request`` used by the PhonePe adapter."""
    with patch(GATEWAY_REQUEST) as mock_request:
        yield mock_request


# =============================================================================
# Catalog Fixtures
# =============================================================================


@pytest.fixture
def course(db):
    return CourseFactory(discounted_price=Decimal("999.00"), duration_months=3)


@pytest.fixture
def paid_test(db):
    return MockTestFactory(price=Decimal("199.00"))


@pytest.fixture
def category_tests(db):
    return MockTestFactory.create_batch(3)


@pytest.fixture
def category(db, category_tests):
    return CategoryFactory(price=Decimal("499.00"), tests=category_tests)


# =============================================================================
# PaymentRecord Fixtures
# =============================================================================


@pytest.fixture
def pending_course_payment(db, user, course):
    return PaymentRecordFactory(
        user=user,
        kind=PaymentKind.COURSE,
        target_id=course.id,
        amount=course.discounted_price,
    )


@pytest.fixture
def pending_test_payment(db, user, paid_test):
    return PaymentRecordFactory(
        user=user,
        kind=PaymentKind.TEST,
        target_id=paid_test.id,
        amount=paid_test.price,
    )


@pytest.fixture
def pending_category_payment(db, user, category):
    return PaymentRecordFactory(
        user=user,
        kind=PaymentKind.CATEGORY,
        target_id=category.id,
        amount=category.price,
    )
