"""
Tests for order creation, status polling, reporting and credentials.
"""

from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal

import pytest
import requests
from freezegun import freeze_time

from authentication.tests.factories import UserFactory
from catalog.tests.factories import CategoryFactory, CourseFactory, MockTestFactory
from entitlements.models import Entitlement
from payments.models import ActiveGatewayCredential, PaymentRecord
from payments.services import (
    GatewayCredentialService,
    PaymentReconciler,
    PaymentReportingService,
)
from payments.state_machines import PaymentKind, PaymentStatus
from payments.tests.factories import GatewayCredentialFactory, PaymentRecordFactory
from payments.tests.helpers import (
    decode_pay_request,
    http_response,
    pay_page_response,
    status_response,
)

pytestmark = pytest.mark.django_db


class TestCreateOrder:
    def test_course_order_uses_discounted_price(self, user, course, gateway):
        gateway.return_value = pay_page_response("ignored")

        result = PaymentReconciler.create_order(user, PaymentKind.COURSE, course.id)

        assert result.success
        record = PaymentRecord.objects.get(transaction_id=result.data.transaction_id)
        assert record.status == PaymentStatus.PENDING
        assert record.amount == Decimal("999.00")
        assert record.pay_url == "https://pay.test/hosted/abc"
        assert result.data.pay_url == "https://pay.test/hosted/abc"

    def test_test_and_category_prices(self, user, paid_test, category, gateway):
        gateway.return_value = pay_page_response("ignored")

        test_order = PaymentReconciler.create_order(user, PaymentKind.TEST, paid_test.id)
        category_order = PaymentReconciler.create_order(user, PaymentKind.CATEGORY, category.id)

        assert test_order.data.amount == Decimal("199.00")
        assert category_order.data.amount == Decimal("499.00")

    def test_gateway_is_sent_paise(self, user, course, gateway):
        gateway.return_value = pay_page_response("ignored")

        PaymentReconciler.create_order(user, PaymentKind.COURSE, course.id)

        assert decode_pay_request(gateway)["amount"] == 99900

    @pytest.mark.parametrize("kind", [PaymentKind.COURSE, PaymentKind.TEST, PaymentKind.CATEGORY])
    def test_missing_target(self, user, gateway, kind):
        result = PaymentReconciler.create_order(user, kind, 999999)

        assert result.error_code == "NOT_FOUND"
        assert not PaymentRecord.objects.exists()
        gateway.assert_not_called()

    def test_inactive_course_cannot_be_bought(self, user, gateway):
        course = CourseFactory(is_active=False)

        result = PaymentReconciler.create_order(user, PaymentKind.COURSE, course.id)

        assert result.error_code == "NOT_FOUND"
        assert not PaymentRecord.objects.exists()

    def test_free_item_is_rejected(self, user, gateway):
        course = CourseFactory(discounted_price=Decimal("0.00"))

        result = PaymentReconciler.create_order(user, PaymentKind.COURSE, course.id)

        assert result.error_code == "INVALID_AMOUNT"
        assert not PaymentRecord.objects.exists()
        gateway.assert_not_called()

    def test_unknown_kind(self, user, gateway):
        result = PaymentReconciler.create_order(user, "bundle", 1)

        assert result.error_code == "INVALID_KIND"

    def test_owned_category_is_rejected(self, user, category, gateway):
        PaymentRecordFactory(
            user=user,
            kind=PaymentKind.CATEGORY,
            target_id=category.id,
            amount=category.price,
            status=PaymentStatus.SUCCESS,
        )

        result = PaymentReconciler.create_order(user, PaymentKind.CATEGORY, category.id)

        assert result.error_code == "ALREADY_OWNED"
        gateway.assert_not_called()

    def test_ownership_is_checked_before_price(self, user, gateway):
        """
        Given a category the user bought that has since been made free
        When the user orders it again
        Then ALREADY_OWNED is reported rather than INVALID_AMOUNT
        """
        category = CategoryFactory(price=Decimal("0.00"))
        PaymentRecordFactory(
            user=user,
            kind=PaymentKind.CATEGORY,
            target_id=category.id,
            amount=Decimal("499.00"),
            status=PaymentStatus.SUCCESS,
        )

        result = PaymentReconciler.create_order(user, PaymentKind.CATEGORY, category.id)

        assert result.error_code == "ALREADY_OWNED"
        assert PaymentRecord.objects.count() == 1
        gateway.assert_not_called()

    def test_failed_category_purchase_does_not_block(self, user, category, gateway):
        gateway.return_value = pay_page_response("ignored")
        PaymentRecordFactory(
            user=user,
            kind=PaymentKind.CATEGORY,
            target_id=category.id,
            amount=category.price,
            status=PaymentStatus.FAILED,
        )

        assert PaymentReconciler.create_order(user, PaymentKind.CATEGORY, category.id).success

    def test_courses_and_tests_may_be_bought_again(self, user, course, gateway):
        gateway.return_value = pay_page_response("ignored")
        PaymentRecordFactory(
            user=user, kind=PaymentKind.COURSE, target_id=course.id, status=PaymentStatus.SUCCESS
        )

        assert PaymentReconciler.create_order(user, PaymentKind.COURSE, course.id).success

    def test_gateway_timeout_keeps_pending_record(self, user, course, gateway):
        gateway.side_effect = requests.Timeout("slow")

        result = PaymentReconciler.create_order(user, PaymentKind.COURSE, course.id)

        assert result.error_code == "GATEWAY_TIMEOUT"
        record = PaymentRecord.objects.get()
        assert record.status == PaymentStatus.PENDING
        assert record.pay_url == ""
        assert result.details["transaction_id"] == record.transaction_id

    def test_gateway_rejection_keeps_pending_record(self, user, course, gateway):
        gateway.return_value = http_response({"success": False, "code": "BAD_REQUEST"}, status_code=400)

        result = PaymentReconciler.create_order(user, PaymentKind.COURSE, course.id)

        assert result.error_code == "GATEWAY_ERROR"
        assert PaymentRecord.objects.get().status == PaymentStatus.PENDING

    def test_gateway_not_configured(self, user, course, gateway, settings):
        settings.PHONEPE_SALT_KEY = ""

        result = PaymentReconciler.create_order(user, PaymentKind.COURSE, course.id)

        assert result.error_code == "GATEWAY_NOT_CONFIGURED"
        gateway.assert_not_called()

    def test_every_order_gets_its_own_transaction(self, user, course, gateway):
        gateway.return_value = pay_page_response("ignored")

        first = PaymentReconciler.create_order(user, PaymentKind.COURSE, course.id)
        second = PaymentReconciler.create_order(user, PaymentKind.COURSE, course.id)

        assert first.data.transaction_id != second.data.transaction_id
        assert PaymentRecord.objects.count() == 2


class TestCheckStatus:
    def test_success_is_applied(self, pending_course_payment, gateway):
        gateway.return_value = status_response(pending_course_payment.transaction_id)

        result = PaymentReconciler.check_status(pending_course_payment.transaction_id)

        assert result.success
        assert result.data.status == PaymentStatus.SUCCESS
        assert Entitlement.objects.filter(user=pending_course_payment.user).count() == 1

    def test_pending_answer_changes_nothing(self, pending_course_payment, gateway):
        gateway.return_value = status_response(
            pending_course_payment.transaction_id, code="PAYMENT_PENDING", state="PENDING"
        )

        result = PaymentReconciler.check_status(pending_course_payment.transaction_id)

        assert result.data.status == PaymentStatus.PENDING

    def test_failure_is_applied(self, pending_course_payment, gateway):
        gateway.return_value = status_response(
            pending_course_payment.transaction_id, code="PAYMENT_ERROR", state="FAILED"
        )

        result = PaymentReconciler.check_status(pending_course_payment.transaction_id)

        assert result.data.status == PaymentStatus.FAILED
        assert not Entitlement.objects.exists()

    def test_terminal_record_skips_gateway(self, user, gateway):
        record = PaymentRecordFactory(user=user, status=PaymentStatus.SUCCESS)

        result = PaymentReconciler.check_status(record.transaction_id)

        assert result.data.status == PaymentStatus.SUCCESS
        gateway.assert_not_called()

    def test_other_users_record_is_hidden(self, pending_course_payment, other_user, gateway):
        result = PaymentReconciler.check_status(pending_course_payment.transaction_id, user=other_user)

        assert result.error_code == "NOT_FOUND"
        gateway.assert_not_called()

    def test_gateway_failure_is_reported(self, pending_course_payment, gateway):
        gateway.side_effect = requests.ConnectionError("down")

        result = PaymentReconciler.check_status(pending_course_payment.transaction_id)

        assert result.error_code == "GATEWAY_ERROR"
        assert PaymentRecord.objects.get(pk=pending_course_payment.pk).status == PaymentStatus.PENDING


class TestReporting:
    def test_history_is_per_user_and_filterable(self, user, other_user):
        course_payment = PaymentRecordFactory(user=user, kind=PaymentKind.COURSE, target_id=1)
        test_payment = PaymentRecordFactory(user=user, kind=PaymentKind.TEST, target_id=7)
        PaymentRecordFactory(user=other_user)

        assert set(PaymentReportingService.payment_history(user.id)) == {course_payment, test_payment}
        assert list(PaymentReportingService.payment_history(user.id, kind=PaymentKind.TEST)) == [test_payment]
        assert list(
            PaymentReportingService.payment_history(user.id, kind=PaymentKind.COURSE, target_id=1)
        ) == [course_payment]

    def test_dashboard_stats(self, user):
        with freeze_time(datetime(2026, 3, 10, tzinfo=dt_timezone.utc)):
            for kind, amount in [(PaymentKind.COURSE, "999.00"), (PaymentKind.TEST, "199.00")]:
                record = PaymentRecordFactory(user=user, kind=kind, amount=Decimal(amount))
                record.mark_success(gateway_code="PAYMENT_SUCCESS")
                record.save()
        with freeze_time(datetime(2026, 7, 2, tzinfo=dt_timezone.utc)):
            record = PaymentRecordFactory(user=user, kind=PaymentKind.CATEGORY, amount=Decimal("499.00"))
            record.mark_success(gateway_code="PAYMENT_SUCCESS")
            record.save()
        PaymentRecordFactory(user=user, status=PaymentStatus.FAILED)
        PaymentRecordFactory(user=user)

        stats = PaymentReportingService.dashboard_stats(year=2026)

        assert stats["total_revenue"] == Decimal("1697.00")
        assert stats["status_counts"] == {"pending": 1, "success": 3, "failed": 1}
        assert len(stats["monthly"]) == 12
        assert stats["monthly"][2] == {
            "month": 3,
            "course": Decimal("999.00"),
            "test": Decimal("199.00"),
            "category": Decimal("0.00"),
        }
        assert stats["monthly"][6]["category"] == Decimal("499.00")
        assert stats["monthly"][0]["course"] == Decimal("0.00")

    def test_dashboard_on_empty_ledger(self):
        stats = PaymentReportingService.dashboard_stats(year=2026)

        assert stats["total_revenue"] == Decimal("0.00")
        assert stats["status_counts"] == {"pending": 0, "success": 0, "failed": 0}


def _record_at(moment, **kwargs):
    with freeze_time(moment):
        return PaymentRecordFactory(**kwargs)


class TestStaffPaymentListing:
    """Tests for PaymentReportingService.all_payments()."""

    @pytest.fixture
    def dated_records(self, user):
        """Records around Wednesday 2026-10-14; its week starts Sunday 2026-10-11."""
        return {
            "today": _record_at("2026-10-14 09:00:00", user=user),
            "sunday": _record_at("2026-10-11 08:00:00", user=user),
            "saturday": _record_at("2026-10-10 20:00:00", user=user),
            "september": _record_at("2026-09-30 12:00:00", user=user),
            "last_year": _record_at("2025-12-31 23:00:00", user=user),
        }

    @pytest.mark.parametrize(
        "period,expected",
        [
            ("today", {"today"}),
            ("week", {"today", "sunday"}),
            ("month", {"today", "sunday", "saturday"}),
            ("year", {"today", "sunday", "saturday", "september"}),
        ],
    )
    def test_calendar_periods(self, dated_records, period, expected):
        with freeze_time("2026-10-14 15:00:00"):
            records = set(PaymentReportingService.all_payments(period=period))

        assert records == {dated_records[name] for name in expected}

    def test_custom_period_includes_both_days(self, dated_records):
        records = PaymentReportingService.all_payments(
            period="custom", date_from=date(2025, 12, 31), date_to=date(2026, 9, 30)
        )

        assert set(records) == {dated_records["last_year"], dated_records["september"]}

    def test_custom_period_without_bounds_is_unfiltered(self, dated_records):
        assert PaymentReportingService.all_payments(period="custom").count() == 5

    def test_lists_every_user_newest_first(self, user, other_user):
        older = _record_at("2026-01-01 10:00:00", user=user)
        newer = _record_at("2026-02-01 10:00:00", user=other_user)

        assert list(PaymentReportingService.all_payments()) == [newer, older]

    def test_search_matches_buyer_fields(self):
        buyer = UserFactory(
            email="asha.verma@example.com", first_name="Asha", last_name="Verma", phone="9876500011"
        )
        bystander = UserFactory(
            email="someone@example.com", first_name="Ravi", last_name="Iyer", phone="9000000000"
        )
        record = PaymentRecordFactory(user=buyer)
        PaymentRecordFactory(user=bystander)

        for term in ["ASHA.VERMA", "verma", "Asha Verma", "98765", record.transaction_id]:
            assert list(PaymentReportingService.all_payments(search=term)) == [record], term

    def test_search_matches_item_names(self, user):
        course = CourseFactory(name="Organic Chemistry Crash Course")
        test = MockTestFactory(title="Physics Mock 3")
        course_payment = PaymentRecordFactory(user=user, kind=PaymentKind.COURSE, target_id=course.id)
        test_payment = PaymentRecordFactory(user=user, kind=PaymentKind.TEST, target_id=test.id)
        # Same id as the course, different kind
        PaymentRecordFactory(user=user, kind=PaymentKind.CATEGORY, target_id=course.id)

        assert list(PaymentReportingService.all_payments(search="organic")) == [course_payment]
        assert list(PaymentReportingService.all_payments(search="physics mock")) == [test_payment]

    def test_kind_and_status_filters(self, user):
        wanted = PaymentRecordFactory(user=user, kind=PaymentKind.TEST, status=PaymentStatus.SUCCESS)
        PaymentRecordFactory(user=user, kind=PaymentKind.TEST)
        PaymentRecordFactory(user=user, kind=PaymentKind.COURSE, status=PaymentStatus.SUCCESS)

        records = PaymentReportingService.all_payments(kind=PaymentKind.TEST, status=PaymentStatus.SUCCESS)

        assert list(records) == [wanted]


class TestGatewayCredentials:
    def test_versions_increase_per_environment(self, staff_user):
        first = GatewayCredentialService.create_credential(
            environment="uat",
            merchant_id="M1",
            salt_key="salt-one",
            salt_index=1,
            base_url="https://gateway.test",
            created_by=staff_user,
        )
        second = GatewayCredentialService.create_credential(
            environment="uat",
            merchant_id="M2",
            salt_key="salt-two",
            salt_index=1,
            base_url="https://gateway.test",
        )
        prod = GatewayCredentialService.create_credential(
            environment="prod",
            merchant_id="P1",
            salt_key="salt-prod",
            salt_index=1,
            base_url="https://api.test",
        )

        assert (first.data.version, second.data.version, prod.data.version) == (1, 2, 1)
        assert GatewayCredentialService.active() is None

    def test_activate_and_roll_back(self, staff_user):
        old = GatewayCredentialFactory(environment="prod", version=1)
        new = GatewayCredentialFactory(environment="prod", version=2)

        GatewayCredentialService.activate(new.id, activated_by=staff_user)
        GatewayCredentialService.activate(old.id, activated_by=staff_user)

        assert ActiveGatewayCredential.objects.count() == 1
        assert GatewayCredentialService.active().credential == old

    def test_create_and_activate(self):
        result = GatewayCredentialService.create_credential(
            environment="uat",
            merchant_id="M1",
            salt_key="salt-one",
            salt_index=1,
            base_url="https://gateway.test",
            activate=True,
        )

        assert GatewayCredentialService.active().credential == result.data

    def test_activate_unknown_credential(self):
        assert GatewayCredentialService.activate(12345).error_code == "NOT_FOUND"

    def test_masked_salt_key(self):
        credential = GatewayCredentialFactory(salt_key="abcdef123456")

        assert credential.masked_salt_key == "********3456"


def test_new_category_members_after_purchase_do_not_change_snapshot(user, gateway):
    tests = MockTestFactory.create_batch(2)
    category = CategoryFactory(tests=tests)
    record = PaymentRecordFactory(
        user=user, kind=PaymentKind.CATEGORY, target_id=category.id, amount=category.price
    )
    gateway.return_value = status_response(record.transaction_id, amount_minor=record.amount_minor)

    PaymentReconciler.check_status(record.transaction_id)
    category.tests.add(MockTestFactory())

    stored = PaymentRecord.objects.get(pk=record.pk)
    assert stored.category_member_ids == sorted(t.id for t in tests)
    assert Entitlement.objects.filter(user=user).count() == 2
