"""
Tests for the entitlement store and access queries.

Covers:
- Course access windows (calendar-month arithmetic, expiry from end_date)
- Category fan-out grants (best-effort, one row per member)
- Result linking and the repair path
- Status text of test entitlements
"""

from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.utils import timezone
from freezegun import freeze_time

from assessments.tests.factories import AttemptResultFactory
from catalog.tests.factories import CategoryFactory, CourseFactory, MockTestFactory
from entitlements.models import Entitlement, EntitlementKind, GrantedVia
from entitlements.services import (
    AccessQueryService,
    EntitlementService,
    course_window_end,
    format_score,
)
from entitlements.tests.factories import CourseEntitlementFactory, TestEntitlementFactory

pytestmark = pytest.mark.django_db

T0 = datetime(2026, 1, 15, 10, 0, tzinfo=dt_timezone.utc)


# =============================================================================
# Pure helpers
# =============================================================================


class TestCourseWindowEnd:
    def test_adds_calendar_months(self):
        assert course_window_end(T0, 3) == datetime(2026, 4, 15, 10, 0, tzinfo=dt_timezone.utc)

    def test_clamps_to_month_end(self):
        start = datetime(2026, 1, 31, tzinfo=dt_timezone.utc)

        assert course_window_end(start, 1) == datetime(2026, 2, 28, tzinfo=dt_timezone.utc)


class TestFormatScore:
    @pytest.mark.parametrize(
        ("score", "text"),
        [
            (Decimal("70.00"), "70"),
            (Decimal("100.00"), "100"),
            (Decimal("66.50"), "66.5"),
            (Decimal("66.67"), "66.67"),
            (Decimal("0.00"), "0"),
        ],
    )
    def test_strips_trailing_zeros(self, score, text):
        assert format_score(score) == text


# =============================================================================
# Course access
# =============================================================================


class TestCourseAccess:
    """Tests for grant_course and has_course_access."""

    def test_three_month_window(self, user):
        """
        Given a 3-month course bought at T
        When access is checked at T+2 months and T+4 months
        Then the learner has access at T+2 and the window is expired at T+4
        """
        course = CourseFactory(duration_months=3)
        with freeze_time(T0):
            EntitlementService.grant_course(user_id=user.id, course=course, transaction_id="TXN-1")

        with freeze_time(T0 + timedelta(days=61)):
            during = AccessQueryService.has_course_access(user.id, course.id)
        with freeze_time(T0 + timedelta(days=122)):
            after = AccessQueryService.has_course_access(user.id, course.id)

        assert during.purchased is True
        assert during.expired is False
        assert during.end_date == datetime(2026, 4, 15, 10, 0, tzinfo=dt_timezone.utc)
        assert after.purchased is False
        assert after.expired is True

    def test_never_purchased(self, user):
        course = CourseFactory()

        access = AccessQueryService.has_course_access(user.id, course.id)

        assert access.purchased is False
        assert access.expired is False
        assert access.start_date is None

    def test_latest_purchase_decides(self, user):
        """
        Given an old lapsed window and a fresh purchase of the same course
        When access is checked
        Then the fresh purchase grants access
        """
        course = CourseFactory(duration_months=1)
        CourseEntitlementFactory(user=user, course=course, purchase_date=timezone.now() - timedelta(days=90))
        CourseEntitlementFactory(user=user, course=course)

        access = AccessQueryService.has_course_access(user.id, course.id)

        assert access.purchased is True

    def test_window_is_not_recomputed_when_duration_changes(self, user):
        course = CourseFactory(duration_months=3)
        entitlement = EntitlementService.grant_course(
            user_id=user.id, course=course, transaction_id="TXN-1"
        )
        original_end = entitlement.end_date

        course.duration_months = 12
        course.save()

        access = AccessQueryService.has_course_access(user.id, course.id)
        assert access.end_date == original_end

    def test_other_users_purchase_does_not_grant_access(self, user, other_user):
        entitlement = CourseEntitlementFactory(user=other_user)

        access = AccessQueryService.has_course_access(user.id, entitlement.course_id)

        assert access.purchased is False


# =============================================================================
# Category grants
# =============================================================================


class TestGrantCategoryTests:
    def test_one_row_per_member_sharing_transaction(self, user):
        """
        Given a category with five member tests
        When its tests are granted
        Then five uncompleted rows share the transaction id and category
        """
        tests = MockTestFactory.create_batch(5)
        category = CategoryFactory(tests=tests)

        created = EntitlementService.grant_category_tests(
            user_id=user.id,
            category=category,
            member_test_ids=[t.id for t in tests],
            transaction_id="TXN-CAT",
        )

        assert len(created) == 5
        rows = Entitlement.objects.filter(user=user)
        assert rows.count() == 5
        assert set(rows.values_list("transaction_id", flat=True)) == {"TXN-CAT"}
        assert set(rows.values_list("category_id", flat=True)) == {category.id}
        assert set(rows.values_list("granted_via", flat=True)) == {GrantedVia.CATEGORY}
        assert not rows.filter(is_completed=True).exists()

    def test_empty_category_grants_nothing(self, user, caplog):
        category = CategoryFactory()

        created = EntitlementService.grant_category_tests(
            user_id=user.id, category=category, member_test_ids=[], transaction_id="TXN-EMPTY"
        )

        assert created == []
        assert Entitlement.objects.count() == 0
        assert "no member tests" in caplog.text

    def test_failed_row_does_not_undo_others(self, user):
        """
        Given a three-member category where the second grant fails
        When its tests are granted
        Then the other two rows are kept
        """
        tests = MockTestFactory.create_batch(3)
        category = CategoryFactory(tests=tests)
        original = EntitlementService.grant_test.__func__
        failing_id = tests[1].id

        def flaky_grant(cls, **kwargs):
            if kwargs["test_id"] == failing_id:
                raise DatabaseError("constraint violated")
            return original(cls, **kwargs)

        with patch.object(EntitlementService, "grant_test", classmethod(flaky_grant)):
            created = EntitlementService.grant_category_tests(
                user_id=user.id,
                category=category,
                member_test_ids=[t.id for t in tests],
                transaction_id="TXN-PARTIAL",
            )

        assert len(created) == 2
        assert set(Entitlement.objects.values_list("test_id", flat=True)) == {
            tests[0].id,
            tests[2].id,
        }

    def test_buying_same_test_twice_creates_two_rows(self, user):
        test = MockTestFactory()

        EntitlementService.grant_test(user_id=user.id, test_id=test.id, transaction_id="TXN-1")
        EntitlementService.grant_test(user_id=user.id, test_id=test.id, transaction_id="TXN-2")

        assert Entitlement.objects.filter(user=user, test=test).count() == 2


# =============================================================================
# Linking and repair
# =============================================================================


class TestLinkAttemptResult:
    def test_completes_uncompleted_row(self, user):
        entitlement = TestEntitlementFactory(user=user)
        result = AttemptResultFactory(user=user, test=entitlement.test)

        linked = EntitlementService.link_attempt_result(
            user_id=user.id, test=entitlement.test, result=result
        )

        assert linked.id == entitlement.id
        entitlement.refresh_from_db()
        assert entitlement.is_completed is True
        assert entitlement.result_id == result.id

    def test_skips_completed_rows(self, user):
        test = MockTestFactory()
        old_result = AttemptResultFactory(user=user, test=test)
        TestEntitlementFactory(user=user, test=test, is_completed=True, result=old_result)
        pending = TestEntitlementFactory(
            user=user, test=test, purchase_date=timezone.now() - timedelta(days=30)
        )
        result = AttemptResultFactory(user=user, test=test)

        linked = EntitlementService.link_attempt_result(user_id=user.id, test=test, result=result)

        assert linked.id == pending.id

    def test_repair_when_nothing_to_link(self, user, caplog):
        test = MockTestFactory()
        result = AttemptResultFactory(user=user, test=test)

        repaired = EntitlementService.link_attempt_result(user_id=user.id, test=test, result=result)

        assert repaired.granted_via == GrantedVia.REPAIR
        assert repaired.is_completed is True
        assert repaired.transaction_id == ""
        assert repaired.kind == EntitlementKind.TEST
        assert any(record.levelname == "WARNING" for record in caplog.records)


# =============================================================================
# Listing
# =============================================================================


class TestListEntitlements:
    def test_status_texts(self, user):
        """
        Given a completed test with a 70% result, a completed one without a
        result, and an unattempted one
        When entitlements are listed
        Then each carries the matching status text
        """
        scored = MockTestFactory()
        result = AttemptResultFactory(user=user, test=scored, correct_count=7, wrong_count=3)
        TestEntitlementFactory(user=user, test=scored, is_completed=True, result=result)
        TestEntitlementFactory(user=user, is_completed=True)
        TestEntitlementFactory(user=user)

        overview = AccessQueryService.list_entitlements(user.id)

        texts = sorted(row.status_text for row in overview.tests)
        assert texts == ["Completed", "Completed - Score: 70%", "Not attempted yet"]
        scored_row = next(row for row in overview.tests if row.test_id == scored.id)
        assert scored_row.score == Decimal("70.00")
        assert scored_row.result_id == str(result.id)

    def test_courses_carry_live_expiry(self, user):
        CourseEntitlementFactory(
            user=user,
            purchase_date=timezone.now() - timedelta(days=400),
        )
        CourseEntitlementFactory(user=user)

        overview = AccessQueryService.list_entitlements(user.id)

        assert len(overview.courses) == 2
        # Newest purchase first
        assert overview.courses[0].is_expired is False
        assert overview.courses[1].is_expired is True

    def test_lists_only_requested_user(self, user, other_user):
        TestEntitlementFactory(user=other_user)

        overview = AccessQueryService.list_entitlements(user.id)

        assert overview.tests == []
        assert overview.courses == []


# =============================================================================
# Expiry flag
# =============================================================================


class TestExpireLapsedCourseEntitlements:
    def test_flags_only_lapsed_windows(self, user):
        lapsed = CourseEntitlementFactory(user=user, purchase_date=timezone.now() - timedelta(days=400))
        active = CourseEntitlementFactory(user=user)

        updated = EntitlementService.expire_lapsed_course_entitlements()

        assert updated == 1
        lapsed.refresh_from_db()
        active.refresh_from_db()
        assert lapsed.is_expired is True
        assert active.is_expired is False
