"""
Read-side queries over the payment ledger: a learner's payment history,
the staff-wide payment listing and the revenue dashboard.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from django.db.models import Count, Q, QuerySet, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from catalog.models import Course, MockTest, TestCategory
from core.services import BaseService
from payments.models import PaymentRecord
from payments.state_machines import PaymentKind, PaymentStatus

ZERO = Decimal("0.00")

PERIOD_TODAY = "today"
PERIOD_WEEK = "week"
PERIOD_MONTH = "month"
PERIOD_YEAR = "year"
PERIOD_CUSTOM = "custom"
PERIODS = (PERIOD_TODAY, PERIOD_WEEK, PERIOD_MONTH, PERIOD_YEAR, PERIOD_CUSTOM)


class PaymentReportingService(BaseService):
    """Payment history, the staff payment listing and revenue statistics."""

    @classmethod
    def payment_history(
        cls,
        user_id: int,
        kind: str | None = None,
        target_id: int | None = None,
    ) -> QuerySet[PaymentRecord]:
        """A user's payment records, newest first, optionally for one item."""
        queryset = PaymentRecord.objects.filter(user_id=user_id)
        if kind:
            queryset = queryset.filter(kind=kind)
        if target_id is not None:
            queryset = queryset.filter(target_id=target_id)
        return queryset.order_by("-created_at")

    @classmethod
    def period_bounds(
        cls,
        period: str,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> tuple[datetime, datetime] | None:
        """
        Half-open [start, end) range in the current time zone for a named period.

        Periods:
            today:  the current calendar day
            week:   Sunday of the current week through today
            month:  the current calendar month
            year:   the current calendar year
            custom: date_from through date_to, both days included

        Returns None when no range applies (unknown period, or a custom
        period missing either bound).
        """
        today = timezone.localdate()

        if period == PERIOD_TODAY:
            first, last = today, today
        elif period == PERIOD_WEEK:
            # weekday() is 0 for Monday; weeks start on Sunday
            first, last = today - timedelta(days=(today.weekday() + 1) % 7), today
        elif period == PERIOD_MONTH:
            first = today.replace(day=1)
            next_month = (first + timedelta(days=32)).replace(day=1)
            last = next_month - timedelta(days=1)
        elif period == PERIOD_YEAR:
            first, last = today.replace(month=1, day=1), today.replace(month=12, day=31)
        elif period == PERIOD_CUSTOM and date_from and date_to:
            first, last = date_from, date_to
        else:
            return None

        tz = timezone.get_current_timezone()
        start = timezone.make_aware(datetime.combine(first, time.min), tz)
        end = timezone.make_aware(datetime.combine(last + timedelta(days=1), time.min), tz)
        return start, end

    @classmethod
    def all_payments(
        cls,
        search: str | None = None,
        period: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        kind: str | None = None,
        status: str | None = None,
    ) -> QuerySet[PaymentRecord]:
        """
        Every user's payment records for staff, newest first.

        Args:
            search: Case-insensitive match on the buyer's email, name or
                phone, the transaction id, or the purchased item's name
            period: today, week, month, year or custom (see period_bounds)
            date_from: First day of a custom period
            date_to: Last day of a custom period
            kind: Only this purchase kind
            status: Only this status
        """
        queryset = PaymentRecord.objects.select_related("user")

        if search:
            queryset = queryset.filter(cls._search_filter(search.strip()))

        if period:
            bounds = cls.period_bounds(period, date_from, date_to)
            if bounds is not None:
                start, end = bounds
                queryset = queryset.filter(created_at__gte=start, created_at__lt=end)

        if kind:
            queryset = queryset.filter(kind=kind)
        if status:
            queryset = queryset.filter(status=status)
        return queryset.order_by("-created_at")

    @classmethod
    def _search_filter(cls, term: str) -> Q:
        condition = (
            Q(user__email__icontains=term)
            | Q(user__first_name__icontains=term)
            | Q(user__last_name__icontains=term)
            | Q(user__phone__icontains=term)
            | Q(transaction_id__icontains=term)
        )

        # "First Last" should match the full name as well
        first, _, last = term.partition(" ")
        if last:
            condition |= Q(user__first_name__iexact=first) & Q(user__last_name__icontains=last.strip())

        item_models = {
            PaymentKind.COURSE: (Course, "name"),
            PaymentKind.TEST: (MockTest, "title"),
            PaymentKind.CATEGORY: (TestCategory, "name"),
        }
        for kind, (model, name_field) in item_models.items():
            matching_ids = model.objects.filter(**{f"{name_field}__icontains": term}).values("id")
            condition |= Q(kind=kind, target_id__in=matching_ids)
        return condition

    @classmethod
    def dashboard_stats(cls, year: int | None = None) -> dict[str, Any]:
        """
        Revenue summary for the staff dashboard.

        Returns:
            Dict with:
            - year: Year the monthly buckets cover
            - total_revenue: Sum of all successful payments (all time)
            - status_counts: Number of records per status
            - monthly: 12 entries with successful revenue per kind,
              bucketed by completion month
        """
        year = year or timezone.now().year
        records = PaymentRecord.objects.order_by()

        total = records.filter(status=PaymentStatus.SUCCESS).aggregate(total=Sum("amount"))["total"]

        status_counts = {value: 0 for value in PaymentStatus.values}
        for status, count in records.values_list("status").annotate(count=Count("id")):
            status_counts[status] = count

        monthly = [
            {"month": month, **{kind: ZERO for kind in PaymentKind.values}}
            for month in range(1, 13)
        ]
        rows = (
            records.filter(status=PaymentStatus.SUCCESS, completed_at__year=year)
            .annotate(month=TruncMonth("completed_at"))
            .values("month", "kind")
            .annotate(total=Sum("amount"))
        )
        for row in rows:
            monthly[row["month"].month - 1][row["kind"]] += row["total"]

        return {
            "year": year,
            "total_revenue": total or ZERO,
            "status_counts": status_counts,
            "monthly": monthly,
        }
