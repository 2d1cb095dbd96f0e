"""
Entitlement model.

One row per grant: a course access window or access to a single mock
test. Rows are created by EntitlementService, never by views.

Related files:
    - services.py: EntitlementService (writes) and AccessQueryService (reads)
"""

from __future__ import annotations

from datetime import datetime

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.models import BaseModel


class EntitlementKind(models.TextChoices):
    """What an entitlement grants access to."""

    COURSE = "course", "Course"
    TEST = "test", "Mock Test"


class GrantedVia(models.TextChoices):
    """
    How an entitlement came to exist.

    REPAIR marks rows created while linking a scored attempt for which
    no purchase record could be found. They are never created by the
    normal grant path.
    """

    INDIVIDUAL = "individual", "Individual purchase"
    CATEGORY = "category", "Category purchase"
    BUNDLE = "bundle", "Bundle"
    REPAIR = "repair", "Repaired at result linking"


class Entitlement(BaseModel):
    """
    A grant of access to one course or one test for one user.

    Uses the default auto-increment key: insertion order breaks ties
    between rows bought at the same instant.

    Course rows:
        start_date/end_date are set once at grant time. end_date is
        start_date plus the course duration in calendar months and is never
        recomputed. is_expired is a stored convenience flag refreshed by a
        periodic task; access checks compare end_date with the clock.

    Test rows:
        is_completed starts False and flips to True at most once, when a
        scored attempt is linked (result is set at the same time).
        Buying the same test twice yields two independent rows.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="entitlements",
        help_text="User the access was granted to",
    )
    kind = models.CharField(
        max_length=10,
        choices=EntitlementKind.choices,
        help_text="Whether this grants a course window or a single test",
    )

    # =========================================================================
    # Target (exactly one of course/test, matching kind)
    # =========================================================================
    course = models.ForeignKey(
        "catalog.Course",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="entitlements",
        help_text="Granted course (course entitlements only)",
    )
    test = models.ForeignKey(
        "catalog.MockTest",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="entitlements",
        help_text="Granted mock test (test entitlements only)",
    )

    # =========================================================================
    # Provenance
    # =========================================================================
    granted_via = models.CharField(
        max_length=20,
        choices=GrantedVia.choices,
        default=GrantedVia.INDIVIDUAL,
        help_text="Purchase mode that produced this grant",
    )
    category = models.ForeignKey(
        "catalog.TestCategory",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="entitlements",
        help_text="Category whose purchase produced this grant",
    )
    transaction_id = models.CharField(
        max_length=64,
        blank=True,
        default="",
        db_index=True,
        help_text="Gateway transaction id of the purchase (empty for repairs)",
    )
    purchase_date = models.DateTimeField(
        default=timezone.now,
        help_text="When the purchase was confirmed",
    )

    # =========================================================================
    # Test completion
    # =========================================================================
    is_completed = models.BooleanField(
        default=False,
        help_text="Whether a scored attempt has been linked to this grant",
    )
    result = models.ForeignKey(
        "assessments.TestAttemptResult",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="entitlements",
        help_text="Attempt result that completed this grant",
    )

    # =========================================================================
    # Course window
    # =========================================================================
    start_date = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Start of the course access window",
    )
    end_date = models.DateTimeField(
        null=True,
        blank=True,
        help_text="End of the course access window (start + duration months)",
    )
    is_expired = models.BooleanField(
        default=False,
        help_text="Stored expiry flag refreshed by the expiry task",
    )

    class Meta:
        ordering = ["-purchase_date", "-id"]
        indexes = [
            models.Index(
                fields=["user", "test", "is_completed"],
                name="entitlement_user_test_idx",
            ),
            models.Index(
                fields=["user", "course"],
                name="entitlement_user_course_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(
                        kind=EntitlementKind.COURSE,
                        course__isnull=False,
                        test__isnull=True,
                        start_date__isnull=False,
                        end_date__isnull=False,
                    )
                    | Q(
                        kind=EntitlementKind.TEST,
                        test__isnull=False,
                        course__isnull=True,
                    )
                ),
                name="entitlement_target_matches_kind",
            ),
        ]

    def __str__(self) -> str:
        target = self.course_id if self.kind == EntitlementKind.COURSE else self.test_id
        return f"Entitlement({self.kind}:{target} for user {self.user_id})"

    def has_lapsed(self, now: datetime | None = None) -> bool:
        """Whether a course window has ended. Test rows never lapse."""
        if self.end_date is None:
            return False
        return self.end_date < (now or timezone.now())
