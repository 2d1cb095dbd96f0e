"""
Data types returned by the access query service.

Types:
    CourseAccess: Result of a course access check
    CourseEntitlementView: One course row of a user's purchases
    TestEntitlementView: One test row of a user's purchases, with status text
    EntitlementOverview: Everything a user has bought
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class CourseAccess:
    """
    Course access check result.

    ``purchased=False, expired=False`` means the course was never bought;
    ``purchased=False, expired=True`` means it was bought and the window
    has ended.
    """

    purchased: bool
    expired: bool
    start_date: datetime | None = None
    end_date: datetime | None = None


@dataclass(frozen=True)
class CourseEntitlementView:
    entitlement_id: int
    course_id: int
    course_name: str
    transaction_id: str
    purchase_date: datetime
    start_date: datetime | None
    end_date: datetime | None
    is_expired: bool


@dataclass(frozen=True)
class TestEntitlementView:
    __test__ = False

    entitlement_id: int
    test_id: int
    test_title: str
    granted_via: str
    category_id: int | None
    transaction_id: str
    purchase_date: datetime
    is_completed: bool
    result_id: str | None
    score: Decimal | None
    status_text: str


@dataclass
class EntitlementOverview:
    courses: list[CourseEntitlementView] = field(default_factory=list)
    tests: list[TestEntitlementView] = field(default_factory=list)
