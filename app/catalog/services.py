"""
Catalog lookup service.

Read-only access to courses, tests, categories and the question bank.
Every lookup raises NotFoundError when the record is missing so callers
can turn it into a ServiceResult failure or swallow it, depending on
where they sit in the flow.

Usage:
    from catalog.services import CatalogService

    course = CatalogService.get_course(course_id)
    questions = CatalogService.active_questions(test)
    member_ids = CatalogService.category_member_ids(category)
"""

from __future__ import annotations

from catalog.models import Course, MockTest, Question, TestCategory
from core.exceptions import NotFoundError
from core.services import BaseService


class CatalogService(BaseService):
    """Read-only lookups over the catalog."""

    @classmethod
    def get_course(cls, course_id: int, *, active_only: bool = False) -> Course:
        """
        Fetch a course by id.

        Args:
            course_id: Course primary key
            active_only: Treat inactive courses as missing

        Raises:
            NotFoundError: If the course does not exist
        """
        queryset = Course.objects.all()
        if active_only:
            queryset = queryset.filter(is_active=True)
        course = queryset.filter(id=course_id).first()
        if course is None:
            raise NotFoundError(
                f"Course {course_id} not found",
                details={"course_id": course_id},
            )
        return course

    @classmethod
    def get_test(cls, test_id: int, *, active_only: bool = False) -> MockTest:
        """
        Fetch a mock test by id.

        Raises:
            NotFoundError: If the test does not exist
        """
        queryset = MockTest.objects.all()
        if active_only:
            queryset = queryset.filter(is_active=True)
        test = queryset.filter(id=test_id).first()
        if test is None:
            raise NotFoundError(
                f"Mock test {test_id} not found",
                details={"test_id": test_id},
            )
        return test

    @classmethod
    def get_category(cls, category_id: int, *, active_only: bool = False) -> TestCategory:
        """
        Fetch a test category by id.

        Raises:
            NotFoundError: If the category does not exist
        """
        queryset = TestCategory.objects.all()
        if active_only:
            queryset = queryset.filter(is_active=True)
        category = queryset.filter(id=category_id).first()
        if category is None:
            raise NotFoundError(
                f"Test category {category_id} not found",
                details={"category_id": category_id},
            )
        return category

    @classmethod
    def category_member_ids(cls, category: TestCategory) -> list[int]:
        """Return the category's current member test ids in ascending order."""
        return list(category.tests.order_by("id").values_list("id", flat=True))

    @classmethod
    def active_questions(cls, test: MockTest) -> list[Question]:
        """
        Return the test's active questions in authoritative order.

        The order is ``(position, id)`` so two questions sharing a position
        still come back in a stable sequence.
        """
        return list(
            Question.objects.filter(test=test, is_active=True).order_by("position", "id")
        )
