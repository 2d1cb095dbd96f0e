"""
Catalog models.

This module defines the purchasable items and the question bank:
- Course: Time-boxed course access, priced by its discounted price
- MockTest: A single test, optionally paid
- Question: One multiple-choice question of a test
- TestCategory: A priced bundle of mock tests

Related files:
    - services.py: CatalogService lookups used by payments and assessments
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from core.models import BaseModel


class Course(BaseModel):
    """
    A course learners buy time-boxed access to.

    Fields:
        name: Display name
        description: Long description
        price: List price in major currency units
        discounted_price: Price actually charged
        duration_months: Length of the access window granted on purchase
        is_active: Inactive courses cannot be bought
    """

    name = models.CharField(
        max_length=255,
        help_text="Course display name",
    )
    description = models.TextField(
        blank=True,
        default="",
        help_text="Long description of the course",
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="List price in major currency units",
    )
    discounted_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Price charged at checkout in major currency units",
    )
    duration_months = models.PositiveSmallIntegerField(
        default=1,
        help_text="Length of the access window granted by one purchase",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Whether the course is listed and purchasable",
    )

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(discounted_price__gte=0),
                name="course_discounted_price_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class MockTest(BaseModel):
    """
    A mock test delivered to learners.

    Free tests (``is_paid=False``) can be attempted by anyone; paid tests
    require an entitlement and completed attempts are linked back to it.
    """

    title = models.CharField(
        max_length=255,
        help_text="Test title shown to learners",
    )
    description = models.TextField(
        blank=True,
        default="",
        help_text="Instructions shown before the attempt",
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Price of a single-test purchase in major currency units",
    )
    is_paid = models.BooleanField(
        default=False,
        help_text="Whether attempting the test requires a purchase",
    )
    duration_minutes = models.PositiveIntegerField(
        default=60,
        help_text="Allotted time for one attempt",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Whether the test is listed and purchasable",
    )

    class Meta:
        ordering = ["title"]

    def __str__(self) -> str:
        return self.title


class Question(BaseModel):
    """
    A multiple-choice question belonging to one mock test.

    Active questions ordered by ``(position, id)`` are the authoritative
    question order. Submitted answers are aligned to that order by index.
    """

    test = models.ForeignKey(
        MockTest,
        on_delete=models.CASCADE,
        related_name="questions",
        help_text="Mock test this question belongs to",
    )
    text = models.TextField(
        help_text="Question text",
    )
    options = models.JSONField(
        default=list,
        help_text="Ordered list of answer options",
    )
    correct_option_index = models.PositiveSmallIntegerField(
        help_text="Zero-based index into options of the correct answer",
    )
    position = models.PositiveIntegerField(
        default=0,
        help_text="Display order within the test",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive questions are excluded from delivery and scoring",
    )

    class Meta:
        ordering = ["test", "position", "id"]
        indexes = [
            models.Index(
                fields=["test", "is_active", "position"],
                name="catalog_question_order_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"Q{self.position} of {self.test_id}"


class TestCategory(BaseModel):
    """
    A priced bundle of mock tests.

    Buying a category grants one entitlement per member test, based on the
    membership at the moment the payment succeeds. Later membership edits
    never touch entitlements that were already granted.
    """

    __test__ = False  # keep pytest from collecting this model as a test class

    name = models.CharField(
        max_length=255,
        help_text="Category display name",
    )
    description = models.TextField(
        blank=True,
        default="",
        help_text="Long description of the bundle",
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Bundle price in major currency units",
    )
    tests = models.ManyToManyField(
        MockTest,
        blank=True,
        related_name="categories",
        help_text="Member tests granted by a purchase",
    )
    category_type = models.CharField(
        max_length=50,
        blank=True,
        default="",
        help_text="Free-form grouping label (exam, subject, ...)",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Whether the category is listed and purchasable",
    )

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "test categories"

    def __str__(self) -> str:
        return self.name
