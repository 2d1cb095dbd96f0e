"""
State enums for payment models.

These are Django TextChoices for database storage and admin integration.

PaymentRecord States:
    pending → success
    pending → failed

Both terminal states are final; a record leaves pending exactly once.
"""

from django.db import models


class PaymentStatus(models.TextChoices):
    """
    States for the PaymentRecord lifecycle.

    Terminal states: SUCCESS, FAILED
    """

    PENDING = "pending", "Pending"
    SUCCESS = "success", "Success"
    FAILED = "failed", "Failed"

    @classmethod
    def terminal(cls) -> frozenset[str]:
        return frozenset({cls.SUCCESS, cls.FAILED})


class PaymentKind(models.TextChoices):
    """What a payment buys."""

    COURSE = "course", "Course"
    TEST = "test", "Mock Test"
    CATEGORY = "category", "Test Category"


class GatewayEnvironment(models.TextChoices):
    """PhonePe environment a credential belongs to."""

    UAT = "uat", "UAT (sandbox)"
    PROD = "prod", "Production"
