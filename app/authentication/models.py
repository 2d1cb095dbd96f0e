"""
Account model for learners and staff.

Learners are identified by email. The phone number is optional and, when
present, is prefilled on the PhonePe pay page.

Related files:
    - managers.py: create_user / create_superuser
    - entitlements/models.py: what each user may access (related_name="entitlements")
    - payments/models/payment_record.py: each user's orders (related_name="payment_records")
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager


class User(AbstractBaseUser, PermissionsMixin):
    """
    Email-keyed account.

    ``is_staff`` doubles as the "may act on other learners" flag checked by
    the entitlement and payment views.
    """

    email = models.EmailField(unique=True, max_length=254)
    first_name = models.CharField(max_length=100, blank=True, default="")
    last_name = models.CharField(max_length=100, blank=True, default="")
    phone = models.CharField(
        max_length=20,
        blank=True,
        default="",
        help_text="Mobile number, sent to the payment gateway when set",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Untick to block login without deleting purchase history.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Grants the admin site and staff-only API endpoints.",
    )

    date_joined = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    def get_full_name(self):
        """First and last name, or the email when neither is set."""
        return f"{self.first_name} {self.last_name}".strip() or self.email

    def get_short_name(self):
        return self.first_name or self.email.split("@")[0]
