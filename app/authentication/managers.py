"""
Manager for the email-keyed User model.

Learners sign up with an email address; there is no username. Staff and
superusers are created from the command line (createsuperuser) or the
admin.
"""

from django.contrib.auth.models import BaseUserManager


class UserManager(BaseUserManager):
    """
    Usage:
        learner = User.objects.create_user("asha@example.com", "s3cret", phone="9876543210")
        admin = User.objects.create_superuser("ops@example.com", "s3cret")
    """

    use_in_migrations = True

    def _create(self, email, password, **extra_fields):
        if not email:
            raise ValueError("An email address is required to create an account")

        user = self.model(email=self.normalize_email(email), **extra_fields)
        if password:
            user.set_password(password)
        else:
            # Accounts provisioned without a password cannot log in until one is set
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        """Create a learner account. Staff flags default to off."""
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create an account with full admin access.

        Raises:
            ValueError: If is_staff or is_superuser is explicitly turned off
        """
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        for flag in ("is_staff", "is_superuser"):
            if extra_fields[flag] is not True:
                raise ValueError(f"Superuser must have {flag}=True.")
        return self._create(email, password, **extra_fields)

    def staff(self):
        """Accounts allowed to read other learners' purchases and manage gateway keys."""
        return self.filter(is_staff=True, is_active=True)
