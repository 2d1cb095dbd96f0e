"""
Fixtures for authentication tests.

The user and API client fixtures are project-wide (see app/conftest.py).
"""

import pytest

from authentication.models import User


@pytest.fixture
def superuser(db):
    """Create a superuser with admin privileges."""
    return User.objects.create_superuser(
        email="admin@example.com", password="AdminPass123!"
    )
