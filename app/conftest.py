"""
Root pytest configuration for the Django project.

This module configures pytest-django and provides project-wide fixtures
(users and API clients). App-specific fixtures are defined in each app's
tests/conftest.py.
"""

import os

import django
import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

# Ensure Django settings are configured before any tests run
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")


def pytest_configure():
    """Configure Django settings before tests run."""
    django.setup()

    from django.conf import settings

    # Disable throttling during tests to prevent rate limit failures
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {}

    # Use fast password hasher for tests
    settings.PASSWORD_HASHERS = [
        "django.contrib.auth.hashers.MD5PasswordHasher",
    ]


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_integration.py → e2e (full purchase-to-result journeys)
    - test_views.py, test_services.py, test_tasks.py, etc. → integration
    - test_models.py, test_serializers.py, test_scoring.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    e2e_patterns = ["test_integration.py"]

    integration_patterns = [
        "test_views.py",
        "test_services.py",
        "test_tasks.py",
        "test_permissions.py",
        "test_callbacks.py",
        "test_concurrency.py",
    ]

    unit_patterns = [
        "test_models.py",
        "test_serializers.py",
        "test_managers.py",
        "test_scoring.py",
        "test_gateway.py",
        "test_normalization.py",
    ]

    for item in items:
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration", "e2e"}:
            continue

        filename = str(item.fspath).split("/")[-1]

        if any(pattern in filename for pattern in e2e_patterns):
            item.add_marker(pytest.mark.e2e)
        elif any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def _plain_http(settings):
    """The test client speaks plain HTTP; never redirect it to HTTPS."""
    settings.SECURE_SSL_REDIRECT = False


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """An active learner with password TestPass123!."""
    from authentication.tests.factories import UserFactory

    return UserFactory()


@pytest.fixture
def other_user(db):
    """A second learner, for cross-user permission checks."""
    from authentication.tests.factories import UserFactory

    return UserFactory()


@pytest.fixture
def staff_user(db):
    """A staff user (may read any learner's data)."""
    from authentication.tests.factories import UserFactory

    return UserFactory(is_staff=True)


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


def _bearer_client(user) -> APIClient:
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture
def authenticated_client(user):
    """API client carrying a JWT for the default learner."""
    return _bearer_client(user)


@pytest.fixture
def staff_client(staff_user):
    """API client carrying a JWT for a staff user."""
    return _bearer_client(staff_user)
