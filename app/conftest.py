"""
Project-wide pytest configuration and fixtures.

Fixtures available to every app:
    user, other_user, operator: Users with the respective roles
    api_client: Unauthenticated DRF test client
    authenticated_client, other_client, operator_client: Clients authenticated
        as the matching user
    mock_redis: Mock Redis connection behind core.locks.DistributedLock
        (autouse; locks always succeed unless a test says otherwise)
"""

import pytest


def pytest_configure():
    """Adjust Django settings for tests."""
    from django.conf import settings

    # Disable throttling during tests to prevent rate limit failures
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {}

    # Use fast password hasher for tests
    settings.PASSWORD_HASHERS = [
        "django.contrib.auth.hashers.MD5PasswordHasher",
    ]

    # No Redis in the test environment; locks use the mock_redis fixture
    settings.CACHES = {
        "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}
    }
    settings.SESSION_ENGINE = "django.contrib.sessions.backends.db"
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
    settings.STORAGES["staticfiles"] = {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    }


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_views.py, test_services.py, test_tasks.py, test_concurrency.py → integration
    - test_models.py, test_calculator.py, test_locks.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    integration_patterns = [
        "test_views.py",
        "test_services.py",
        "test_tasks.py",
        "test_concurrency.py",
        "test_eligibility.py",
        "test_queries.py",
    ]

    unit_patterns = [
        "test_models.py",
        "test_calculator.py",
        "test_state_transitions.py",
        "test_locks.py",
        "test_decorators.py",
        "test_exception_handler.py",
    ]

    for item in items:
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration"}:
            continue

        filename = str(item.fspath).split("/")[-1]

        if any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)


# =============================================================================
# Redis
# =============================================================================


@pytest.fixture(autouse=True)
def mock_redis(mocker):
    """
    Mock Redis client for distributed lock tests.

    Returns a MagicMock configured so every lock is free and releases cleanly.
    """
    mock_client = mocker.MagicMock()
    mock_client.set.return_value = True
    mock_client.eval.return_value = 1

    mocker.patch("core.locks.get_redis_connection", return_value=mock_client)
    return mock_client


# =============================================================================
# Users and clients
# =============================================================================


@pytest.fixture
def user(db):
    """Regular customer."""
    from accounts.tests.factories import UserFactory

    return UserFactory()


@pytest.fixture
def other_user(db):
    """A second customer, for ownership checks."""
    from accounts.tests.factories import UserFactory

    return UserFactory()


@pytest.fixture
def operator(db):
    """User with the operator role."""
    from accounts.tests.factories import OperatorFactory

    return OperatorFactory()


@pytest.fixture
def api_client():
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def authenticated_client(user):
    from rest_framework.test import APIClient

    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def other_client(other_user):
    from rest_framework.test import APIClient

    client = APIClient()
    client.force_authenticate(user=other_user)
    return client


@pytest.fixture
def operator_client(operator):
    from rest_framework.test import APIClient

    client = APIClient()
    client.force_authenticate(user=operator)
    return client
