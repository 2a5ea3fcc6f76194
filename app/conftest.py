"""
Root pytest configuration for the Django project.

This module configures pytest-django and provides project-wide fixtures.
App-specific fixtures are defined in each app's tests/conftest.py.
"""

import uuid
from unittest.mock import MagicMock, patch

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from core.actors import Actor, ActorRole


def pytest_configure():
    """Adjust settings for the test run."""
    from django.conf import settings

    # Disable throttling during tests to prevent rate limit failures
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {}

    # No Redis in the test environment
    settings.CACHES = {
        "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}
    }


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_integration.py → e2e (full order/return workflows)
    - test_views.py, test_services.py, test_tasks.py, etc. → integration
    - test_models.py, test_transitions.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    e2e_patterns = ["test_integration.py"]

    integration_patterns = [
        "test_views.py",
        "test_services.py",
        "test_tasks.py",
        "test_settlement.py",
        "test_withdrawals.py",
    ]

    unit_patterns = [
        "test_models.py",
        "test_serializers.py",
        "test_transitions.py",
        "test_locks.py",
        "test_actors.py",
        "test_exception_handler.py",
        "test_helpers.py",
        "test_types.py",
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


# =============================================================================
# Actors
# =============================================================================


@pytest.fixture
def customer():
    """A customer actor."""
    return Actor(id=uuid.uuid4(), role=ActorRole.USER)


@pytest.fixture
def other_customer():
    return Actor(id=uuid.uuid4(), role=ActorRole.USER)


@pytest.fixture
def vendor():
    """A vendor actor."""
    return Actor(id=uuid.uuid4(), role=ActorRole.VENDOR)


@pytest.fixture
def other_vendor():
    return Actor(id=uuid.uuid4(), role=ActorRole.VENDOR)


@pytest.fixture
def admin_actor():
    """A platform admin actor."""
    return Actor(id=uuid.uuid4(), role=ActorRole.ADMIN)


# =============================================================================
# API Clients
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture
def client_for():
    """
    Build an APIClient authenticated as the given actor.

    The access token carries the same claims the upstream auth service
    issues: ``user_id`` and ``role``.

    Usage:
        def test_list(client_for, customer):
            client = client_for(customer)
            response = client.get("/api/v1/orders/")
    """

    def _client(actor: Actor) -> APIClient:
        token = AccessToken()
        token["user_id"] = str(actor.id)
        token["role"] = actor.role
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client

    return _client


# =============================================================================
# Infrastructure
# =============================================================================


@pytest.fixture
def mock_redis_lock():
    """Mock Redis for distributed locking."""
    mock_redis = MagicMock()
    mock_redis.set.return_value = True
    mock_redis.eval.return_value = 1

    with patch("core.locks.get_redis_connection", return_value=mock_redis):
        yield mock_redis
