"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest

from core_backend.celery import app as celery_app
from restaurants.managers import set_current_restaurant

# Post-commit tasks run inline when a test executes on_commit callbacks
celery_app.conf.CELERY_TASK_ALWAYS_EAGER = True
celery_app.conf.CELERY_TASK_EAGER_PROPAGATES = False


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def reset_restaurant_context():
    """
    Reset restaurant context after each test.

    CRITICAL: This prevents restaurant context from leaking between tests.
    If the context leaks, tests may pass when they should fail.
    """
    yield  # Run the test

    # After test: ALWAYS reset to None
    set_current_restaurant(None)


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/health/')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


# Import shared fixtures so every app's tests can use them
from core_backend.tests.fixtures import *  # noqa: E402,F401,F403
