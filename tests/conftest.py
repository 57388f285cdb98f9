"""Global pytest configuration and fixtures.

This module provides shared fixtures and configuration for all tests.
"""

import os
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest


# =============================================================================
# Path Setup
# =============================================================================

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Environment
# =============================================================================

# Configuration is read once at import time by several modules, so the test
# environment has to be in place before anything from storefront is imported.
os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-production")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test")
os.environ.setdefault("UPLOAD_DIR", str(PROJECT_ROOT / ".pytest_uploads"))
os.environ.setdefault("STORE_NAME", "TEST STORE")


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (HTTP level, database mocked)"
    )


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def mock_db():
    """Create a mock async database session."""
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def customer():
    """Session of a signed-in customer."""
    from storefront.api.shared.auth import SessionUser
    from storefront.db.models import UserRole

    return SessionUser(user_id=uuid4(), email="customer@example.com", role=UserRole.USER)


@pytest.fixture
def admin():
    """Session of a signed-in administrator."""
    from storefront.api.shared.auth import SessionUser
    from storefront.db.models import UserRole

    return SessionUser(user_id=uuid4(), email="admin@example.com", role=UserRole.ADMIN)


@pytest.fixture(autouse=True)
def disable_rate_limits():
    """Route functions are called directly in unit tests; keep slowapi out of the way."""
    from storefront.api.shared.middleware.rate_limit import limiter

    enabled = limiter.enabled
    limiter.enabled = False
    yield
    limiter.enabled = enabled
