"""
Pytest configuration shared by every test package.
"""

from datetime import timedelta
import os
from typing import Callable, Dict

import pytest

# Set test environment variables before importing modules
os.environ.setdefault("ENVIRONMENT", "DEV")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("JWT_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_STORAGE_URI", "memory://")
os.environ.setdefault("TRUST_PROXY_HEADERS", "false")

from common.security import create_access_token  # noqa: E402


@pytest.fixture
def sample_user_id() -> str:
    """Return a sample user ID for testing."""
    return "5f0c1b52-8d7e-4f6a-9a4b-0e6f3c2d1a90"


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Return a factory for access tokens signed with the test secret."""

    def _make_token(
        user_id: str,
        email: str = "artist@example.com",
        tier: str = "free",
        expires_delta: timedelta = timedelta(minutes=15),
    ) -> str:
        return create_access_token(
            user_id=user_id,
            email=email,
            secret=os.environ["JWT_SECRET"],
            expires_delta=expires_delta,
            tier=tier,
        )

    return _make_token


@pytest.fixture
def auth_headers(make_token, sample_user_id) -> Dict[str, str]:
    """Return bearer headers for the sample user."""
    return {"Authorization": f"Bearer {make_token(sample_user_id)}"}
