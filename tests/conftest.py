"""Pytest configuration and fixtures."""

import os
from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing application modules
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
os.environ.setdefault("API_BASE_URL", "http://pots.test")

from src.core.user_store import InMemoryUserStore  # noqa: E402


@pytest.fixture(scope="session")
def test_settings() -> Generator[Any, None, None]:
    """Provide test settings with cleared cache.

    Yields:
        Settings: Test configuration settings.
    """
    from src.core.config import get_settings

    get_settings.cache_clear()

    settings = get_settings()
    yield settings

    get_settings.cache_clear()


@pytest.fixture
def user_store() -> InMemoryUserStore:
    """Provide an empty in-memory credential store."""
    return InMemoryUserStore()


@pytest.fixture
def mock_supabase() -> MagicMock:
    """Provide a mocked Supabase client."""
    return MagicMock()


@pytest.fixture
def client(user_store: InMemoryUserStore) -> Generator[TestClient, None, None]:
    """Provide a test client whose services use the in-memory store.

    Args:
        user_store: In-memory store fixture.

    Yields:
        TestClient: FastAPI test client.
    """
    from src.main import app

    with (
        patch("src.services.identity_service.get_user_store", return_value=user_store),
        patch("src.api.routes.health.get_user_store", return_value=user_store),
    ):
        with TestClient(app) as test_client:
            yield test_client
