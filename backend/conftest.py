"""
Pytest configuration and fixtures for Gemini Studio API tests.

This module provides shared test fixtures and configuration for all test files.
"""

import os
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

# Configure the environment before the app module reads it
os.environ["ENVIRONMENT"] = "development"
os.environ["LOG_FILE"] = ""
os.environ.setdefault("GEMINI_API_KEY", "test-api-key")

from backend.main import app
from backend.api.v1.dependencies import get_model_client_provider, get_rate_limiter
from backend.config.settings import AppSettings, get_settings
from backend.services.rate_limiter import RateLimiter
from backend.tests.helpers import ManualClock, text_response


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def rate_limiter() -> RateLimiter:
    return RateLimiter()


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(
        gemini_api_key="test-api-key",
        environment="development",
        rate_limit_requests=10,
        rate_limit_window_ms=60_000,
        log_file=None,
    )


@pytest.fixture
def model_client() -> AsyncMock:
    """Model client whose generate_content is an AsyncMock answering "hello"."""
    client = AsyncMock()
    client.generate_content.return_value = text_response("hello")
    return client


@pytest.fixture(name="client")
def client_fixture(model_client, rate_limiter, app_settings):
    """Test client with a fake model client, a fresh rate limiter and test settings."""
    app.dependency_overrides[get_model_client_provider] = lambda: (lambda: model_client)
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_settings] = lambda: app_settings

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
