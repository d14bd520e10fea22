"""Shared test fixtures for the Smartcar OAuth test suite."""

import pytest
from unittest.mock import MagicMock, patch
from typing import Any

from smartcar_oauth.client import SmartcarOAuth, reset_oauth
from smartcar_oauth.config import SmartcarSettings

# Sample values used across tests
SAMPLE_CLIENT_ID = "test_client_id"
SAMPLE_CLIENT_SECRET = "test_client_secret"
SAMPLE_CALLBACK_URL = "https://example.com/callback"
SAMPLE_AUTH_URL = "https://auth.smartcar.com"


# ============================================================================
# Mock Response Data
# ============================================================================

MOCK_TOKEN_RESPONSE = {
    "access_token": "access_abc123",
    "refresh_token": "refresh_def456",
    "token_type": "Bearer",
    "expires_in": 7200,
    "refresh_expires_in": 5184000,
}

MOCK_ERROR_RESPONSES = {
    "invalid_grant": {
        "status_code": 400,
        "data": {"error": "invalid_grant", "error_description": "Invalid or expired code"},
    },
    "invalid_client": {
        "status_code": 401,
        "data": {"error": "invalid_client", "error_description": "Invalid client credentials"},
    },
    "server_error": {
        "status_code": 500,
        "data": {"error": "server_error"},
    },
}

SMARTCAR_ENV_VARS = (
    "SMARTCAR_CLIENT_ID",
    "SMARTCAR_SECRET",
    "SMARTCAR_CALLBACK_URL",
    "SMARTCAR_AUTH_URL",
    "SMARTCAR_TIMEOUT_SECONDS",
)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every SMARTCAR_* variable from the environment."""
    for name in SMARTCAR_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def settings():
    """Fully configured settings, independent of the environment."""
    return SmartcarSettings(
        _env_file=None,
        client_id=SAMPLE_CLIENT_ID,
        secret=SAMPLE_CLIENT_SECRET,
        callback_url=SAMPLE_CALLBACK_URL,
    )


@pytest.fixture
def oauth(settings):
    """SmartcarOAuth wired to the sample settings."""
    return SmartcarOAuth(settings=settings)


@pytest.fixture
def mock_response():
    """Factory fixture to create mock HTTP responses."""
    def _create_response(data: Any = None, status_code: int = 200, text: str = ""):
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = data
        response.content = b"{}" if data is not None else b""
        response.text = text
        return response
    return _create_response


@pytest.fixture
def mock_error_response(mock_response):
    """Factory fixture to create mock error responses."""
    def _create_error(error_type: str):
        error = MOCK_ERROR_RESPONSES[error_type]
        return mock_response(error["data"], status_code=error["status_code"])
    return _create_error


@pytest.fixture
def mock_http_client():
    """Patch the httpx.Client the token endpoint opens per request."""
    with patch("httpx.Client") as MockClient:
        client = MagicMock()
        client.__enter__.return_value = client
        client.__exit__.return_value = None
        MockClient.return_value = client
        yield client


@pytest.fixture(autouse=True)
def _reset_default_oauth():
    """Keep the process-wide client from leaking between tests."""
    reset_oauth()
    yield
    reset_oauth()
