"""Error kinds raised by the Smartcar OAuth client.

Every error derives from OAuthError so callers can catch the whole family.
The subclasses tell provider rejections apart from configuration and
network failures.
"""

from __future__ import annotations

from typing import Any


class OAuthError(Exception):
    """OAuth-related error."""

    def __init__(self, message: str, error_code: str | None = None, details: dict | None = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(OAuthError):
    """A required configuration value is missing or empty."""

    def __init__(self, setting: str, message: str | None = None):
        super().__init__(
            message or f"Environment variable {setting} not found",
            error_code="not_configured",
            details={"setting": setting},
        )
        self.setting = setting


class TokenEndpointError(OAuthError):
    """The token endpoint answered with a non-success response."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, error_code=error_code, details=details)
        self.status_code = status_code


class TokenExchangeError(OAuthError):
    """The provider rejected an authorization code."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, error_code=error_code, details=details)
        self.status_code = status_code


class TokenRefreshError(OAuthError):
    """The provider rejected a refresh token, or there was none to send."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, error_code=error_code, details=details)
        self.status_code = status_code


class TransportError(OAuthError):
    """Network failure or timeout talking to the token endpoint.

    Nothing was consumed on the provider side, so retrying is up to the caller.
    """
