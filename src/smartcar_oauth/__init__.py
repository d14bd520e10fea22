"""OAuth 2.0 Authorization Code flow for Smartcar.

Configuration comes from the environment (or a .env file):
    SMARTCAR_CLIENT_ID, SMARTCAR_SECRET, SMARTCAR_CALLBACK_URL

Usage:
    from smartcar_oauth import AuthorizationRequestOptions, SmartcarOAuth

    oauth = SmartcarOAuth()

    # Start OAuth flow
    auth_url = oauth.build_authorization_url(
        AuthorizationRequestOptions(scope=["read_odometer", "read_vehicle_info"])
    )
    # User visits auth_url and grants permission

    # Exchange code for tokens
    tokens = oauth.exchange_code(auth_code)

    # Refresh when expired
    if tokens.is_expired:
        tokens = oauth.refresh(tokens)

The module-level build_authorization_url, exchange_code and refresh use a
shared client created on first call.
"""

from .client import (
    SmartcarOAuth,
    build_authorization_url,
    exchange_code,
    get_oauth,
    refresh,
    reset_oauth,
)
from .config import ClientIdentity, SmartcarSettings
from .endpoint import TokenEndpointClient
from .exceptions import (
    ConfigurationError,
    OAuthError,
    TokenEndpointError,
    TokenExchangeError,
    TokenRefreshError,
    TransportError,
)
from .tokens import AuthorizationRequestOptions, TokenRecord

__all__ = [
    "SmartcarOAuth",
    "build_authorization_url",
    "exchange_code",
    "refresh",
    "get_oauth",
    "reset_oauth",
    "ClientIdentity",
    "SmartcarSettings",
    "TokenEndpointClient",
    "AuthorizationRequestOptions",
    "TokenRecord",
    "OAuthError",
    "ConfigurationError",
    "TokenEndpointError",
    "TokenExchangeError",
    "TokenRefreshError",
    "TransportError",
]
