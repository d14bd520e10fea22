"""OAuth 2.0 client for Smartcar.

Handles the OAuth Authorization Code flow:
1. Generate authorization URL
2. Exchange the authorization code from the callback for tokens
3. Refresh tokens when expired

Authorization codes are single-use, so nothing in here retries a failed
exchange.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Mapping

from .config import ClientIdentity, SmartcarSettings
from .endpoint import (
    AUTO,
    CODE,
    FORCE,
    GRANT_AUTHORIZATION_CODE,
    GRANT_REFRESH_TOKEN,
    LIVE,
    TEST,
    TokenEndpointClient,
)
from .exceptions import TokenEndpointError, TokenExchangeError, TokenRefreshError, TransportError
from .tokens import AuthorizationRequestOptions, TokenRecord


logger = logging.getLogger(__name__)


class SmartcarOAuth:
    """OAuth 2.0 client for Smartcar.

    Usage:
        oauth = SmartcarOAuth()

        # Send the user to the consent page
        url = oauth.build_authorization_url(
            AuthorizationRequestOptions(scope=["read_odometer"], state="user-42")
        )

        # Smartcar redirects to SMARTCAR_CALLBACK_URL with ?code=xxx
        tokens = oauth.exchange_code(code)

        # Later, when tokens.is_expired
        tokens = oauth.refresh(tokens)

    The client identity is resolved from settings on first use and shared by
    every call afterwards.
    """

    def __init__(
        self,
        settings: SmartcarSettings | None = None,
        endpoint: TokenEndpointClient | None = None,
    ):
        self.settings = settings or SmartcarSettings()
        self.endpoint = endpoint or TokenEndpointClient(
            auth_url=self.settings.auth_url,
            timeout=self.settings.timeout_seconds,
        )
        self._identity: ClientIdentity | None = None
        self._identity_lock = threading.Lock()

    @property
    def identity(self) -> ClientIdentity:
        """Client identity, resolved once and cached.

        Raises:
            ConfigurationError: If any identity setting is missing (nothing is cached)
        """
        identity = self._identity
        if identity is not None:
            return identity
        with self._identity_lock:
            if self._identity is None:
                self._identity = ClientIdentity.from_settings(self.settings)
                logger.debug("Smartcar client identity initialised")
            return self._identity

    def build_authorization_url(self, options: AuthorizationRequestOptions | None = None) -> str:
        """Generate the authorization URL for user consent.

        Users who already approved the requested scopes skip the permission
        dialog unless ``force_prompt`` is set.

        Args:
            options: state, make, scope and flags for this request

        Returns:
            URL to redirect the user to
        """
        options = options or AuthorizationRequestOptions()
        identity = self.identity

        params = {
            "response_type": CODE,
            "redirect_uri": identity.callback_url,
            "approval_prompt": FORCE if options.force_prompt else AUTO,
            "mode": TEST if options.test_mode else LIVE,
        }
        if options.scope:
            params["scope"] = " ".join(options.scope)
        if options.state is not None:
            params["state"] = options.state
        if options.make is not None:
            params["make"] = options.make

        logger.debug("Built authorization URL (mode=%s, approval_prompt=%s)", params["mode"], params["approval_prompt"])
        return self.endpoint.authorize_url(identity.client_id, params)

    def exchange_code(self, auth_code: str) -> TokenRecord:
        """Exchange authorization code for access tokens.

        Args:
            auth_code: Code Smartcar appended to the callback URL

        Returns:
            TokenRecord with access and refresh tokens

        Raises:
            ConfigurationError: If client identity can't be resolved
            TokenExchangeError: If the code is empty or Smartcar rejects it
            TransportError: On network failure or timeout
        """
        identity = self.identity
        if not auth_code or not auth_code.strip():
            raise TokenExchangeError(
                "Authorization code is empty",
                error_code="invalid_request",
            )

        try:
            data = self.endpoint.request_token(
                identity,
                {
                    "grant_type": GRANT_AUTHORIZATION_CODE,
                    "code": auth_code,
                    "redirect_uri": identity.callback_url,
                },
            )
            record = TokenRecord.from_response(data)
        except TokenEndpointError as e:
            raise TokenExchangeError(
                f"Token exchange failed: {e}",
                status_code=e.status_code,
                error_code=e.error_code or "exchange_failed",
                details=e.details,
            ) from e

        logger.info("Exchanged authorization code for tokens")
        return record

    def refresh(self, token: TokenRecord | Mapping[str, Any]) -> TokenRecord:
        """Refresh access token using the record's refresh token.

        The returned record is authoritative: Smartcar may rotate the refresh
        token, so the old record should be discarded.

        A 5xx from Smartcar leaves the refresh token unused, so it surfaces
        as TransportError and the same record can be refreshed again.

        Args:
            token: Record from exchange_code/refresh, or its to_dict() form

        Returns:
            New TokenRecord with a fresh access token

        Raises:
            ConfigurationError: If client identity can't be resolved
            TokenRefreshError: If the token is malformed, has no refresh token,
                or Smartcar rejects it
            TransportError: On network failure, timeout or a server error
        """
        identity = self.identity
        if not isinstance(token, TokenRecord):
            try:
                token = TokenRecord.from_dict(token)
            except (KeyError, TypeError, ValueError) as e:
                raise TokenRefreshError(
                    f"Invalid token: {e!r}",
                    error_code="invalid_token",
                ) from e
        if not token.refresh_token:
            raise TokenRefreshError(
                "A refresh token is not available",
                error_code="missing_refresh_token",
            )

        try:
            data = self.endpoint.request_token(
                identity,
                {
                    "grant_type": GRANT_REFRESH_TOKEN,
                    "refresh_token": token.refresh_token,
                },
            )
            record = TokenRecord.from_response(data, previous_refresh_token=token.refresh_token)
        except TokenEndpointError as e:
            if e.status_code is not None and e.status_code >= 500:
                raise TransportError(
                    f"Token refresh failed: {e}",
                    error_code="server_error",
                    details=e.details,
                ) from e
            raise TokenRefreshError(
                f"Token refresh failed: {e}",
                status_code=e.status_code,
                error_code=e.error_code or "refresh_failed",
                details=e.details,
            ) from e

        logger.info("Refreshed access token (rotated=%s)", record.refresh_token != token.refresh_token)
        return record


_default_oauth: SmartcarOAuth | None = None
_default_lock = threading.Lock()


def get_oauth() -> SmartcarOAuth:
    """Process-wide client, created on first use.

    The client is only kept once its identity resolves, so a call that
    failed on missing configuration re-reads settings next time.

    Raises:
        ConfigurationError: If client identity can't be resolved
    """
    global _default_oauth
    oauth = _default_oauth
    if oauth is not None:
        return oauth
    with _default_lock:
        if _default_oauth is None:
            oauth = SmartcarOAuth()
            # Resolve before caching so a misconfigured client is never kept
            oauth.identity
            _default_oauth = oauth
        return _default_oauth


def reset_oauth() -> None:
    """Drop the process-wide client so the next call re-reads settings."""
    global _default_oauth
    with _default_lock:
        _default_oauth = None


def build_authorization_url(options: AuthorizationRequestOptions | None = None) -> str:
    return get_oauth().build_authorization_url(options)


def exchange_code(auth_code: str) -> TokenRecord:
    return get_oauth().exchange_code(auth_code)


def refresh(token: TokenRecord | Mapping[str, Any]) -> TokenRecord:
    return get_oauth().refresh(token)
