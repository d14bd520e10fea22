"""HTTP client for the Smartcar authorization server.

Knows the two endpoints of the authorization-code grant:
1. /oauth/authorize - browser-facing, only ever turned into a URL here
2. /oauth/token - server-to-server, called for code exchange and refresh
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote, urlencode

import httpx

from .config import DEFAULT_AUTH_URL, ClientIdentity
from .exceptions import TokenEndpointError, TransportError


logger = logging.getLogger(__name__)

AUTHORIZE_PATH = "/oauth/authorize"
TOKEN_PATH = "/oauth/token"

# Authorization request values
CODE = "code"
AUTO = "auto"
FORCE = "force"
LIVE = "live"
TEST = "test"

# Token request grant types
GRANT_AUTHORIZATION_CODE = "authorization_code"
GRANT_REFRESH_TOKEN = "refresh_token"


class TokenEndpointClient:
    """Builds authorization URLs and performs token-endpoint requests.

    Usage:
        endpoint = TokenEndpointClient()
        url = endpoint.authorize_url("client_id", {"response_type": "code", ...})
        data = endpoint.request_token(identity, {"grant_type": "authorization_code", ...})

    By default a short-lived httpx.Client is opened per request. Pass
    ``http_client`` to reuse a connection pool owned by the host app.
    """

    def __init__(
        self,
        auth_url: str = DEFAULT_AUTH_URL,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ):
        self.auth_url = auth_url.rstrip("/")
        self.timeout = timeout
        self._http_client = http_client

    @property
    def token_url(self) -> str:
        return f"{self.auth_url}{TOKEN_PATH}"

    def authorize_url(self, client_id: str, params: dict[str, str]) -> str:
        """Assemble the authorization URL the user is redirected to.

        Spaces are encoded as ``%20`` so a scope list reads
        ``scope=read_odometer%20read_vehicle_info``.
        """
        query = {"client_id": client_id, **params}
        return f"{self.auth_url}{AUTHORIZE_PATH}?{urlencode(query, quote_via=quote)}"

    def request_token(self, identity: ClientIdentity, form: dict[str, str]) -> dict[str, Any]:
        """POST a grant to the token endpoint and return the decoded JSON body.

        Args:
            identity: Client credentials, sent as HTTP Basic auth
            form: Grant parameters (``grant_type`` plus grant-specific fields)

        Raises:
            TransportError: On timeout or any other network failure
            TokenEndpointError: On a non-2xx response or a malformed body
        """
        grant_type = form.get("grant_type")
        try:
            if self._http_client is not None:
                response = self._post(self._http_client, identity, form)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = self._post(client, identity, form)
        except httpx.TimeoutException as e:
            logger.warning("Token endpoint timed out (grant_type=%s)", grant_type)
            raise TransportError(
                f"Token endpoint timed out: {e}",
                error_code="timeout",
            ) from e
        except httpx.RequestError as e:
            logger.warning("Token endpoint unreachable (grant_type=%s): %s", grant_type, type(e).__name__)
            raise TransportError(
                f"Token endpoint request failed: {e}",
                error_code="transport",
            ) from e

        if not 200 <= response.status_code < 300:
            error_data = _error_body(response)
            logger.warning(
                "Token endpoint rejected request (grant_type=%s, status=%s, error=%s)",
                grant_type,
                response.status_code,
                error_data.get("error"),
            )
            raise TokenEndpointError(
                f"Token request failed: {response.status_code}",
                status_code=response.status_code,
                error_code=error_data.get("error", "request_failed"),
                details=error_data,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TokenEndpointError(
                "Invalid token response: body is not JSON",
                status_code=response.status_code,
                error_code="invalid_response",
                details={"raw_response": response.text[:500]},
            ) from e
        if not isinstance(data, dict):
            raise TokenEndpointError(
                "Invalid token response: expected a JSON object",
                status_code=response.status_code,
                error_code="invalid_response",
            )
        return data

    def _post(self, client: httpx.Client, identity: ClientIdentity, form: dict[str, str]) -> httpx.Response:
        return client.post(
            self.token_url,
            data=form,
            auth=(identity.client_id, identity.client_secret),
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        if self._http_client is not None:
            self._http_client.close()

    def __enter__(self) -> "TokenEndpointClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        error_data = response.json() if response.content else {}
    except ValueError:
        error_data = {"raw_response": response.text[:500]}
    if not isinstance(error_data, dict):
        error_data = {"raw_response": error_data}
    return error_data
