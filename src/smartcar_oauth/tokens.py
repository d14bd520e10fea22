"""Token and authorization-request data types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from .exceptions import TokenEndpointError


# Smartcar access tokens are valid for two hours
DEFAULT_EXPIRES_IN = 7200

# Seconds before expires_at at which a token is already treated as expired
EXPIRY_BUFFER = 300

_RECORD_FIELDS = ("access_token", "refresh_token", "token_type", "expires_at")


@dataclass(frozen=True)
class AuthorizationRequestOptions:
    """Caller-supplied options for a single authorization URL.

    Attributes:
        state: Opaque value echoed back on the redirect, typically used to
            identify the user who started the flow
        make: Vehicle brand, skips the brand selection screen
        scope: Permissions to request, e.g. ["read_odometer", "read_vehicle_info"]
        force_prompt: Show the approval screen even if the user already consented
        test_mode: Use simulated vehicles instead of real ones
    """

    state: str | None = None
    make: str | None = None
    scope: tuple[str, ...] | None = None
    force_prompt: bool = False
    test_mode: bool = False

    def __post_init__(self):
        if self.scope is not None and not isinstance(self.scope, tuple):
            object.__setattr__(self, "scope", tuple(self.scope))


@dataclass
class TokenRecord:
    """Tokens returned by a successful token-endpoint exchange."""

    access_token: str
    refresh_token: str
    token_type: str
    expires_at: int  # Unix timestamp
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def is_expired(self) -> bool:
        """Check if access token is expired (with 5 min buffer)."""
        return datetime.now().timestamp() > (self.expires_at - EXPIRY_BUFFER)

    @property
    def expires_in_seconds(self) -> int:
        """Seconds until token expires."""
        return max(0, int(self.expires_at - datetime.now().timestamp()))

    @classmethod
    def from_response(
        cls,
        data: Mapping[str, Any],
        previous_refresh_token: str | None = None,
        now: int | None = None,
    ) -> "TokenRecord":
        """Parse a token-endpoint JSON response.

        Args:
            data: Decoded response body
            previous_refresh_token: Kept when a refresh response carries no
                new refresh token
            now: Issue time as Unix timestamp (defaults to the current time)

        Raises:
            TokenEndpointError: If required fields are missing
        """
        refresh_token = data.get("refresh_token") or previous_refresh_token
        missing = [name for name, value in (
            ("access_token", data.get("access_token")),
            ("refresh_token", refresh_token),
        ) if not value]
        if missing:
            raise TokenEndpointError(
                f"Invalid token response: missing {', '.join(missing)}",
                error_code="invalid_response",
                details={"missing_fields": missing, "response_keys": list(data.keys())},
            )

        if now is None:
            now = int(datetime.now().timestamp())
        try:
            if data.get("expires_at") is not None:
                expires_at = int(data["expires_at"])
            elif data.get("expires_in") is not None:
                expires_at = now + int(data["expires_in"])
            else:
                expires_at = now + DEFAULT_EXPIRES_IN
        except (TypeError, ValueError) as e:
            raise TokenEndpointError(
                f"Invalid token response: bad expiry ({e})",
                error_code="invalid_response",
                details={"response_keys": list(data.keys())},
            ) from e

        return cls(
            access_token=data["access_token"],
            refresh_token=refresh_token,
            token_type=data.get("token_type") or "Bearer",
            expires_at=expires_at,
            raw={k: v for k, v in data.items() if k not in _RECORD_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        """Flatten to a single mapping, suitable for the host app to persist."""
        data = dict(self.raw)
        data.update(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            token_type=self.token_type,
            expires_at=self.expires_at,
        )
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TokenRecord":
        """Rehydrate a record previously flattened with to_dict().

        Raises:
            KeyError: If access_token or expires_at is missing
            TypeError, ValueError: If expires_at isn't a timestamp
        """
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or "",
            token_type=data.get("token_type") or "Bearer",
            expires_at=int(data["expires_at"]),
            raw={k: v for k, v in data.items() if k not in _RECORD_FIELDS},
        )
