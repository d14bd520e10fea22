"""Smartcar OAuth configuration via pydantic-settings."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic_settings import BaseSettings

from .exceptions import ConfigurationError


ENV_PREFIX = "SMARTCAR_"
DEFAULT_AUTH_URL = "https://auth.smartcar.com"


class SmartcarSettings(BaseSettings):
    client_id: str = ""
    secret: str = ""
    callback_url: str = ""
    auth_url: str = DEFAULT_AUTH_URL
    timeout_seconds: float = 30.0

    model_config = {"env_prefix": ENV_PREFIX, "env_file": ".env", "extra": "ignore"}

    def get(self, name: str) -> str:
        """Return a required setting, failing if it is unset or blank.

        Args:
            name: Field name, e.g. ``"callback_url"``

        Raises:
            KeyError: If ``name`` is not a known setting
            ConfigurationError: If the value is unset or empty
        """
        if name not in type(self).model_fields:
            raise KeyError(name)
        value = getattr(self, name)
        if value is None or not str(value).strip():
            raise ConfigurationError(env_var_name(name))
        return str(value)


def env_var_name(name: str) -> str:
    return f"{ENV_PREFIX}{name.upper()}"


@dataclass(frozen=True)
class ClientIdentity:
    """Registered application identity used on every token-endpoint call.

    Values are kept out of ``repr()`` so the identity can't leak into logs
    or tracebacks by accident.
    """

    client_id: str = field(repr=False)
    client_secret: str = field(repr=False)
    callback_url: str = field(repr=False)

    @classmethod
    def from_settings(cls, settings: SmartcarSettings) -> "ClientIdentity":
        """Resolve every identity field, in order, from settings.

        The first missing value raises before anything else happens.

        Raises:
            ConfigurationError: If client id, secret or callback URL is missing
        """
        return cls(
            client_id=settings.get("client_id"),
            client_secret=settings.get("secret"),
            callback_url=settings.get("callback_url"),
        )
