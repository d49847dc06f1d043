"""Authentication information for onedrivemgr (OAuth only)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

_AUTHORITY_HOST = "https://login.microsoftonline.com"


@dataclass(slots=True, frozen=True)
class AuthInfo:
    """
    Authentication information for the Microsoft identity platform.

    Only OAuth is supported:
        kind = "oauth"
        data must include:
            - client_secrets_file: installed-app client config JSON
            - token_file: authorized-user token JSON (created on first login)
        data may include:
            - tenant: directory tenant ("common" when omitted)
    """

    kind: str
    data: dict[str, Any]

    def __post_init__(self) -> None:
        if self.kind != "oauth":
            raise ValueError("AuthInfo.kind must be 'oauth'")

        if not isinstance(self.data, dict):
            raise TypeError("AuthInfo.data must be a dict")

        for key in ("client_secrets_file", "token_file"):
            value = self.data.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"AuthInfo.data['{key}'] must be a non-empty string")

        tenant = self.data.get("tenant", "common")
        if not isinstance(tenant, str) or not tenant.strip():
            raise ValueError("AuthInfo.data['tenant'] must be a non-empty string")

    @property
    def client_secrets_file(self) -> str:
        return str(self.data["client_secrets_file"])

    @property
    def token_file(self) -> str:
        return str(self.data["token_file"])

    @property
    def tenant(self) -> str:
        return str(self.data.get("tenant", "common"))

    @property
    def auth_uri(self) -> str:
        """Authorization endpoint for the configured tenant."""
        return f"{_AUTHORITY_HOST}/{self.tenant}/oauth2/v2.0/authorize"

    @property
    def token_uri(self) -> str:
        """Token endpoint for the configured tenant."""
        return f"{_AUTHORITY_HOST}/{self.tenant}/oauth2/v2.0/token"
